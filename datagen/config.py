"""
Configuration settings for the datagen load generator.

Uses Pydantic Settings to load environment variables for generator tuning,
destination sinks (PostgreSQL, Kafka) and logging.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Generator
    seed: int = Field(0, alias="DATAGEN_SEED")
    qps: Optional[float] = Field(None, alias="DATAGEN_QPS")
    queue_size: int = Field(1_000, alias="DATAGEN_QUEUE_SIZE")
    report_interval_seconds: float = Field(10.0, alias="DATAGEN_REPORT_INTERVAL_SECONDS")
    catalog_size: int = Field(1_000, alias="DATAGEN_CATALOG_SIZE")
    max_pending_orders: int = Field(1, alias="DATAGEN_MAX_PENDING_ORDERS")

    # PostgreSQL sink
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("dev", alias="DB_NAME")

    # Kafka sink
    kafka_bootstrap_servers: str = Field("localhost:9092", alias="KAFKA_BOOTSTRAP_SERVERS")
    kafka_num_partitions: int = Field(1, alias="KAFKA_NUM_PARTITIONS")
    kafka_replication_factor: int = Field(1, alias="KAFKA_REPLICATION_FACTOR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
