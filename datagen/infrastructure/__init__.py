"""
Infrastructure package for the datagen load generator.

Centralizes connectivity to the destinations (PostgreSQL connections, Kafka
producers and topic provisioning). Keep this layer focused on I/O and resource
management, decoupled from generator/driver logic.
"""

from datagen.infrastructure.db_factory import build_dsn, get_async_connection
from datagen.infrastructure.kafka_factory import ensure_topics, start_producer

__all__ = [
    "build_dsn",
    "ensure_topics",
    "get_async_connection",
    "start_producer",
]
