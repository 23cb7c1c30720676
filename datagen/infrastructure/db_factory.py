"""
Database connection factory for the PostgreSQL sink.

Builds the DSN from settings and opens async psycopg connections, retrying
transient connection failures with tenacity before giving up.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import AsyncConnection
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from datagen.config import Settings, get_settings


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
async def get_async_connection(dsn: Optional[str] = None) -> AsyncConnection:
    """
    Open an autocommit asynchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Parameters
    ----------
    dsn : str, optional
        Connection string override; defaults to the one built from settings.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return await AsyncConnection.connect(dsn or build_dsn(), autocommit=True)


__all__ = ["build_dsn", "get_async_connection"]
