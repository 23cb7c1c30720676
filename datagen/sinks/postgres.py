"""
PostgreSQL sink: insert each record as a row of its table.

Statements come from the record's `to_sql()` projection, so values are bound as
parameters. The connection is autocommit; each insert is visible to the
streaming database as soon as it returns.
"""

from __future__ import annotations

from typing import Optional, Sequence

from psycopg import AsyncConnection

from datagen.domain.models import SinkRecord
from datagen.infrastructure.db_factory import get_async_connection
from datagen.sinks.abstract import AbstractSink
from datagen.utils.logging import get_logger

log = get_logger(__name__)


class PostgresSink(AbstractSink):
    """Row-insert sink on a single psycopg async connection."""

    name: str = "postgres"

    def __init__(self, dsn_override: Optional[str] = None) -> None:
        self._dsn_override = dsn_override
        self._conn: Optional[AsyncConnection] = None

    async def prepare(self, topics: Sequence[str]) -> None:
        if self._conn is None:
            self._conn = await get_async_connection(self._dsn_override)
            log.info("Connected to PostgreSQL", extra={"topics": list(topics)})

    async def write(self, record: SinkRecord) -> None:
        if self._conn is None:
            raise RuntimeError("PostgresSink.write() called before prepare()")
        query, params = record.to_sql()
        await self._conn.execute(query, params)

    async def close(self) -> None:
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await conn.close()


__all__ = ["PostgresSink"]
