"""
Pytest configuration for the datagen load generator.

Provides fixtures for:
- Deterministic random sources and clocks for the generators
- An in-memory sink that records what a run wrote
- Settings isolated from the developer's environment and .env file
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Sequence

import pytest

from datagen.config import Settings
from datagen.domain.models import SinkRecord
from datagen.sinks.abstract import AbstractSink

FIXED_NOW = datetime(2024, 5, 17, 12, 30, 45, 123456, tzinfo=timezone(timedelta(hours=2)))


class CollectingSink(AbstractSink):
    """Sink that keeps every record in memory and tracks its lifecycle."""

    name = "collect"

    def __init__(self) -> None:
        self.records: List[SinkRecord] = []
        self.prepared_topics: List[str] = []
        self.close_calls = 0

    async def prepare(self, topics: Sequence[str]) -> None:
        self.prepared_topics = list(topics)

    async def write(self, record: SinkRecord) -> None:
        self.records.append(record)

    async def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def collecting_sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings with defaults only; ignores the process environment's .env file.
    """
    return Settings(_env_file=None, log_level="DEBUG")
