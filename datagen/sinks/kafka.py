"""
Kafka sink: publish each record's JSON document to its topic.

Records are keyed by their partition key so every event of one entity lands on
the same partition. Each write waits for the broker acknowledgement, so a
delivery failure surfaces from `write` and ends the run.
"""

from __future__ import annotations

from typing import Optional, Sequence

from aiokafka import AIOKafkaProducer

from datagen.config import Settings, get_settings
from datagen.domain.models import SinkRecord
from datagen.infrastructure.kafka_factory import ensure_topics, start_producer
from datagen.sinks.abstract import AbstractSink


class KafkaSink(AbstractSink):
    """Message-bus sink backed by an aiokafka producer."""

    name: str = "kafka"

    def __init__(self, settings: Optional[Settings] = None, create_topics: bool = True) -> None:
        self._settings = settings or get_settings()
        self._create_topics = create_topics
        self._producer: Optional[AIOKafkaProducer] = None

    async def prepare(self, topics: Sequence[str]) -> None:
        if self._create_topics:
            await ensure_topics(topics, self._settings)
        if self._producer is None:
            self._producer = await start_producer(self._settings.kafka_bootstrap_servers)

    async def write(self, record: SinkRecord) -> None:
        if self._producer is None:
            raise RuntimeError("KafkaSink.write() called before prepare()")
        value = record.to_json()
        await self._producer.send_and_wait(record.topic, value=value, key=record.key.encode("utf-8"))

    async def close(self) -> None:
        if self._producer is not None:
            producer, self._producer = self._producer, None
            await producer.stop()


__all__ = ["KafkaSink"]
