from __future__ import annotations

import io
import json
from typing import Any, List, Optional, Tuple

import pytest
from aiokafka.errors import InvalidReplicationFactorError, KafkaTimeoutError

from datagen.domain.models import ClickEvent, OrderEvent
from datagen.generators.ad_click import AdClickGenerator
from datagen.infrastructure import kafka_factory
from datagen.orchestrator import RunConfig, run_load
from datagen.sinks import kafka as kafka_module
from datagen.sinks import postgres as postgres_module
from datagen.sinks.abstract import Sink
from datagen.sinks.console import ConsoleSink
from datagen.sinks.kafka import KafkaSink
from datagen.sinks.postgres import PostgresSink

TS_NAIVE = "2024-05-17 12:30:45.123456"
TS_TZ = "2024-05-17 12:30:45.123456+02:00"


def _click() -> ClickEvent:
    return ClickEvent(user_id=42, ad_id=3, click_timestamp=TS_TZ, impression_timestamp=TS_TZ)


def _order() -> OrderEvent:
    return OrderEvent(order_id=1, item_id=2, item_price=3.25, event_timestamp=TS_NAIVE)


class _FakeAsyncConnection:
    def __init__(self) -> None:
        self.executed: List[Tuple[Any, Tuple[Any, ...]]] = []
        self.closed = False

    async def execute(self, query: Any, params: Tuple[Any, ...]) -> None:
        self.executed.append((query, params))

    async def close(self) -> None:
        self.closed = True


class _FakeProducer:
    """Acknowledges every send, or fails it with ``error`` once set."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.sent: List[Tuple[str, bytes, bytes]] = []
        self.error = error
        self.stopped = False

    async def send_and_wait(self, topic: str, value: bytes, key: bytes) -> int:
        if self.error is not None:
            raise self.error
        self.sent.append((topic, value, key))
        return len(self.sent) - 1

    async def stop(self) -> None:
        self.stopped = True


def test_concrete_sinks_satisfy_the_protocol(test_settings):
    for sink in (ConsoleSink(), PostgresSink(), KafkaSink(test_settings)):
        assert isinstance(sink, Sink)


@pytest.mark.asyncio
async def test_console_sink_prints_topic_key_and_document():
    stream = io.StringIO()
    sink = ConsoleSink(stream=stream)

    await sink.write(_click())

    topic, key, document = stream.getvalue().rstrip("\n").split(" ", 2)
    assert (topic, key) == ("ad_clicks", "42")
    assert json.loads(document)["impression_timestamp"] == TS_TZ


@pytest.mark.asyncio
async def test_postgres_sink_executes_parameterized_inserts(monkeypatch):
    conn = _FakeAsyncConnection()
    dsns: List[Any] = []

    async def fake_get_async_connection(dsn=None):
        dsns.append(dsn)
        return conn

    monkeypatch.setattr(postgres_module, "get_async_connection", fake_get_async_connection)
    sink = PostgresSink(dsn_override="postgresql://test")

    await sink.prepare(["order_events"])
    await sink.write(_order())
    await sink.close()
    await sink.close()

    assert dsns == ["postgresql://test"]
    ((query, params),) = conn.executed
    assert params == (1, 2, 3.25, TS_NAIVE)
    assert query.as_string(None).startswith('INSERT INTO "order_events"')
    assert conn.closed is True


@pytest.mark.asyncio
async def test_postgres_sink_requires_prepare():
    with pytest.raises(RuntimeError, match="before prepare"):
        await PostgresSink().write(_order())


@pytest.mark.asyncio
async def test_kafka_sink_provisions_topics_and_publishes_keyed_json(monkeypatch, test_settings):
    producer = _FakeProducer()
    provisioned: List[List[str]] = []

    async def fake_ensure_topics(topics, settings=None):
        provisioned.append(list(topics))
        return list(topics)

    async def fake_start_producer(bootstrap_servers=None):
        assert bootstrap_servers == test_settings.kafka_bootstrap_servers
        return producer

    monkeypatch.setattr(kafka_module, "ensure_topics", fake_ensure_topics)
    monkeypatch.setattr(kafka_module, "start_producer", fake_start_producer)
    sink = KafkaSink(test_settings)

    await sink.prepare(["ad_clicks"])
    await sink.write(_click())
    await sink.close()

    assert provisioned == [["ad_clicks"]]
    ((topic, value, key),) = producer.sent
    assert topic == "ad_clicks"
    assert key == b"42"
    assert ClickEvent.model_validate_json(value) == _click()
    assert producer.stopped is True


@pytest.mark.asyncio
async def test_kafka_sink_can_skip_topic_creation(monkeypatch, test_settings):
    async def fail_ensure_topics(topics, settings=None):
        raise AssertionError("topics must not be created")

    async def fake_start_producer(bootstrap_servers=None):
        return _FakeProducer()

    monkeypatch.setattr(kafka_module, "ensure_topics", fail_ensure_topics)
    monkeypatch.setattr(kafka_module, "start_producer", fake_start_producer)
    sink = KafkaSink(test_settings, create_topics=False)

    await sink.prepare(["ad_clicks"])
    await sink.close()


@pytest.mark.asyncio
async def test_kafka_delivery_failure_ends_the_run(monkeypatch, test_settings, rng, fixed_clock):
    producer = _FakeProducer(error=KafkaTimeoutError("no acknowledgement"))

    async def fake_start_producer(bootstrap_servers=None):
        return producer

    monkeypatch.setattr(kafka_module, "start_producer", fake_start_producer)
    sink = KafkaSink(test_settings, create_topics=False)
    generator = AdClickGenerator(rng, clock=fixed_clock)

    with pytest.raises(KafkaTimeoutError):
        await run_load(generator, sink, RunConfig(mode="ad-click", max_records=5))

    assert producer.sent == []
    assert producer.stopped is True


class _FakeCreateTopicsResponse:
    def __init__(self, topic_errors: List[Tuple[Any, ...]]) -> None:
        self.topic_errors = topic_errors


class _FakeAdminClient:
    """Stands in for AIOKafkaAdminClient; answers create_topics with fixed per-topic errors."""

    existing: List[str] = []
    topic_errors: List[Tuple[Any, ...]] = []
    requested: List[str] = []
    closed = False

    def __init__(self, bootstrap_servers: str) -> None:
        self.bootstrap_servers = bootstrap_servers

    async def start(self) -> None:
        pass

    async def list_topics(self) -> List[str]:
        return list(self.existing)

    async def create_topics(self, new_topics) -> _FakeCreateTopicsResponse:
        type(self).requested = [topic.name for topic in new_topics]
        return _FakeCreateTopicsResponse(self.topic_errors)

    async def close(self) -> None:
        type(self).closed = True


@pytest.fixture
def fake_admin(monkeypatch):
    admin = type("_Admin", (_FakeAdminClient,), {"existing": [], "topic_errors": [], "requested": []})
    monkeypatch.setattr(kafka_factory, "AIOKafkaAdminClient", admin)
    return admin


@pytest.mark.asyncio
async def test_ensure_topics_creates_only_missing_topics(fake_admin, test_settings):
    fake_admin.existing = ["order_events"]
    fake_admin.topic_errors = [("parcel_events", 0, None)]

    created = await kafka_factory.ensure_topics(["order_events", "parcel_events"], test_settings)

    assert fake_admin.requested == ["parcel_events"]
    assert created == ["parcel_events"]
    assert fake_admin.closed is True


@pytest.mark.asyncio
async def test_ensure_topics_tolerates_topic_created_concurrently(fake_admin, test_settings):
    fake_admin.topic_errors = [
        ("order_events", 36, "Topic 'order_events' already exists."),
        ("parcel_events", 0, None),
    ]

    created = await kafka_factory.ensure_topics(["order_events", "parcel_events"], test_settings)

    assert created == ["parcel_events"]


@pytest.mark.asyncio
async def test_ensure_topics_raises_broker_rejection(fake_admin, test_settings):
    fake_admin.topic_errors = [("ad_clicks", 38, "Replication factor: 3 larger than available brokers: 1.")]

    with pytest.raises(InvalidReplicationFactorError, match="ad_clicks"):
        await kafka_factory.ensure_topics(["ad_clicks"], test_settings)

    assert fake_admin.closed is True


@pytest.mark.asyncio
async def test_ensure_topics_skips_request_when_all_exist(fake_admin, test_settings):
    fake_admin.existing = ["ad_clicks"]

    assert await kafka_factory.ensure_topics(["ad_clicks"], test_settings) == []
    assert fake_admin.requested == []
