"""
Kafka client factory for the message-bus sink.

Starts aiokafka producers with retry on broker unavailability and provisions
the topics a generator writes to before the first record is published.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from aiokafka import AIOKafkaProducer
from aiokafka.admin import AIOKafkaAdminClient, NewTopic
from aiokafka.errors import KafkaConnectionError, TopicAlreadyExistsError, for_code
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from datagen.config import Settings, get_settings
from datagen.utils.logging import get_logger

log = get_logger(__name__)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(KafkaConnectionError),
    reraise=True,
)
async def start_producer(bootstrap_servers: Optional[str] = None) -> AIOKafkaProducer:
    """
    Create and start a producer, retrying while the brokers are unreachable.

    A producer that failed to start is stopped before the next attempt.
    """
    producer = AIOKafkaProducer(
        bootstrap_servers=bootstrap_servers or get_settings().kafka_bootstrap_servers,
        acks=1,
        linger_ms=0,
    )
    try:
        await producer.start()
    except KafkaConnectionError:
        await producer.stop()
        raise
    return producer


async def ensure_topics(topics: Iterable[str], settings: Optional[Settings] = None) -> List[str]:
    """
    Create every topic in ``topics`` that does not exist yet.

    A topic another client created between the listing and the creation
    request counts as existing. Any other per-topic broker error is raised.

    Returns
    -------
    list[str]
        The topics that were created by this call.

    Raises
    ------
    aiokafka.errors.KafkaError
        The broker rejected a topic, e.g. with an invalid replication factor.
    """
    settings = settings or get_settings()
    admin = AIOKafkaAdminClient(bootstrap_servers=settings.kafka_bootstrap_servers)
    await admin.start()
    try:
        existing = set(await admin.list_topics())
        missing = [topic for topic in topics if topic not in existing]
        if not missing:
            return []
        response = await admin.create_topics(
            [
                NewTopic(
                    name=topic,
                    num_partitions=settings.kafka_num_partitions,
                    replication_factor=settings.kafka_replication_factor,
                )
                for topic in missing
            ]
        )
        created: List[str] = []
        for topic, error_code, *rest in response.topic_errors:
            if error_code == TopicAlreadyExistsError.errno:
                log.info("Topic already exists", extra={"topic": topic})
            elif error_code:
                message = rest[0] if rest and rest[0] else topic
                raise for_code(error_code)(f"Cannot create topic {topic!r}: {message}")
            else:
                created.append(topic)
        if created:
            log.info("Created topics", extra={"topics": created})
        return created
    finally:
        await admin.close()


__all__ = ["ensure_topics", "start_producer"]
