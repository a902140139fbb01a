"""Kafka driver for seeding topics.

Topics cannot be emptied in place, so truncation deletes records up to the
current high watermark of every partition that holds data. Insertion
produces one message per fixture and waits for its delivery before
producing the next, so fixture order is produce order.

confluent-kafka clients are blocking; every call runs in the default
executor so the event loop stays free for the other drivers.

Installation:
    pip install confluent-kafka

Example:
    >>> from confluent_kafka import Consumer, Producer
    >>> from confluent_kafka.admin import AdminClient
    >>> conf = {"bootstrap.servers": "localhost:9092"}
    >>> driver = KafkaDriver(
    ...     AdminClient(conf),
    ...     Consumer({**conf, "group.id": "dbfixtures"}),
    ...     Producer(conf),
    ... )
    >>> await driver.truncate(["orders"])
    >>> await driver.insert_fixtures("orders", [KafkaMessage(key="1", value="{}")])
"""

from __future__ import annotations

import asyncio
import functools
import json
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar, Union

from confluent_kafka import Consumer, KafkaError, KafkaException, Producer, TopicPartition
from confluent_kafka.admin import AdminClient

from dbfixtures.errors import DeliveryError, ErrorContext, FlushTimeoutError
from dbfixtures.ports.driver import BaseDriver

logger = logging.getLogger(__name__)

R = TypeVar("R")

_MISSING_TOPIC_CODES = frozenset({KafkaError.UNKNOWN_TOPIC_OR_PART, KafkaError._UNKNOWN_TOPIC})


@dataclass(frozen=True)
class KafkaMessage:
    """A fixture message: key, value and optional headers.

    Values that are not str or bytes are JSON encoded when produced.
    """

    value: Any = None
    key: Any = None
    headers: Mapping[str, str | bytes] | None = None

    @classmethod
    def from_fixture(cls, fixture: KafkaMessage | Mapping[str, Any] | Any) -> KafkaMessage:
        """Build a message from a KafkaMessage, a mapping, or a bare value."""
        if isinstance(fixture, KafkaMessage):
            return fixture
        if isinstance(fixture, Mapping) and ("value" in fixture or "key" in fixture):
            return cls(
                value=fixture.get("value"),
                key=fixture.get("key"),
                headers=fixture.get("headers"),
            )
        return cls(value=fixture)

    def produce_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"value": _encode(self.value), "key": _encode(self.key)}
        if self.headers:
            kwargs["headers"] = {name: _encode(value) for name, value in self.headers.items()}
        return kwargs


KafkaFixture = Union[KafkaMessage, Mapping[str, Any]]


def _encode(value: Any) -> str | bytes | None:
    if value is None or isinstance(value, (str, bytes)):
        return value
    return json.dumps(value)


class KafkaDriver(BaseDriver[KafkaFixture]):
    """Driver seeding Kafka topics with messages.

    Attributes:
        metadata_timeout: Seconds to wait for topic metadata.
        watermark_timeout: Seconds to wait for each partition's watermarks.
        produce_timeout: Seconds to wait for each message's delivery.
        close_flush_timeout: Seconds to wait for the producer to flush on close.
    """

    driver_name = "kafka"

    def __init__(
        self,
        admin_client: AdminClient,
        consumer: Consumer,
        producer: Producer,
        metadata_timeout: float = 10.0,
        watermark_timeout: float = 10.0,
        produce_timeout: float = 10.0,
        close_flush_timeout: float = 5.0,
    ) -> None:
        """Initialize the Kafka driver.

        Args:
            admin_client: Admin client used for metadata and record deletion.
            consumer: Consumer used to query partition watermarks.
            producer: Producer used to insert fixtures.
            metadata_timeout: Timeout for topic metadata requests.
            watermark_timeout: Timeout for watermark queries.
            produce_timeout: Timeout for each message delivery.
            close_flush_timeout: Timeout for the final producer flush.
        """
        self._admin = admin_client
        self._consumer = consumer
        self._producer = producer
        self.metadata_timeout = metadata_timeout
        self.watermark_timeout = watermark_timeout
        self.produce_timeout = produce_timeout
        self.close_flush_timeout = close_flush_timeout

    async def truncate(self, names: Sequence[str]) -> None:
        """Delete every visible record of the given topics."""
        for topic in names:
            await self._run(self._truncate_topic, topic)

    async def insert_fixtures(self, name: str, fixtures: Sequence[KafkaFixture]) -> None:
        """Produce each fixture to the topic, one delivered message at a time.

        Raises:
            DeliveryError: If the broker rejects a message.
            FlushTimeoutError: If a message is not delivered in time.
        """
        for fixture in fixtures:
            await self._run(self._produce, name, KafkaMessage.from_fixture(fixture))
        if fixtures:
            logger.debug(f"Produced {len(fixtures)} message(s) to Kafka topic '{name}'")

    async def close(self) -> None:
        """Close the consumer, flush the producer and release the admin client."""
        await self._run(self._close)

    async def _run(self, func: Callable[..., R], *args: Any) -> R:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    def _partitions(self, topic: str) -> list[int]:
        metadata = self._admin.list_topics(topic=topic, timeout=self.metadata_timeout)
        topic_metadata = metadata.topics.get(topic)
        if topic_metadata is None:
            return []
        if topic_metadata.error is not None:
            if topic_metadata.error.code() in _MISSING_TOPIC_CODES:
                return []
            raise KafkaException(topic_metadata.error)
        return sorted(topic_metadata.partitions)

    def _truncate_topic(self, topic: str) -> None:
        offsets: list[TopicPartition] = []
        for partition in self._partitions(topic):
            low, high = self._consumer.get_watermark_offsets(
                TopicPartition(topic, partition),
                timeout=self.watermark_timeout,
            )
            if high > low:
                offsets.append(TopicPartition(topic, partition, high))

        if not offsets:
            logger.debug(f"Kafka topic '{topic}' holds no records, nothing to delete")
            return

        futures = self._admin.delete_records(offsets)
        for future in futures.values():
            future.result()
        logger.debug(f"Deleted records from {len(offsets)} partition(s) of Kafka topic '{topic}'")

    def _produce(self, topic: str, message: KafkaMessage) -> None:
        report: dict[str, Any] = {}

        def on_delivery(err: KafkaError | None, msg: Any) -> None:
            report["error"] = err

        self._producer.produce(topic, on_delivery=on_delivery, **message.produce_kwargs())
        remaining = self._producer.flush(self.produce_timeout)
        context = ErrorContext(driver=self.driver_name, target=topic, operation="insert_fixtures")
        if remaining > 0:
            raise FlushTimeoutError(
                message=f"Message to topic '{topic}' not delivered within {self.produce_timeout}s",
                remaining=remaining,
                context=context,
            )
        error = report.get("error")
        if error is not None:
            raise DeliveryError(
                message=f"Failed to deliver message to topic '{topic}': {error}",
                context=context,
            )

    def _close(self) -> None:
        # Every step runs; the first error is raised once all have run.
        errors: list[Exception] = []
        try:
            self._consumer.close()
        except Exception as e:
            logger.error(f"Closing Kafka consumer failed: {e!r}")
            errors.append(e)
        try:
            remaining = self._producer.flush(self.close_flush_timeout)
            if remaining > 0:
                logger.warning(f"{remaining} Kafka message(s) still queued after close")
        except Exception as e:
            logger.error(f"Flushing Kafka producer failed: {e!r}")
            errors.append(e)
        self._admin = None
        logger.info("Closed Kafka clients")
        if errors:
            raise errors[0]
