"""Event Publishers — read-event side channel with sync or fire-and-forget delivery.

Invariants:
    - publish() never raises: delivery failures become a logged PublishError
    - SYNC mode awaits the broker acknowledgment before returning
    - ASYNC mode schedules delivery on a detached task and returns immediately;
      the request never observes the outcome
    - Detached tasks are strongly referenced until done, and drained on close()

Design Decisions:
    - Delivery mode is fixed at construction (deployment config), never per call
    - aiokafka producer with acks=all; payload is compact JSON, keyed by user id
    - LoggingPublisher stands in when no brokers are configured: the event still
      shows up in the structured log
"""

import asyncio
import json
import logging

from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError

from app.core.domain_types import PublishMode
from app.core.errors import PublishError

logger = logging.getLogger(__name__)


def encode_event(payload: dict) -> bytes:
    return json.dumps(payload, separators=(",", ":"), sort_keys=True).encode()


class KafkaEventPublisher:
    """Publishes each event to one Kafka topic."""

    def __init__(
        self,
        producer: AIOKafkaProducer,
        topic: str,
        mode: PublishMode = PublishMode.SYNC,
    ):
        self._producer = producer
        self.topic = topic
        self.mode = mode
        self._pending: set[asyncio.Task] = set()

    @classmethod
    async def connect(
        cls, brokers: str, topic: str, mode: PublishMode,
    ) -> "KafkaEventPublisher":
        producer = AIOKafkaProducer(
            bootstrap_servers=brokers,
            acks="all",
            request_timeout_ms=30000,
            retry_backoff_ms=100,
        )
        await producer.start()
        logger.info(
            f"Event publisher connected ({mode.value})",
            extra={"topic": topic},
        )
        return cls(producer, topic, mode)

    async def publish(self, payload: dict) -> None:
        if self.mode is PublishMode.SYNC:
            await self._deliver(payload)
            return
        task = asyncio.create_task(self._deliver(payload))
        self._pending.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Detached publish failed: {exc}",
                extra={"topic": self.topic}, exc_info=exc,
            )

    async def _deliver(self, payload: dict) -> None:
        key = payload.get("id")
        try:
            await self._producer.send_and_wait(
                self.topic,
                value=encode_event(payload),
                key=key.encode() if isinstance(key, str) else None,
            )
        except (KafkaError, OSError, ValueError) as e:
            err = PublishError(str(e), self.topic)
            logger.warning(
                err.message,
                extra={"topic": self.topic, "error_code": err.code},
            )

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def close(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self._producer.stop()
        logger.info("Event publisher closed", extra={"topic": self.topic})


class LoggingPublisher:
    """Publisher without a broker: writes each event to the log."""

    def __init__(self, topic: str = "log"):
        self.topic = topic

    async def publish(self, payload: dict) -> None:
        logger.info(
            f"read event {encode_event(payload).decode()}",
            extra={"topic": self.topic, "user_id": payload.get("id")},
        )

    async def close(self) -> None:
        return None
