"""
Change feed for the push-based read surface.

Stores publish a ChangeEvent after every committed mutation of shifts,
bookings or admins. Any number of consumers subscribe and re-render from the
latest snapshot of the affected collection; the ledger does not know or care
how many there are.

DELIVERY
========
  - In-process: each subscriber owns a bounded asyncio.Queue. When a slow
    subscriber's queue is full the oldest event is dropped, which is safe
    because every event only means "re-read this collection".
  - Cross-process: when Redis is enabled, events are also PUBLISHed on
    FEED_CHANNEL, and a relay task fans in events from other processes.
    Events carry the publishing instance id so a process never re-delivers
    its own events.
  - Redis failures never fail the mutation that triggered the event
    (fail open, same as the rest of the Redis usage).
"""

import asyncio
import json
import uuid
from contextlib import suppress
from dataclasses import asdict, dataclass, field
from typing import Optional

from shiftbook.core.config import get_settings
from shiftbook.core.logging import get_logger
from shiftbook.infrastructure.redis_client import get_redis

logger = get_logger(__name__)
settings = get_settings()

COLLECTIONS = ("shifts", "bookings", "admins")
INSTANCE_ID = uuid.uuid4().hex


@dataclass(frozen=True)
class ChangeEvent:
    collection: str
    action: str  # created, updated, deleted
    id: Optional[int] = None
    origin: str = field(default=INSTANCE_ID)

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str) -> "ChangeEvent":
        data = json.loads(raw)
        if data.get("collection") not in COLLECTIONS:
            raise ValueError(f"unknown collection: {data.get('collection')!r}")
        return cls(
            collection=data["collection"],
            action=data["action"],
            id=data.get("id"),
            origin=data.get("origin", ""),
        )


class Subscription:
    """Async iterator over change events, registered on creation."""

    def __init__(self, feed: "ChangeFeed", queue: asyncio.Queue) -> None:
        self._feed = feed
        self._queue = queue

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> ChangeEvent:
        return await self._queue.get()

    async def get(self, timeout: Optional[float] = None) -> ChangeEvent:
        return await asyncio.wait_for(self._queue.get(), timeout)

    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self) -> list[ChangeEvent]:
        """Take every queued event without waiting."""
        events = []
        while not self._queue.empty():
            events.append(self._queue.get_nowait())
        return events

    def close(self) -> None:
        self._feed._unsubscribe(self._queue)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()


class ChangeFeed:
    def __init__(self, queue_size: int = 100, channel: str = "shiftbook:changes") -> None:
        self._queue_size = queue_size
        self._channel = channel
        self._subscribers: set[asyncio.Queue] = set()
        self._relay_task: Optional[asyncio.Task] = None
        self._pubsub = None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.add(queue)
        logger.debug("feed_subscribed", subscribers=len(self._subscribers))
        return Subscription(self, queue)

    def _unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)
        logger.debug("feed_unsubscribed", subscribers=len(self._subscribers))

    def _fan_out(self, event: ChangeEvent) -> None:
        for queue in list(self._subscribers):
            if queue.full():
                queue.get_nowait()
                logger.debug("feed_event_dropped", collection=event.collection)
            queue.put_nowait(event)

    async def publish(self, collection: str, action: str, record_id: Optional[int] = None) -> ChangeEvent:
        if collection not in COLLECTIONS:
            raise ValueError(f"unknown collection: {collection!r}")

        event = ChangeEvent(collection=collection, action=action, id=record_id)
        self._fan_out(event)

        client = await get_redis()
        if client:
            try:
                await client.publish(self._channel, event.to_json())
            except Exception as e:
                logger.warning("feed_publish_failed", channel=self._channel, error=str(e))
        return event

    async def start_relay(self) -> bool:
        """Relay events published by other processes. Returns False without Redis."""
        client = await get_redis()
        if not client or self._relay_task is not None:
            return False

        self._pubsub = client.pubsub()
        await self._pubsub.subscribe(self._channel)
        self._relay_task = asyncio.create_task(self._relay())
        logger.info("feed_relay_started", channel=self._channel)
        return True

    async def _relay(self) -> None:
        async for message in self._pubsub.listen():
            if message.get("type") != "message":
                continue
            try:
                event = ChangeEvent.from_json(message["data"])
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("feed_message_invalid", error=str(e))
                continue
            if event.origin == INSTANCE_ID:
                continue
            self._fan_out(event)

    async def stop_relay(self) -> None:
        if self._relay_task is not None:
            self._relay_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._relay_task
            self._relay_task = None
        if self._pubsub is not None:
            with suppress(Exception):
                await self._pubsub.unsubscribe(self._channel)
                await self._pubsub.aclose()
            self._pubsub = None
        logger.info("feed_relay_stopped")


change_feed = ChangeFeed(queue_size=settings.FEED_QUEUE_SIZE, channel=settings.FEED_CHANNEL)
