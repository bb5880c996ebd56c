"""Fan-out of price updates to live subscribers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .models import Ticker
from .store import PriceStore

logger = logging.getLogger(__name__)

_CLOSED = object()  # Wakes a consumer blocked on an empty queue


class Subscription:
    """One subscriber's bounded message queue.

    Async-iterate it to receive messages; iteration ends once the hub
    unsubscribes or drops it. Messages still buffered when the subscription
    is closed are discarded.
    """

    def __init__(self, maxsize: int) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self.dropped = False

    @property
    def closed(self) -> bool:
        return self._closed

    def pending(self) -> int:
        return self._queue.qsize()

    def offer(self, message: dict) -> bool:
        """Enqueue without waiting. False if the queue is full."""
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            return False
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            pass  # Consumer is not blocked on get(); it will see the flag.

    def get_nowait(self) -> dict | None:
        """Next buffered message, or None if nothing is buffered or closed."""
        if self._closed:
            return None
        try:
            item = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
        return None if item is _CLOSED else item

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> dict:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED or self._closed:
            raise StopAsyncIteration
        return item


class BroadcastHub:
    """Owns the subscriber set and pushes every store mutation to each member.

    All methods are synchronous so they run without suspending the event
    loop: subscribe() snapshots the store and registers in one step, and
    publish() never waits on a slow consumer. A subscriber whose queue is
    full is dropped instead of creating backpressure on ingestion.
    """

    def __init__(self, store: PriceStore, queue_size: int = 100) -> None:
        if queue_size <= 0:
            raise ValueError(f"queue_size must be positive, got {queue_size}")
        self._store = store
        self._queue_size = queue_size
        self._subscribers: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        """Register a subscriber and queue its initial snapshot message."""
        # Room for the snapshot plus queue_size updates
        sub = Subscription(maxsize=self._queue_size + 1)
        sub.offer(
            {
                "type": "initial_data",
                "data": [t.to_dict() for t in self._store.snapshot()],
            }
        )
        self._subscribers.add(sub)
        logger.info("Subscriber connected (%d total)", len(self._subscribers))
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        """Remove a subscriber. Safe to call more than once."""
        if sub in self._subscribers:
            self._subscribers.discard(sub)
            logger.info("Subscriber disconnected (%d remaining)", len(self._subscribers))
        sub.close()

    def publish(self, ticker: Ticker) -> int:
        """Queue a price_update for every subscriber. Returns how many accepted it."""
        message = {"type": "price_update", "data": ticker.to_dict()}
        delivered = 0
        # Iterate over a copy: drops below mutate the set
        for sub in tuple(self._subscribers):
            if sub.offer(message):
                delivered += 1
            else:
                self._drop(sub)
        return delivered

    def close(self) -> None:
        """Close every subscription (used at shutdown)."""
        for sub in tuple(self._subscribers):
            self.unsubscribe(sub)

    def _drop(self, sub: Subscription) -> None:
        self._subscribers.discard(sub)
        sub.dropped = True
        sub.close()
        logger.warning(
            "Dropped slow subscriber (queue full at %d messages, %d remaining)",
            sub.pending(),
            len(self._subscribers),
        )
