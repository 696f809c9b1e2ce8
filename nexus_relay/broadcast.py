"""Process-wide fan-out channel for relay lines.

Every message published to a :class:`BroadcastMedium` is delivered to all
subscriptions that exist at publish time. There is no history and no
addressing. Each subscription buffers at most ``capacity`` messages; when a
reader falls behind, the oldest buffered messages are dropped and the reader
is told how many it missed, so publishers never wait on slow readers.

Usage::

    medium = BroadcastMedium(capacity=256)

    with medium.subscribe() as subscription:
        medium.publish("You: hello")
        line = await subscription.receive()
"""

import asyncio
import logging
from collections import deque
from typing import Deque, Set

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 256


class BroadcastClosed(Exception):
    """Raised by :meth:`Subscription.receive` once the medium or the subscription is closed."""


class Lagged(Exception):
    """Raised once by :meth:`Subscription.receive` after messages were dropped for a slow reader."""

    def __init__(self, missed: int):
        super().__init__(f"Subscriber lagged behind, {missed} messages dropped")
        self.missed = missed


class Subscription:
    """Receive end of a :class:`BroadcastMedium`, owned by exactly one reader."""

    def __init__(self, medium: "BroadcastMedium", capacity: int):
        self._medium = medium
        self._buffer: Deque[str] = deque(maxlen=capacity)
        self._missed = 0
        self._wakeup = asyncio.Event()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Number of messages buffered and not yet received."""
        return len(self._buffer)

    def _deliver(self, message: str) -> None:
        if len(self._buffer) == self._buffer.maxlen:
            # deque(maxlen) evicts the oldest entry on append
            self._missed += 1
        self._buffer.append(message)
        self._wakeup.set()

    def _shutdown(self) -> None:
        self._closed = True
        self._wakeup.set()

    async def receive(self) -> str:
        """Wait for the next message in publish order.

        :raises Lagged: if messages were dropped since the previous call; the
            following call continues with the oldest retained message.
        :raises BroadcastClosed: once closed and the buffer is drained.
        """
        while True:
            if self._missed:
                missed, self._missed = self._missed, 0
                raise Lagged(missed)
            if self._buffer:
                return self._buffer.popleft()
            if self._closed:
                raise BroadcastClosed()
            self._wakeup.clear()
            await self._wakeup.wait()

    def close(self) -> None:
        """Unsubscribe from the medium. Safe to call more than once."""
        if self._closed:
            return
        self._medium._unsubscribe(self)
        self._buffer.clear()
        self._shutdown()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class BroadcastMedium:
    """Single shared fan-out channel.

    Created once by the application factory before connections are accepted
    and closed at shutdown. All methods are synchronous except
    :meth:`Subscription.receive`, so concurrent tasks on the event loop can
    publish and subscribe without extra locking.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """Initialize the medium.

        :param capacity: Per-subscriber buffer size. Must be at least 1.
        """
        if capacity < 1:
            raise ValueError(f"Broadcast capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._subscribers: Set[Subscription] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, message: str) -> int:
        """Deliver ``message`` to every current subscriber.

        Never blocks. Returns the number of subscribers reached; 0 means the
        message was dropped because nobody is listening.
        """
        if self._closed:
            return 0
        targets = list(self._subscribers)
        for subscription in targets:
            subscription._deliver(message)
        return len(targets)

    def subscribe(self) -> Subscription:
        """Create a subscription that sees every message published from now on."""
        subscription = Subscription(self, self.capacity)
        if self._closed:
            subscription._shutdown()
            return subscription
        self._subscribers.add(subscription)
        logger.debug(f"[BROADCAST] Subscribed ({len(self._subscribers)} active)")
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        self._subscribers.discard(subscription)
        logger.debug(f"[BROADCAST] Unsubscribed ({len(self._subscribers)} active)")

    def close(self) -> None:
        """Tear the medium down and wake every subscriber. Idempotent."""
        if self._closed:
            return
        self._closed = True
        subscribers = list(self._subscribers)
        self._subscribers.clear()
        for subscription in subscribers:
            subscription._shutdown()
        logger.info(f"[BROADCAST] Closed, released {len(subscribers)} subscribers")
