"""Batch emitter: fans change batches out to subscribers.

Every subscriber of an observer shares one Emitter and therefore one stream
of batches. The emitter only decides *who* receives a batch; *what* is
emitted and *when* belongs to the Batcher.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ripple._types import BatchHandler, ChangeBatch


@dataclass(frozen=True, slots=True)
class Subscription:
    """A registered batch handler.

    Attributes:
        subscription_id: Unique, increasing identifier; also the delivery order.
        handler: Callable receiving each ChangeBatch.

    """

    subscription_id: int
    handler: BatchHandler = field(compare=False, hash=False)
    _emitter: Emitter | None = field(default=None, compare=False, hash=False, repr=False)

    @property
    def active(self) -> bool:
        """Whether the handler is still attached to its emitter."""
        return self._emitter is not None and self._emitter.is_subscribed(self)

    def unsubscribe(self) -> None:
        """Detach the handler. Safe to call more than once."""
        if self._emitter is not None:
            self._emitter.unsubscribe(self)


class Emitter:
    """Ordered subscribe/emit fan-out for ChangeBatch values.

    Handlers are called in subscription order, from a snapshot taken when
    ``emit()`` starts: a handler added or removed during delivery takes
    effect from the next batch. Exceptions raised by a handler propagate to
    the caller of ``emit()``.

    Thread-safe: subscriber map protected by a lock.

    """

    def __init__(self) -> None:
        self._subscribers: dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        """Number of attached handlers."""
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, handler: BatchHandler) -> Subscription:
        """Register a handler for every future batch."""
        with self._lock:
            sub = Subscription(next(self._ids), handler, self)
            self._subscribers[sub.subscription_id] = sub
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        """Remove a handler."""
        with self._lock:
            self._subscribers.pop(sub.subscription_id, None)

    def is_subscribed(self, sub: Subscription) -> bool:
        with self._lock:
            return sub.subscription_id in self._subscribers

    def get_subscribers(self) -> tuple[Subscription, ...]:
        """Get all subscriptions in delivery order (snapshot, no lock held on return)."""
        with self._lock:
            return tuple(self._subscribers.values())

    def emit(self, batch: ChangeBatch) -> int:
        """Deliver ``batch`` to every subscriber.

        Returns:
            Number of handlers called.

        """
        count = 0
        for sub in self.get_subscribers():
            sub.handler(batch)
            count += 1
        return count
