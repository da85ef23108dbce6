"""Event model for observer observability.

Defines one event type per notable step in an observer's life: engagement,
each emitted batch, each skipped (empty) flush, and teardown.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Lifecycle events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ObservationStarted:
    """An observer engaged its source on first subscription.

    Attributes:
        source: Type name of the observed source.
        mode: ``live`` for push observation, ``bulk`` for one-shot enumeration.
        debounce_ms: Configured debounce window.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    source: str
    mode: Literal["live", "bulk"]
    debounce_ms: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ObservationStopped:
    """An engaged observer was destroyed.

    Attributes:
        source: Type name of the observed source.
        mode: Engagement mode of the stopped observer.
        cancelled_pending: Number of buffered changes discarded by the stop.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    source: str
    mode: Literal["live", "bulk"]
    cancelled_pending: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Batch events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BatchEmitted:
    """A ChangeBatch was delivered to subscribers.

    Attributes:
        size: Number of changes in the batch.
        adds: Number of ``AddChange`` records.
        updates: Number of ``UpdateChange`` records.
        moves: Number of ``MoveChange`` records.
        removes: Number of ``RemoveChange`` records.
        phase: Batcher phase at flush time (``priming`` or ``steady``).
        subscribers: Number of handlers that received the batch.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    size: int
    adds: int
    updates: int
    moves: int
    removes: int
    phase: Literal["priming", "steady"]
    subscribers: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class FlushSkipped:
    """A flush ran with nothing buffered, so nothing was emitted.

    Attributes:
        phase: Batcher phase at flush time.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    phase: Literal["priming", "steady"]
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type ObserverEvent = (
    ObservationStarted
    | ObservationStopped
    | BatchEmitted
    | FlushSkipped
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
