"""Event log: bounded history of one or more observers' events.

Events are kept oldest first and read back newest first, filtered by the
things an observer's host asks about: the batcher phase a flush ran in, or
the engagement mode of the observation.  Batch-size statistics are derived
from the retained ``BatchEmitted`` events on demand.

Thread Safety:
    Appends and snapshots share one ``threading.Lock``; filtering and
    statistics work on a snapshot, outside the lock.

"""

from __future__ import annotations

import threading
from collections import Counter, deque
from typing import TYPE_CHECKING, Any

from ripple.observability.events import BatchEmitted

if TYPE_CHECKING:
    from ripple.observability.events import ObserverEvent


def _percentile(sizes: list[int], pct: float) -> int:
    idx = int(len(sizes) * pct / 100)
    return sizes[min(idx, len(sizes) - 1)]


class EventLog:
    """Ring buffer of observer events.

    Args:
        max_events: Retention limit; the oldest events are dropped first.

    """

    __slots__ = ("_events", "_lock")

    def __init__(self, max_events: int = 10_000) -> None:
        self._events: deque[ObserverEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    @property
    def max_events(self) -> int:
        return self._events.maxlen or 0

    def append(self, event: ObserverEvent) -> None:
        with self._lock:
            self._events.append(event)

    def events(self) -> tuple[ObserverEvent, ...]:
        """Snapshot of every retained event, oldest first."""
        with self._lock:
            return tuple(self._events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def query(
        self,
        event_type: type | None = None,
        *,
        phase: str | None = None,
        mode: str | None = None,
        limit: int | None = None,
    ) -> list[ObserverEvent]:
        """Return events matching every given filter, newest first.

        ``phase`` applies to flush events (``BatchEmitted``, ``FlushSkipped``)
        and ``mode`` to lifecycle events (``ObservationStarted``,
        ``ObservationStopped``).  An event lacking the filtered field never
        matches.

        """
        matches: list[ObserverEvent] = []
        for event in reversed(self.events()):
            if event_type is not None and not isinstance(event, event_type):
                continue
            if phase is not None and getattr(event, "phase", None) != phase:
                continue
            if mode is not None and getattr(event, "mode", None) != mode:
                continue
            matches.append(event)
            if limit is not None and len(matches) >= limit:
                break
        return matches

    def batch_stats(self, *, phase: str | None = None) -> dict[str, Any]:
        """Batch count, total changes and p50/p95/max size of emitted batches.

        Restricted to one batcher phase when ``phase`` is given.

        """
        batches: list[BatchEmitted] = self.query(BatchEmitted, phase=phase)  # type: ignore[assignment]
        if not batches:
            return {"count": 0}

        sizes = sorted(b.size for b in batches)
        phases = Counter(b.phase for b in batches)
        return {
            "count": len(sizes),
            "changes": sum(sizes),
            "size": {
                "p50": _percentile(sizes, 50),
                "p95": _percentile(sizes, 95),
                "max": sizes[-1],
            },
            "by_phase": {"priming": phases["priming"], "steady": phases["steady"]},
        }

    def stats(self) -> dict[str, Any]:
        """Retained event counts per type, with the batch statistics."""
        events = self.events()
        return {
            "total": len(events),
            "max_events": self.max_events,
            "by_type": dict(Counter(type(e).__name__ for e in events)),
            "batches": self.batch_stats(),
        }
