"""Observer collector: records observer lifecycle and batch events.

Observers and batchers call the ``record_*`` methods; the collector stamps
each event and appends it to an ``EventLog``.  With ``verbose=True`` every
emitted batch also prints a one-line summary to stderr.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from ripple.changes import count_kinds
from ripple.observability.events import (
    BatchEmitted,
    FlushSkipped,
    ObservationStarted,
    ObservationStopped,
    now_ns,
)
from ripple.observability.log import EventLog

if TYPE_CHECKING:
    from ripple._types import ChangeBatch


class ObserverCollector:
    """Event collector for collection observers.

    Args:
        log: The EventLog to store events in.
        verbose: Print a summary line to stderr for each emitted batch.

    """

    __slots__ = ("_log", "verbose")

    def __init__(self, log: EventLog | None = None, *, verbose: bool = False) -> None:
        self._log = log if log is not None else EventLog()
        self.verbose = verbose

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Lifecycle events -----

    def record_started(self, source: str, *, mode: str, debounce_ms: int) -> None:
        """Record a source engagement."""
        self._log.append(
            ObservationStarted(
                source=source,
                mode=mode,  # type: ignore[arg-type]
                debounce_ms=debounce_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_stopped(self, source: str, *, mode: str, cancelled_pending: int = 0) -> None:
        """Record an observer teardown."""
        self._log.append(
            ObservationStopped(
                source=source,
                mode=mode,  # type: ignore[arg-type]
                cancelled_pending=cancelled_pending,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Batch events -----

    def record_batch(self, batch: ChangeBatch, *, phase: str, subscribers: int) -> BatchEmitted:
        """Record an emitted batch. Returns the event for inspection."""
        counts = count_kinds(batch)
        event = BatchEmitted(
            size=len(batch),
            adds=counts["add"],
            updates=counts["update"],
            moves=counts["move"],
            removes=counts["remove"],
            phase=phase,  # type: ignore[arg-type]
            subscribers=subscribers,
            timestamp_ns=now_ns(),
        )
        self._log.append(event)
        if self.verbose:
            self._print_summary(event)
        return event

    def record_skipped(self, *, phase: str) -> None:
        """Record a flush that found nothing to emit."""
        self._log.append(FlushSkipped(phase=phase, timestamp_ns=now_ns()))  # type: ignore[arg-type]

    def _print_summary(self, e: BatchEmitted) -> None:
        """Print a one-line batch summary to stderr."""
        changes = "change" if e.size == 1 else "changes"
        kinds = f"+{e.adds} ~{e.updates} >{e.moves} -{e.removes}"
        print(
            f"  [{e.phase}] {e.size} {changes} ({kinds}) -> {e.subscribers} subscriber(s)",
            file=sys.stderr,
        )
