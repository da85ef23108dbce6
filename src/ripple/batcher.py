"""Batcher: coalesces source changes into ChangeBatch emissions.

Changes are buffered as they arrive and flushed through the host scheduler,
so the host sees outstanding work from the first buffered change until the
batch has been delivered.

Debounce policies:

- ``debounce_ms > 0``: trailing debounce. Each change restarts the timer;
  when it expires everything buffered is emitted as one batch.
- ``debounce_ms == 0``: priming-aware. While PRIMING, a zero-delay trailing
  debounce merges the synchronous burst of ``added`` events a live source
  fires when first observed. After the first flush the batcher is STEADY
  and every change is emitted at once, on its own.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ripple._types import ChangeBatch
    from ripple.changes import Change
    from ripple.observability.collector import ObserverCollector
    from ripple.scheduler import HostScheduler, Task, TimerHandle


class BatchPhase(StrEnum):
    """Batcher sub-state. PRIMING -> STEADY, once, after the first flush."""

    PRIMING = "priming"
    STEADY = "steady"


def _noop() -> None:
    pass


class Batcher:
    """Buffers changes and decides when to emit them.

    Args:
        emit: Delivers a non-empty batch; may return the number of receivers.
        scheduler: Host scheduler that owns every timer and task.
        debounce_ms: Quiet period before a flush (``0`` = priming-aware).
        collector: Optional event collector for batch observability.

    """

    def __init__(
        self,
        emit: Callable[[ChangeBatch], int | None],
        scheduler: HostScheduler,
        *,
        debounce_ms: int = 50,
        collector: ObserverCollector | None = None,
    ) -> None:
        self._emit = emit
        self._scheduler = scheduler
        self._debounce_ms = debounce_ms
        self._collector = collector
        self._pending: list[Change] = []
        self._task: Task | None = None
        self._timer: TimerHandle | None = None
        self._phase = BatchPhase.PRIMING
        self._closed = False
        self._emitting = False
        self._flush_queued = False

    @property
    def phase(self) -> BatchPhase:
        return self._phase

    @property
    def pending_count(self) -> int:
        """Number of buffered changes not yet emitted."""
        return len(self._pending)

    @property
    def has_pending_flush(self) -> bool:
        """Whether a debounce window is open."""
        return self._task is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, change: Change) -> None:
        """Buffer one change and apply the debounce policy."""
        if self._closed:
            return
        self._pending.append(change)

        if self._debounce_ms == 0 and self._phase is BatchPhase.STEADY:
            self.flush()
        else:
            self._debounce()

    def flush(self) -> None:
        """Emit everything buffered now, closing any open debounce window.

        A flush requested while a batch is being delivered (a subscriber
        changing the source from its handler) is queued and runs once that
        delivery returns, so every subscriber sees batches in flush order.
        """
        if self._closed:
            return
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._task is None:
            self._task = self._schedule_emit()
        if self._emitting:
            self._flush_queued = True
            return

        self._emitting = True
        try:
            self._drain()
        finally:
            self._emitting = False
            self._phase = BatchPhase.STEADY
            # Lets the host see that work triggered by this flush has settled.
            self._scheduler.run(_noop)

    def cancel(self) -> int:
        """Stop batching for good. Returns the number of changes dropped."""
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._task is not None:
            self._task.cancel()
            self._task = None
        dropped = len(self._pending)
        self._pending = []
        return dropped

    def _debounce(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        if self._task is None:
            self._task = self._schedule_emit()
        self._timer = self._scheduler.call_later(self._debounce_ms, self._expire)

    def _drain(self) -> None:
        task = self._task
        while task is not None and not self._closed:
            self._task = None
            self._flush_queued = False
            task.invoke()
            task = self._task if self._flush_queued else None

    def _expire(self) -> None:
        self._timer = None
        self.flush()

    def _schedule_emit(self) -> Task:
        return self._scheduler.schedule_task("emit", self._emit_pending)

    def _emit_pending(self) -> None:
        # Swap in a fresh buffer: changes arriving during delivery belong
        # to the next batch.
        batch: ChangeBatch = tuple(self._pending)
        self._pending = []

        if not batch:
            if self._collector is not None:
                self._collector.record_skipped(phase=self._phase.value)
            return

        receivers = self._emit(batch)
        if self._collector is not None:
            self._collector.record_batch(
                batch, phase=self._phase.value, subscribers=receivers or 0
            )
