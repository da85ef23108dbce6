"""Collection observer: lazy lifecycle around one source observation.

``CollectionObserver`` binds a source at construction but does nothing with
it until the first ``subscribe()``.  That first call engages the source
exactly once:

- Live mode: ``source.observe()`` is started with a ``ChangeRecorder``
  feeding the ``Batcher``; the returned stop capability is kept in an
  ``ObserverHandle``.
- Bulk mode: ``source.fetch_all()`` is enumerated and emitted as a single
  batch of ``AddChange`` records; no handle is kept.

Every subscriber shares the one observation through a common ``Emitter``.
``destroy()`` stops the observation, cancels any pending flush and is safe
to call at any time, any number of times.

States::

    INERT --subscribe--> STARTING --> BULK_DONE | LIVE_OBSERVING
    BULK_DONE | LIVE_OBSERVING --destroy--> STOPPED (terminal)
"""

from __future__ import annotations

from dataclasses import replace
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from ripple._errors import ObserverDestroyedError
from ripple.batcher import Batcher
from ripple.changes import ChangeRecorder, initial_batch
from ripple.config import ObserverConfig
from ripple.emitter import Emitter
from ripple.observability.collector import ObserverCollector
from ripple.sources import ObserverHandle, SourceMode, is_source, probe_source

if TYPE_CHECKING:
    from ripple._types import BatchHandler, ChangeBatch
    from ripple.emitter import Subscription
    from ripple.scheduler import HostScheduler


class ObserverState(StrEnum):
    """Lifecycle of a CollectionObserver."""

    INERT = "inert"
    STARTING = "starting"
    BULK_DONE = "bulk_done"
    LIVE_OBSERVING = "live_observing"
    STOPPED = "stopped"


class CollectionObserver:
    """Mirrors a source collection as a stream of ChangeBatch notifications.

    Args:
        source: A push source (``observe``) or pull source (``fetch_all``).
        scheduler: Host scheduler used for every deferred emission.
        config: Observer configuration; defaults to ``ObserverConfig()``.
        debounce_ms: Overrides ``config.debounce_ms`` when given.
        emitter: Fan-out shared by all subscribers; a private one by default.
        collector: Optional event collector; created when ``config.verbose``
            is set and none is given.

    Raises:
        InvalidSourceError: ``source`` exposes neither capability.
        ConfigError: ``debounce_ms`` is not a non-negative int.

    """

    def __init__(
        self,
        source: Any,
        *,
        scheduler: HostScheduler,
        config: ObserverConfig | None = None,
        debounce_ms: int | None = None,
        emitter: Emitter | None = None,
        collector: ObserverCollector | None = None,
    ) -> None:
        if config is None:
            config = ObserverConfig()
        if debounce_ms is not None:
            config = replace(config, debounce_ms=debounce_ms)
        if config.verbose:
            if collector is None:
                collector = ObserverCollector()
            collector.verbose = True

        self._mode = probe_source(source, fetch_only=config.fetch_only)
        self._source = source
        self._config = config
        self._scheduler = scheduler
        self._emitter = emitter if emitter is not None else Emitter()
        self._collector = collector
        self._batcher = Batcher(
            self._deliver,
            scheduler,
            debounce_ms=config.debounce_ms,
            collector=collector,
        )
        self._handle: ObserverHandle | None = None
        self._state = ObserverState.INERT
        self._is_subscribed = False
        self._last_changes: ChangeBatch = ()

    @staticmethod
    def is_source(obj: object) -> bool:
        """Return True if ``obj`` can be observed or fetched."""
        return is_source(obj)

    @property
    def mode(self) -> SourceMode:
        return self._mode

    @property
    def state(self) -> ObserverState:
        return self._state

    @property
    def config(self) -> ObserverConfig:
        return self._config

    @property
    def emitter(self) -> Emitter:
        return self._emitter

    @property
    def batcher(self) -> Batcher:
        return self._batcher

    @property
    def collector(self) -> ObserverCollector | None:
        return self._collector

    @property
    def handle(self) -> ObserverHandle | None:
        """Stop handle of the live observation, if one is running."""
        return self._handle

    @property
    def last_changes(self) -> ChangeBatch:
        """The most recently emitted batch (empty before the first one)."""
        return self._last_changes

    def subscribe(self, handler: BatchHandler) -> Subscription:
        """Attach ``handler``; the first call also engages the source.

        Raises:
            ObserverDestroyedError: The observer was already destroyed.

        """
        if self._state is ObserverState.STOPPED:
            msg = "cannot subscribe: observer was destroyed"
            raise ObserverDestroyedError(msg)

        sub = self._emitter.subscribe(handler)
        # Start processing the source lazily.
        if not self._is_subscribed:
            self._is_subscribed = True
            self._engage()
        return sub

    def destroy(self) -> None:
        """Stop the observation and drop any pending flush. Idempotent."""
        if self._state in (ObserverState.INERT, ObserverState.STOPPED):
            return
        self._state = ObserverState.STOPPED

        handle, self._handle = self._handle, None
        if handle is not None:
            handle.stop()
        dropped = self._scheduler.run(self._batcher.cancel)

        if self._collector is not None:
            self._collector.record_stopped(
                type(self._source).__name__,
                mode=self._mode.value,
                cancelled_pending=dropped,
            )

    def _engage(self) -> None:
        self._state = ObserverState.STARTING
        if self._collector is not None:
            self._collector.record_started(
                type(self._source).__name__,
                mode=self._mode.value,
                debounce_ms=self._config.debounce_ms,
            )

        if self._mode is SourceMode.BULK:
            self._state = ObserverState.BULK_DONE
            batch = initial_batch(self._source.fetch_all())
            if batch:
                receivers = self._deliver(batch)
                if self._collector is not None:
                    self._collector.record_batch(
                        batch, phase=self._batcher.phase.value, subscribers=receivers
                    )
            return

        recorder = ChangeRecorder(self._batcher.push)
        # A source may fire its priming burst inside observe(); the state
        # must already admit it.
        self._state = ObserverState.LIVE_OBSERVING
        stop = self._scheduler.run(lambda: self._source.observe(recorder))
        if self._state is ObserverState.STOPPED:
            # destroy() ran from inside the priming burst.
            stop.stop()
            return
        self._handle = ObserverHandle(stop)

    def _deliver(self, batch: ChangeBatch) -> int:
        self._last_changes = batch
        return self._emitter.emit(batch)
