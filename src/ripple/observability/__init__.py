"""Observer observability: structured events for engagement and batching.

Every observer can be given an ``ObserverCollector``.  It records when the
source is engaged and stopped, every emitted batch (with per-kind counts),
and every flush that found nothing to emit.

Quick Start:
    >>> from ripple.observability import EventLog, ObserverCollector
    >>> collector = ObserverCollector(EventLog())
    >>> # CollectionObserver(source, scheduler=..., collector=collector)
    >>> # collector.log.query(BatchEmitted, phase="steady")
    >>> # collector.log.batch_stats()

"""

from ripple.observability.collector import ObserverCollector
from ripple.observability.events import (
    BatchEmitted,
    FlushSkipped,
    ObservationStarted,
    ObservationStopped,
    ObserverEvent,
    now_ns,
)
from ripple.observability.log import EventLog

__all__ = [
    "BatchEmitted",
    "EventLog",
    "FlushSkipped",
    "ObservationStarted",
    "ObservationStopped",
    "ObserverCollector",
    "ObserverEvent",
    "now_ns",
]
