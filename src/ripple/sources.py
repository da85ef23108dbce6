"""Source capabilities: what a mirrored collection must expose.

A source is one of two shapes:

- ``PushSource``: ``observe(callbacks)`` starts a live observation and returns
  a handle with ``stop()``. Current items are reported as ``added`` calls,
  then every later mutation as it happens.
- ``PullSource``: ``fetch_all()`` enumerates the current items once.

The shape is probed once, when the observer is built.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

from ripple._errors import InvalidSourceError


class SourceCallbacks(Protocol):
    """Callbacks a PushSource fires, in collection order."""

    def added(self, item: Any, index: int) -> None: ...

    def changed(self, new_item: Any, old_item: Any, index: int) -> None: ...

    def moved(self, item: Any, from_index: int, to_index: int) -> None: ...

    def removed(self, index: int) -> None: ...


@runtime_checkable
class StopHandle(Protocol):
    """Anything with a ``stop()`` method."""

    def stop(self) -> Any: ...


@runtime_checkable
class PushSource(Protocol):
    """A live, order-aware collection view."""

    def observe(self, callbacks: SourceCallbacks) -> StopHandle: ...


@runtime_checkable
class PullSource(Protocol):
    """A collection that can only be enumerated."""

    def fetch_all(self) -> Sequence[Any]: ...


class SourceMode(StrEnum):
    """How an observer engages its source."""

    LIVE = "live"
    BULK = "bulk"


def is_source(obj: object) -> bool:
    """Return True if ``obj`` exposes either source capability."""
    return isinstance(obj, (PushSource, PullSource))


def probe_source(obj: object, *, fetch_only: bool = False) -> SourceMode:
    """Select the engagement mode for ``obj``.

    Push observation wins when both capabilities exist, unless
    ``fetch_only`` asks for a one-shot enumeration.

    Raises:
        InvalidSourceError: ``obj`` exposes neither capability, or
            ``fetch_only`` was requested for a push-only source.

    """
    can_push = isinstance(obj, PushSource)
    can_pull = isinstance(obj, PullSource)

    if can_pull and (fetch_only or not can_push):
        return SourceMode.BULK
    if can_push and not fetch_only:
        return SourceMode.LIVE

    if fetch_only and can_push:
        msg = f"{type(obj).__name__} cannot be fetched: it has no fetch_all()"
    else:
        msg = (
            f"{type(obj).__name__} is not a collection source: "
            "expected observe() or fetch_all()"
        )
    raise InvalidSourceError(msg)


class ObserverHandle:
    """Owns the stop capability returned by ``PushSource.observe()``.

    ``stop()`` forwards to the wrapped handle once; later calls do nothing.

    """

    __slots__ = ("_handle",)

    def __init__(self, handle: StopHandle) -> None:
        self._handle: StopHandle | None = handle

    @property
    def stopped(self) -> bool:
        """Whether the underlying observation has been stopped."""
        return self._handle is None

    def stop(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.stop()
