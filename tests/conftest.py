"""Shared test fixtures for ripple."""

from __future__ import annotations

from typing import Any

import pytest

from ripple.live_list import LiveList
from ripple.scheduler import ManualScheduler


class BatchRecorder:
    """Subscriber that keeps every batch it receives."""

    def __init__(self) -> None:
        self.batches: list[tuple[Any, ...]] = []

    def __call__(self, batch: tuple[Any, ...]) -> None:
        self.batches.append(batch)

    @property
    def last(self) -> tuple[Any, ...]:
        return self.batches[-1]


class PushOnlySource:
    """Push source without ``fetch_all()``; counts engagements and stops."""

    def __init__(self) -> None:
        self.callbacks: Any = None
        self.observe_calls = 0
        self.stop_calls = 0

    def observe(self, callbacks: Any) -> PushOnlySource:
        self.observe_calls += 1
        self.callbacks = callbacks
        return self

    def stop(self) -> None:
        self.stop_calls += 1
        self.callbacks = None

    # Fire events only while observed, as a well-behaved source does.

    def added(self, item: Any, index: int) -> None:
        if self.callbacks is not None:
            self.callbacks.added(item, index)

    def changed(self, new_item: Any, old_item: Any, index: int) -> None:
        if self.callbacks is not None:
            self.callbacks.changed(new_item, old_item, index)

    def moved(self, item: Any, from_index: int, to_index: int) -> None:
        if self.callbacks is not None:
            self.callbacks.moved(item, from_index, to_index)

    def removed(self, index: int) -> None:
        if self.callbacks is not None:
            self.callbacks.removed(index)


class PullOnlySource:
    """Source that can only be enumerated."""

    def __init__(self, items: list[Any]) -> None:
        self.items = items
        self.fetch_calls = 0

    def fetch_all(self) -> list[Any]:
        self.fetch_calls += 1
        return list(self.items)


@pytest.fixture
def host() -> ManualScheduler:
    """A virtual-clock host scheduler."""
    return ManualScheduler()


@pytest.fixture
def recorder() -> BatchRecorder:
    return BatchRecorder()


@pytest.fixture
def live_list() -> LiveList:
    """A LiveList holding ``["A", "B"]``."""
    return LiveList(["A", "B"])


@pytest.fixture
def push_source() -> PushOnlySource:
    return PushOnlySource()


@pytest.fixture
def pull_source() -> PullOnlySource:
    """A pull-only source holding ``["A", "B", "C"]``."""
    return PullOnlySource(["A", "B", "C"])


@pytest.fixture
def make_recorder() -> Any:
    """Factory for extra BatchRecorder subscribers."""
    return BatchRecorder
