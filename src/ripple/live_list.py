"""LiveList: an in-memory ordered collection that pushes its changes.

A minimal reactive source with both capabilities: ``fetch_all()`` for bulk
mode and ``observe()`` for live mode.  Observing first reports the current
contents as a synchronous burst of ``added`` calls, then reports each
mutation as it is made, with indices valid at the moment of the call.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ripple.sources import SourceCallbacks


class LiveListHandle:
    """Detaches one set of callbacks from a LiveList."""

    __slots__ = ("_callbacks", "_owner")

    def __init__(self, owner: LiveList, callbacks: SourceCallbacks) -> None:
        self._owner: LiveList | None = owner
        self._callbacks = callbacks

    @property
    def stopped(self) -> bool:
        return self._owner is None

    def stop(self) -> None:
        owner, self._owner = self._owner, None
        if owner is not None:
            owner._detach(self._callbacks)


class LiveList:
    """Ordered, observable list of items.

    Args:
        items: Initial contents.

    """

    def __init__(self, items: Iterable[Any] = ()) -> None:
        self._items: list[Any] = list(items)
        self._observers: list[SourceCallbacks] = []

    # ----- Source capabilities -----

    def fetch_all(self) -> list[Any]:
        """Snapshot of the current contents, in order."""
        return list(self._items)

    def observe(self, callbacks: SourceCallbacks) -> LiveListHandle:
        """Report current contents, then every mutation, to ``callbacks``."""
        self._observers.append(callbacks)
        for index, item in enumerate(list(self._items)):
            callbacks.added(item, index)
        return LiveListHandle(self, callbacks)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    # ----- Mutations -----

    def insert(self, index: int, item: Any) -> None:
        index = self._clamp(index)
        self._items.insert(index, item)
        for cb in list(self._observers):
            cb.added(item, index)

    def append(self, item: Any) -> None:
        self.insert(len(self._items), item)

    def set(self, index: int, item: Any) -> None:
        old = self._items[index]
        index = self._normalize(index)
        self._items[index] = item
        for cb in list(self._observers):
            cb.changed(item, old, index)

    def move(self, from_index: int, to_index: int) -> None:
        from_index = self._normalize(from_index)
        item = self._items.pop(from_index)
        to_index = self._clamp(to_index)
        self._items.insert(to_index, item)
        if from_index == to_index:
            return
        for cb in list(self._observers):
            cb.moved(item, from_index, to_index)

    def remove_at(self, index: int) -> Any:
        index = self._normalize(index)
        item = self._items.pop(index)
        for cb in list(self._observers):
            cb.removed(index)
        return item

    # ----- Sequence protocol -----

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Any:
        return self._items[index]

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))

    def __repr__(self) -> str:
        return f"LiveList({self._items!r})"

    def _detach(self, callbacks: SourceCallbacks) -> None:
        if callbacks in self._observers:
            self._observers.remove(callbacks)

    def _normalize(self, index: int) -> int:
        # Callbacks always carry non-negative positions.
        return index + len(self._items) if index < 0 else index

    def _clamp(self, index: int) -> int:
        return max(0, min(self._normalize(index), len(self._items)))
