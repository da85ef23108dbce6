"""Change records: index-based mutations of a mirrored collection.

A reactive source reports four kinds of events. ``ChangeRecorder`` turns
each raw callback into one of four frozen Change variants and hands it to a
sink (normally the Batcher).

Indices are positions in the collection at the moment the source fired the
event. They are never checked against bounds: correctness relies on the
source delivering events in order.
"""

from __future__ import annotations

from collections.abc import Callable, MutableSequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Literal

if TYPE_CHECKING:
    from ripple._types import ChangeBatch


@dataclass(frozen=True, slots=True)
class AddChange:
    """An item was inserted at ``index``."""

    kind: ClassVar[Literal["add"]] = "add"

    index: int
    item: Any


@dataclass(frozen=True, slots=True)
class UpdateChange:
    """The item at ``index`` was replaced by ``item``."""

    kind: ClassVar[Literal["update"]] = "update"

    index: int
    item: Any


@dataclass(frozen=True, slots=True)
class MoveChange:
    """The item at ``from_index`` moved to ``to_index``."""

    kind: ClassVar[Literal["move"]] = "move"

    from_index: int
    to_index: int


@dataclass(frozen=True, slots=True)
class RemoveChange:
    """The item at ``index`` was removed."""

    kind: ClassVar[Literal["remove"]] = "remove"

    index: int


type Change = AddChange | UpdateChange | MoveChange | RemoveChange


class ChangeRecorder:
    """Callbacks object handed to ``source.observe()``.

    Translates raw source callbacks into Change records and forwards each to
    ``sink``. Holds no state of its own; the item passed to ``moved`` and the
    old item passed to ``changed`` are dropped.

    Args:
        sink: Receives every translated Change, in source order.

    """

    __slots__ = ("_sink",)

    def __init__(self, sink: Callable[[Change], object]) -> None:
        self._sink = sink

    def added(self, item: Any, index: int) -> None:
        self._sink(AddChange(index, item))

    def changed(self, new_item: Any, old_item: Any, index: int) -> None:
        self._sink(UpdateChange(index, new_item))

    def moved(self, item: Any, from_index: int, to_index: int) -> None:
        self._sink(MoveChange(from_index, to_index))

    def removed(self, index: int) -> None:
        self._sink(RemoveChange(index))


def initial_batch(items: Any) -> ChangeBatch:
    """Build the ``Add`` batch describing a freshly enumerated collection."""
    return tuple(AddChange(index, item) for index, item in enumerate(items))


def count_kinds(batch: ChangeBatch) -> dict[str, int]:
    """Count changes per kind (``add``, ``update``, ``move``, ``remove``)."""
    counts = {"add": 0, "update": 0, "move": 0, "remove": 0}
    for change in batch:
        counts[change.kind] += 1
    return counts


def apply_changes(target: MutableSequence[Any], batch: ChangeBatch) -> None:
    """Replay a batch onto ``target`` so it mirrors the source collection.

    Changes are applied in order, each against the state left by the
    previous one. ``IndexError`` from ``target`` propagates unchanged.

    """
    for change in batch:
        if isinstance(change, AddChange):
            target.insert(change.index, change.item)
        elif isinstance(change, UpdateChange):
            target[change.index] = change.item
        elif isinstance(change, MoveChange):
            item = target.pop(change.from_index)
            target.insert(change.to_index, item)
        elif isinstance(change, RemoveChange):
            del target[change.index]
