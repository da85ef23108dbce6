"""Tests for ripple.changes: Change records and the ChangeRecorder."""

from __future__ import annotations

from typing import Any

import pytest

from ripple.changes import (
    AddChange,
    ChangeRecorder,
    MoveChange,
    RemoveChange,
    UpdateChange,
    apply_changes,
    count_kinds,
    initial_batch,
)


# ---------------------------------------------------------------------------
# Change dataclasses
# ---------------------------------------------------------------------------


class TestChangeVariants:
    """Change records are frozen value objects tagged by kind."""

    def test_frozen(self) -> None:
        change = AddChange(0, "A")
        with pytest.raises(AttributeError):
            change.index = 1  # type: ignore[misc]

    def test_equality(self) -> None:
        assert UpdateChange(2, "x") == UpdateChange(2, "x")
        assert AddChange(2, "x") != UpdateChange(2, "x")

    def test_kinds(self) -> None:
        assert AddChange(0, "A").kind == "add"
        assert UpdateChange(0, "A").kind == "update"
        assert MoveChange(0, 1).kind == "move"
        assert RemoveChange(0).kind == "remove"

    def test_kind_is_not_a_field(self) -> None:
        assert RemoveChange(3) == RemoveChange(index=3)
        assert "kind" not in repr(RemoveChange(3))


# ---------------------------------------------------------------------------
# ChangeRecorder
# ---------------------------------------------------------------------------


class TestChangeRecorder:
    """Raw source callbacks map one-to-one onto Change records."""

    @pytest.fixture
    def sink(self) -> list[Any]:
        return []

    @pytest.fixture
    def rec(self, sink: list[Any]) -> ChangeRecorder:
        return ChangeRecorder(sink.append)

    def test_added(self, rec: ChangeRecorder, sink: list[Any]) -> None:
        rec.added("A", 0)
        assert sink == [AddChange(0, "A")]

    def test_changed_keeps_new_item(self, rec: ChangeRecorder, sink: list[Any]) -> None:
        rec.changed("new", "old", 4)
        assert sink == [UpdateChange(4, "new")]

    def test_moved_drops_item(self, rec: ChangeRecorder, sink: list[Any]) -> None:
        rec.moved("A", 0, 3)
        assert sink == [MoveChange(0, 3)]

    def test_removed(self, rec: ChangeRecorder, sink: list[Any]) -> None:
        rec.removed(1)
        assert sink == [RemoveChange(1)]

    def test_preserves_order(self, rec: ChangeRecorder, sink: list[Any]) -> None:
        rec.added("A", 0)
        rec.removed(0)
        rec.added("B", 0)
        assert sink == [AddChange(0, "A"), RemoveChange(0), AddChange(0, "B")]

    def test_no_bounds_checking(self, rec: ChangeRecorder, sink: list[Any]) -> None:
        rec.removed(999)
        rec.moved(None, -5, 42)
        assert sink == [RemoveChange(999), MoveChange(-5, 42)]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestInitialBatch:
    def test_adds_in_order(self) -> None:
        assert initial_batch(["A", "B"]) == (AddChange(0, "A"), AddChange(1, "B"))

    def test_empty(self) -> None:
        assert initial_batch([]) == ()


class TestCountKinds:
    def test_counts(self) -> None:
        batch = (AddChange(0, "A"), AddChange(1, "B"), MoveChange(0, 1), RemoveChange(0))
        assert count_kinds(batch) == {"add": 2, "update": 0, "move": 1, "remove": 1}


class TestApplyChanges:
    """apply_changes replays a batch onto a local mirror."""

    def test_add_update_remove(self) -> None:
        mirror: list[Any] = []
        apply_changes(mirror, (AddChange(0, "A"), AddChange(1, "B"), UpdateChange(0, "a")))
        assert mirror == ["a", "B"]
        apply_changes(mirror, (RemoveChange(1),))
        assert mirror == ["a"]

    def test_move(self) -> None:
        mirror = ["A", "B", "C"]
        apply_changes(mirror, (MoveChange(0, 2),))
        assert mirror == ["B", "C", "A"]

    def test_sequential_indices(self) -> None:
        """Each change sees the state left by the one before it."""
        mirror = ["A", "B", "C"]
        apply_changes(mirror, (RemoveChange(0), RemoveChange(0)))
        assert mirror == ["C"]

    def test_out_of_range_propagates(self) -> None:
        with pytest.raises(IndexError):
            apply_changes([], (RemoveChange(0),))
