"""Shared type definitions for ripple."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ripple.changes import Change

# Position within the mirrored collection
type Index = int

# Ordered, immutable group of changes emitted as one notification
type ChangeBatch = tuple[Change, ...]

# Subscriber callback receiving one batch
type BatchHandler = Callable[[ChangeBatch], Any]

# Unit of work run by the host scheduler
type Work = Callable[[], Any]
