from __future__ import annotations

from collections import deque
from typing import Deque, Optional

from .models import DayData

MAX_HISTORY_DEPTH = 50


class UndoHistory:
    """Bounded undo/redo stacks of whole-day snapshots."""

    def __init__(self, max_depth: int = MAX_HISTORY_DEPTH) -> None:
        self.max_depth = max_depth
        self.undo_stack: Deque[DayData] = deque(maxlen=max_depth)
        self.redo_stack: Deque[DayData] = deque(maxlen=max_depth)

    def push(self, state: DayData) -> None:
        self.undo_stack.append(state.snapshot())
        self.redo_stack.clear()

    def undo(self, current: DayData) -> Optional[DayData]:
        if not self.undo_stack:
            return None
        previous = self.undo_stack.pop()
        self.redo_stack.append(current.snapshot())
        return previous

    def redo(self, current: DayData) -> Optional[DayData]:
        if not self.redo_stack:
            return None
        following = self.redo_stack.pop()
        self.undo_stack.append(current.snapshot())
        return following

    def clear(self) -> None:
        self.undo_stack.clear()
        self.redo_stack.clear()

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)


__all__ = ["UndoHistory", "MAX_HISTORY_DEPTH"]
