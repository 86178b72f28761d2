"""Undo history for a game session."""

from typing import Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict

from ..engine.models import DetectedWord, LetterSequence, PlacementRecord


UndoAction = Literal["tap_letter", "drag_start", "insert_letter", "remove_word"]


class GameStateSnapshot(BaseModel):
    """Everything an undo restores."""

    model_config = ConfigDict(frozen=True)

    target: LetterSequence
    pool: LetterSequence
    placements: PlacementRecord
    detected_words: Tuple[DetectedWord, ...] = ()
    harvested_words: Tuple[str, ...] = ()


class UndoHistory(BaseModel):
    """
    Undo stack plus the tentative snapshot of a drag in progress.

    Tap and word removals push straight onto the stack. A drag holds its
    snapshot aside until the drop resolves: a successful drop pushes it,
    an aborted drag discards it. Only one drag snapshot may be held at a time.

    Attributes:
        stack: Saved snapshots, most recent last
        pending: Snapshot taken at drag start, not yet committed
        drag_in_progress: Whether a drag snapshot is currently held
    """

    model_config = ConfigDict(frozen=True)

    stack: Tuple[GameStateSnapshot, ...] = ()
    pending: Optional[GameStateSnapshot] = None
    drag_in_progress: bool = False

    @property
    def depth(self) -> int:
        return len(self.stack)

    @property
    def can_undo(self) -> bool:
        return bool(self.stack)

    def record(self, snapshot: GameStateSnapshot, action: UndoAction) -> "UndoHistory":
        """
        Save a snapshot taken before an undoable action.

        Args:
            snapshot: State before the action
            action: The action about to be applied

        Returns:
            Updated history
        """
        if action == "drag_start":
            if self.drag_in_progress:
                return self
            return self.model_copy(update={"pending": snapshot, "drag_in_progress": True})
        return self.model_copy(update={"stack": self.stack + (snapshot,)})

    def end_drag(self, placed: bool) -> "UndoHistory":
        """Commit the drag snapshot if the letter was placed, otherwise drop it."""
        stack = self.stack
        if placed and self.pending is not None:
            stack = stack + (self.pending,)
        return self.model_copy(
            update={"stack": stack, "pending": None, "drag_in_progress": False}
        )

    def pop(self) -> Tuple["UndoHistory", Optional[GameStateSnapshot]]:
        """Remove and return the most recent snapshot, or None if empty."""
        if not self.stack:
            return self, None
        return (
            self.model_copy(
                update={"stack": self.stack[:-1], "pending": None, "drag_in_progress": False}
            ),
            self.stack[-1],
        )
