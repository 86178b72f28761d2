"""
Pydantic models for the session layer.

This module holds the configuration and session state models. The undo
history lives in ``history``, the operations in ``controller`` and the
stateful wrapper in ``game``.
"""

from typing import Any, Dict, FrozenSet, List, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from ..engine.models import DetectedWord, LetterSequence, PlacementRecord
from .history import GameStateSnapshot, UndoHistory


# Type aliases
SessionStatus = Literal["active", "completed", "timed_out"]


class SessionConfig(BaseModel):
    """Configuration for a game session."""
    length_min: int = Field(default=5, ge=1)
    length_max: int = Field(default=8, ge=1)
    game_duration: float = Field(default=120.0, gt=0)
    min_word_length: int = Field(default=3, ge=1)
    max_attempts: int = Field(default=1000, ge=1)
    detection_interval: float = Field(default=0.3, ge=0)
    seed: Optional[int] = None
    fallback_backbone: str = "voiture"
    fallback_pool: str = "verrat"


class SessionState(BaseModel):
    """
    Complete state of one game.

    Attributes:
        config: Session configuration
        dictionary: Lowercase dictionary words (excluded from dumps)
        backbone_word: The original target word
        pool_word: The word whose letters form the pool
        target: Letters currently in the target, in reading order
        pool: Pool letters in original order
        placements: Target positions of placed pool letters
        detected_words: Current dictionary matches in the target
        harvested_words: Words removed so far
        history: Undo history
        dragging: Pool index of the letter being dragged, if any
        time_remaining: Seconds left on the timer
        status: Whether the game is active or finished
    """

    model_config = ConfigDict(frozen=True)

    config: SessionConfig = Field(default_factory=SessionConfig)
    dictionary: FrozenSet[str] = Field(default_factory=frozenset, exclude=True, repr=False)
    backbone_word: str
    pool_word: str
    target: LetterSequence
    pool: LetterSequence
    placements: PlacementRecord = Field(default_factory=PlacementRecord)
    detected_words: Tuple[DetectedWord, ...] = ()
    harvested_words: Tuple[str, ...] = ()
    history: UndoHistory = Field(default_factory=UndoHistory)
    dragging: Optional[int] = None
    time_remaining: float = 120.0
    status: SessionStatus = "active"

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def available_pool_indices(self) -> List[int]:
        return [i for i, letter in enumerate(self.pool.letters) if letter.is_available]

    def snapshot(self) -> GameStateSnapshot:
        """Capture the undoable part of this state."""
        return GameStateSnapshot(
            target=self.target,
            pool=self.pool,
            placements=self.placements,
            detected_words=self.detected_words,
            harvested_words=self.harvested_words,
        )

    def summary(self) -> Dict[str, Any]:
        """JSON-friendly view of the session, for logging and result files."""
        return {
            "backbone_word": self.backbone_word,
            "pool_word": self.pool_word,
            "target": self.target.text,
            "available_letters": "".join(
                self.pool.get_at(i).value for i in self.available_pool_indices
            ),
            "placed_indices": list(self.placements.placed),
            "detected_words": [w.model_dump() for w in self.detected_words],
            "harvested_words": list(self.harvested_words),
            "undo_depth": self.history.depth,
            "time_remaining": self.time_remaining,
            "status": self.status,
        }
