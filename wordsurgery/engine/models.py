"""Data models for the letter-placement engine."""

from typing import Dict, Iterable, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, model_validator


class Letter(BaseModel):
    """
    A single character occupying a slot in the target or the pool.

    Backbone letters carry ``initial_position`` (their index in the original
    target word). Pool letters carry ``original_index`` (their index in the
    pool word) and keep it after being placed in the target.
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., min_length=1, max_length=1)
    is_available: bool = True
    initial_position: Optional[int] = Field(None, ge=0)
    original_index: Optional[int] = Field(None, ge=0)
    is_completed: Optional[bool] = None

    @model_validator(mode="after")
    def _check_origin(self) -> "Letter":
        if (self.initial_position is None) == (self.original_index is None):
            raise ValueError(
                f"Letter '{self.value}' needs exactly one of initial_position "
                f"or original_index"
            )
        return self

    @property
    def is_backbone(self) -> bool:
        """True for letters of the original target word."""
        return self.initial_position is not None


class LetterSequence(BaseModel):
    """
    Ordered, copy-on-write collection of letters.

    Every mutation returns a new sequence; the receiver is never modified.
    """

    model_config = ConfigDict(frozen=True)

    letters: Tuple[Letter, ...] = ()

    @classmethod
    def backbone(cls, word: str) -> "LetterSequence":
        """Build the target sequence from the original target word."""
        return cls(letters=tuple(
            Letter(value=char, initial_position=i) for i, char in enumerate(word)
        ))

    @classmethod
    def pool(cls, word: str) -> "LetterSequence":
        """Build the pool sequence from the pool word."""
        return cls(letters=tuple(
            Letter(value=char, original_index=i) for i, char in enumerate(word)
        ))

    def __len__(self) -> int:
        return len(self.letters)

    def length(self) -> int:
        return len(self.letters)

    def _check_index(self, index: int, upper: int) -> None:
        if not 0 <= index < upper:
            raise IndexError(f"index {index} out of range for sequence of length {len(self)}")

    def get_at(self, index: int) -> Letter:
        self._check_index(index, len(self))
        return self.letters[index]

    def insert_at(self, letter: Letter, index: int) -> "LetterSequence":
        """Insert ``letter`` before slot ``index``; ``len(self)`` appends."""
        self._check_index(index, len(self) + 1)
        letters = list(self.letters)
        letters.insert(index, letter)
        return self.model_copy(update={"letters": tuple(letters)})

    def remove_at(self, index: int) -> "LetterSequence":
        self._check_index(index, len(self))
        return self.model_copy(
            update={"letters": self.letters[:index] + self.letters[index + 1:]}
        )

    def remove_range(self, start: int, end: int) -> "LetterSequence":
        """Remove letters in the inclusive range [start, end]."""
        self._check_index(start, len(self))
        self._check_index(end, len(self))
        if end < start:
            raise IndexError(f"empty range {start}-{end}")
        return self.model_copy(
            update={"letters": self.letters[:start] + self.letters[end + 1:]}
        )

    def replace_at(self, index: int, letter: Letter) -> "LetterSequence":
        self._check_index(index, len(self))
        letters = list(self.letters)
        letters[index] = letter
        return self.model_copy(update={"letters": tuple(letters)})

    def find_original(self, original_index: int) -> Optional[int]:
        """Return the slot index holding the pool letter with ``original_index``."""
        for i, letter in enumerate(self.letters):
            if letter.original_index == original_index:
                return i
        return None

    @property
    def text(self) -> str:
        """Lowercase string of the letter values."""
        return "".join(letter.value for letter in self.letters).lower()

    @property
    def added_letters(self) -> List[Tuple[int, Letter]]:
        """(slot index, letter) pairs for every non-backbone letter."""
        return [(i, l) for i, l in enumerate(self.letters) if not l.is_backbone]


class PlacementRecord(BaseModel):
    """
    Where each placed pool letter currently sits in the target.

    ``positions`` maps a pool letter's original index to its target slot;
    ``placed`` lists the placed original indices in placement order.
    Both are replaced, never mutated, on every update.
    """

    model_config = ConfigDict(frozen=True)

    positions: Dict[int, int] = Field(default_factory=dict)
    placed: Tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.placed

    def position_of(self, original_index: int) -> Optional[int]:
        return self.positions.get(original_index)

    def with_insertion(self, original_index: int, insert_index: int) -> "PlacementRecord":
        """Record a letter inserted at ``insert_index``, shifting later slots right."""
        positions = {
            idx: (pos + 1 if pos >= insert_index else pos)
            for idx, pos in self.positions.items()
            if idx != original_index
        }
        positions[original_index] = insert_index
        placed = tuple(p for p in self.placed if p != original_index) + (original_index,)
        return PlacementRecord(positions=positions, placed=placed)

    def with_removal(self, original_index: int, removed_at: int) -> "PlacementRecord":
        """Forget a letter removed from slot ``removed_at``, shifting later slots left."""
        positions = {
            idx: (pos - 1 if pos > removed_at else pos)
            for idx, pos in self.positions.items()
            if idx != original_index
        }
        placed = tuple(p for p in self.placed if p != original_index)
        return PlacementRecord(positions=positions, placed=placed)

    def with_range_removed(
        self,
        original_indices: Iterable[int],
        start: int,
        end: int,
    ) -> "PlacementRecord":
        """Forget letters harvested from [start, end] and close the gap."""
        dropped = set(original_indices)
        span = end - start + 1
        positions = {
            idx: (pos - span if pos > end else pos)
            for idx, pos in self.positions.items()
            if idx not in dropped
        }
        placed = tuple(p for p in self.placed if p not in dropped)
        return PlacementRecord(positions=positions, placed=placed)


class DetectedWord(BaseModel):
    """A dictionary match covering target slots [start_index, end_index]."""

    model_config = ConfigDict(frozen=True)

    word: str
    start_index: int = Field(..., ge=0)
    end_index: int = Field(..., ge=0)

    @property
    def length(self) -> int:
        return self.end_index - self.start_index + 1

    def contains(self, other: "DetectedWord") -> bool:
        """True if ``other`` lies inside this range without being the same range."""
        same = (self.start_index, self.end_index) == (other.start_index, other.end_index)
        return (
            not same
            and self.start_index <= other.start_index
            and other.end_index <= self.end_index
        )
