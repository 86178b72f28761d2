"""
Placement rules for pool letters.

Pool letters must be placed as a growing chain: after the first placement,
only a letter whose original index is next to an already-placed one may move,
and it must land directly before or after that neighbour in the target.

Both the eligibility and destination predicates are derived from
``chain_extension`` so they cannot drift apart.
"""

from typing import List, Optional, Tuple

from .models import LetterSequence, PlacementRecord


def chain_anchor(
    record: PlacementRecord,
    original_index: int,
    target_length: Optional[int] = None,
) -> Optional[Tuple[int, int]]:
    """
    Find the placed neighbour a letter would attach to.

    Returns (neighbour original index, neighbour target position), or None when
    no placed neighbour has a known position. Positions outside the target are
    ignored.
    """
    for placed in record.placed:
        if abs(original_index - placed) != 1:
            continue
        position = record.position_of(placed)
        if position is None:
            continue
        if target_length is not None and not 0 <= position < target_length:
            continue
        return placed, position
    return None


def chain_extension(
    record: PlacementRecord,
    original_index: int,
    target_length: Optional[int] = None,
) -> Optional[int]:
    """
    The single insertion index that legally extends the chain with this letter.

    None means the letter cannot extend the chain. Only meaningful once at
    least one letter is placed.
    """
    anchor = chain_anchor(record, original_index, target_length)
    if anchor is None:
        return None
    neighbour, position = anchor
    return position if original_index < neighbour else position + 1


def is_letter_eligible(record: PlacementRecord, original_index: int) -> bool:
    """Whether a pool letter may be dragged, by adjacency to the placed chain."""
    if record.is_empty:
        return True
    return any(abs(original_index - placed) == 1 for placed in record.placed)


def is_destination_valid(
    record: PlacementRecord,
    target_length: int,
    insert_index: int,
    dragged_index: Optional[int],
) -> bool:
    """
    Whether ``insert_index`` is a legal drop point for the dragged letter.

    ``dragged_index`` is the original index of the letter being dragged, or
    None when no drag is active.
    """
    if not 0 <= insert_index <= target_length:
        return False
    if record.is_empty:
        return True
    if dragged_index is None:
        return False
    return chain_extension(record, dragged_index, target_length) == insert_index


def valid_destinations(
    record: PlacementRecord,
    target_length: int,
    dragged_index: Optional[int],
) -> List[int]:
    return [
        i for i in range(target_length + 1)
        if is_destination_valid(record, target_length, i, dragged_index)
    ]


def chain_ends(target: LetterSequence) -> Tuple[Optional[int], Optional[int]]:
    """Target slots of the lowest and highest placed pool letters."""
    added = [
        (letter.original_index, slot)
        for slot, letter in target.added_letters
        if letter.original_index is not None
    ]
    if not added:
        return None, None
    added.sort()
    return added[0][1], added[-1][1]


def is_edge_letter(target: LetterSequence, index: int) -> bool:
    """Whether the letter at ``index`` may be tapped back out of the target."""
    if not 0 <= index < len(target):
        return False
    if target.get_at(index).is_backbone:
        return False
    first, last = chain_ends(target)
    return index in (first, last)


def is_chain_contiguous(record: PlacementRecord) -> bool:
    """True if the placed original indices form one run with no gaps."""
    if record.is_empty:
        return True
    placed = sorted(record.placed)
    return placed[-1] - placed[0] + 1 == len(placed)
