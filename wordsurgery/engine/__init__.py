"""Letter placement and word detection engine for word-surgery."""

from .models import Letter, LetterSequence, PlacementRecord, DetectedWord
from .constraints import (
    chain_anchor,
    chain_extension,
    chain_ends,
    is_letter_eligible,
    is_destination_valid,
    is_edge_letter,
    is_chain_contiguous,
    valid_destinations,
)
from .detection import detect_words, filter_contained_words, has_added_letter, MIN_WORD_LENGTH
from .throttle import DetectionThrottle

__all__ = [
    # Models
    "Letter",
    "LetterSequence",
    "PlacementRecord",
    "DetectedWord",
    # Placement rules
    "chain_anchor",
    "chain_extension",
    "chain_ends",
    "is_letter_eligible",
    "is_destination_valid",
    "is_edge_letter",
    "is_chain_contiguous",
    "valid_destinations",
    # Detection
    "detect_words",
    "filter_contained_words",
    "has_added_letter",
    "MIN_WORD_LENGTH",
    "DetectionThrottle",
]
