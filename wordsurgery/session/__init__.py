"""Game session layer for word-surgery."""

from .models import SessionConfig, SessionState, SessionStatus
from .history import GameStateSnapshot, UndoHistory, UndoAction
from .words import WordPair, generate_word_pair, FALLBACK_BACKBONE, FALLBACK_POOL
from .controller import (
    session_from_words,
    new_session,
    reset_session,
    is_solved,
    is_letter_eligible,
    is_destination_valid,
    valid_destinations,
    eligible_letters,
    detect_words,
    get_state,
    refresh_detection,
    start_drag,
    cancel_drag,
    drop_letter,
    insert_letter,
    remove_edge_letter,
    remove_detected_word,
    undo,
    tick,
)
from .game import GameSession

__all__ = [
    "SessionConfig",
    "SessionState",
    "SessionStatus",
    "GameStateSnapshot",
    "UndoHistory",
    "UndoAction",
    "WordPair",
    "generate_word_pair",
    "FALLBACK_BACKBONE",
    "FALLBACK_POOL",
    "session_from_words",
    "new_session",
    "reset_session",
    "is_solved",
    "is_letter_eligible",
    "is_destination_valid",
    "valid_destinations",
    "eligible_letters",
    "detect_words",
    "get_state",
    "refresh_detection",
    "start_drag",
    "cancel_drag",
    "drop_letter",
    "insert_letter",
    "remove_edge_letter",
    "remove_detected_word",
    "undo",
    "tick",
    "GameSession",
]
