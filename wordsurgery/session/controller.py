"""
Game session operations.

Every operation takes the current ``SessionState`` and returns a new one.
A command that is not legal in the current state is rejected: it is logged at
debug level and the very same state object is returned, so callers can check
``new_state is state`` instead of catching exceptions.

Operations that change the target re-run word detection unless called with
``detect=False`` (used when detection is throttled by the caller).
"""

import random
from typing import Any, Dict, Iterable, List, Optional, Sequence, TYPE_CHECKING

from loguru import logger

from ..dictionary import build_dictionary
from ..engine import constraints
from ..engine.detection import detect_words as _detect
from ..engine.models import DetectedWord, LetterSequence
from .models import SessionConfig, SessionState
from .words import WordPair, generate_word_pair

if TYPE_CHECKING:
    from loguru import Logger


def _reject(state: SessionState, code: str, message: str, log: "Logger") -> SessionState:
    log.debug(f"Rejected [{code}]: {message}")
    return state


def session_from_words(
    dictionary: Iterable[str],
    backbone: str,
    pool: str,
    *,
    config: Optional[SessionConfig] = None,
    log: Optional["Logger"] = None,
) -> SessionState:
    """
    Build a session from an explicit backbone/pool word pair.

    Args:
        dictionary: Dictionary words (case-insensitive)
        backbone: The target word whose letters stay in place
        pool: The word whose letters are placed into the target
        config: Session configuration
        log: Logger (defaults to the loguru logger)

    Returns:
        A new active session
    """
    log = log or logger
    config = config or SessionConfig()
    backbone = backbone.strip().lower()
    pool = pool.strip().lower()
    log.info(f"New session: backbone '{backbone}', pool '{pool}'")
    return SessionState(
        config=config,
        dictionary=build_dictionary(dictionary),
        backbone_word=backbone,
        pool_word=pool,
        target=LetterSequence.backbone(backbone),
        pool=LetterSequence.pool(pool),
        time_remaining=config.game_duration,
    )


def new_session(
    dictionary: Iterable[str],
    word_pool: Sequence[str],
    length_min: Optional[int] = None,
    length_max: Optional[int] = None,
    *,
    config: Optional[SessionConfig] = None,
    rng: Optional[random.Random] = None,
    log: Optional["Logger"] = None,
) -> SessionState:
    """
    Start a session from a random word pair.

    Args:
        dictionary: Dictionary words used for detection
        word_pool: Words to draw the backbone and pool words from
        length_min: Minimum word length (overrides config)
        length_max: Maximum word length (overrides config)
        config: Session configuration
        rng: Random generator (seeded from config.seed if omitted)
        log: Logger (defaults to the loguru logger)

    Returns:
        A new active session; uses the fallback pair if no pair qualifies
    """
    log = log or logger
    config = config or SessionConfig()
    overrides: Dict[str, Any] = {}
    if length_min is not None:
        overrides["length_min"] = length_min
    if length_max is not None:
        overrides["length_max"] = length_max
    if overrides:
        config = config.model_copy(update=overrides)

    rng = rng or random.Random(config.seed)
    pair = generate_word_pair(
        word_pool,
        length_min=config.length_min,
        length_max=config.length_max,
        max_attempts=config.max_attempts,
        rng=rng,
        fallback=WordPair(backbone=config.fallback_backbone, pool=config.fallback_pool),
        log=log,
    )
    return session_from_words(dictionary, pair.backbone, pair.pool, config=config, log=log)


def reset_session(
    state: SessionState,
    word_pool: Sequence[str],
    *,
    rng: Optional[random.Random] = None,
    log: Optional["Logger"] = None,
) -> SessionState:
    """Start over with a fresh word pair, keeping dictionary and config."""
    log = log or logger
    log.info(f"Resetting session ({state.status})")
    return new_session(state.dictionary, word_pool, config=state.config, rng=rng, log=log)


# Queries

def is_solved(state: SessionState) -> bool:
    """Target emptied, or nothing placed and nothing left to place."""
    if len(state.target) == 0:
        return True
    return not state.target.added_letters and not state.available_pool_indices


def is_letter_eligible(state: SessionState, original_index: int) -> bool:
    """Whether the pool letter at ``original_index`` may be dragged now."""
    if not state.is_active or not 0 <= original_index < len(state.pool):
        return False
    if not state.pool.get_at(original_index).is_available:
        return False
    return constraints.is_letter_eligible(state.placements, original_index)


def is_destination_valid(state: SessionState, insert_index: int) -> bool:
    """Whether the letter being dragged may be dropped at ``insert_index``."""
    dragged = None
    if state.dragging is not None:
        dragged = state.pool.get_at(state.dragging).original_index
    return constraints.is_destination_valid(
        state.placements, len(state.target), insert_index, dragged
    )


def valid_destinations(state: SessionState) -> List[int]:
    return [i for i in range(len(state.target) + 1) if is_destination_valid(state, i)]


def eligible_letters(state: SessionState) -> List[int]:
    return [i for i in range(len(state.pool)) if is_letter_eligible(state, i)]


def detect_words(state: SessionState, log: Optional["Logger"] = None) -> List[DetectedWord]:
    """Dictionary words currently in the target. Does not change the state."""
    return _detect(state.target, state.dictionary, state.config.min_word_length, log=log)


def get_state(state: SessionState) -> Dict[str, Any]:
    """
    Get the session as a dictionary.

    Useful for serialization and logging.
    """
    summary = state.summary()
    summary.update({
        "can_undo": state.can_undo,
        "dragging": state.dragging,
        "eligible_letters": eligible_letters(state),
    })
    return summary


# Internal transitions

def refresh_detection(state: SessionState, log: Optional["Logger"] = None) -> SessionState:
    """Recompute the detected words for the current target."""
    return state.model_copy(update={"detected_words": tuple(detect_words(state, log=log))})


def _finish_if_solved(state: SessionState, log: "Logger") -> SessionState:
    if state.is_active and is_solved(state):
        log.info(f"Session completed with words: {', '.join(state.harvested_words) or 'none'}")
        return state.model_copy(update={"status": "completed"})
    return state


def _after_change(state: SessionState, detect: bool, log: "Logger") -> SessionState:
    if detect:
        state = refresh_detection(state, log=log)
    return _finish_if_solved(state, log)


def _placement_error(state: SessionState, pool_index: int, target_index: int) -> Optional[str]:
    if not 0 <= pool_index < len(state.pool):
        return f"pool index {pool_index} out of range"
    letter = state.pool.get_at(pool_index)
    if not letter.is_available:
        return f"pool letter {pool_index} '{letter.value}' is not available"
    if not constraints.is_letter_eligible(state.placements, letter.original_index):
        return f"pool letter {pool_index} '{letter.value}' is not next to the placed chain"
    if not constraints.is_destination_valid(
        state.placements, len(state.target), target_index, letter.original_index
    ):
        return f"target index {target_index} is not a valid destination for '{letter.value}'"
    return None


def _place(state: SessionState, pool_index: int, target_index: int, log: "Logger") -> SessionState:
    letter = state.pool.get_at(pool_index)
    log.debug(f"Inserting letter '{letter.value}' at index {target_index}")
    return state.model_copy(update={
        "target": state.target.insert_at(letter, target_index),
        "pool": state.pool.replace_at(
            pool_index, letter.model_copy(update={"is_available": False})
        ),
        "placements": state.placements.with_insertion(letter.original_index, target_index),
    })


# Commands

def start_drag(
    state: SessionState,
    pool_index: int,
    log: Optional["Logger"] = None,
) -> SessionState:
    """
    Begin dragging a pool letter.

    Holds a tentative undo snapshot; a second drag start before the first
    resolves switches the dragged letter but keeps the first snapshot.
    """
    log = log or logger
    if not state.is_active:
        return _reject(state, "INACTIVE", f"session is {state.status}", log)
    if not is_letter_eligible(state, pool_index):
        return _reject(state, "NOT_ELIGIBLE", f"pool letter {pool_index} cannot be dragged", log)
    return state.model_copy(update={
        "dragging": pool_index,
        "history": state.history.record(state.snapshot(), "drag_start"),
    })


def cancel_drag(state: SessionState, log: Optional["Logger"] = None) -> SessionState:
    """Abort the current drag without leaving an undo entry."""
    log = log or logger
    if state.dragging is None and not state.history.drag_in_progress:
        return _reject(state, "NO_DRAG", "no drag in progress", log)
    log.debug("Drag aborted")
    return state.model_copy(update={
        "dragging": None,
        "history": state.history.end_drag(placed=False),
    })


def drop_letter(
    state: SessionState,
    target_index: int,
    detect: bool = True,
    log: Optional["Logger"] = None,
) -> SessionState:
    """
    End the current drag by dropping the letter at ``target_index``.

    An illegal drop ends the drag as aborted.
    """
    log = log or logger
    if state.dragging is None:
        return _reject(state, "NO_DRAG", f"drop at {target_index} without a drag", log)
    if not state.is_active:
        log.debug(f"Drop at {target_index} after session ended")
        return cancel_drag(state, log=log)

    error = _placement_error(state, state.dragging, target_index)
    if error is not None:
        log.debug(f"No valid drop position: {error}")
        return cancel_drag(state, log=log)

    placed = _place(state, state.dragging, target_index, log)
    placed = placed.model_copy(update={
        "dragging": None,
        "history": state.history.end_drag(placed=True),
    })
    return _after_change(placed, detect, log)


def insert_letter(
    state: SessionState,
    pool_index: int,
    target_index: int,
    detect: bool = True,
    log: Optional["Logger"] = None,
) -> SessionState:
    """Place a pool letter into the target in one step (undoable)."""
    log = log or logger
    if not state.is_active:
        return _reject(state, "INACTIVE", f"session is {state.status}", log)
    if state.dragging is not None:
        return _reject(state, "DRAG_IN_PROGRESS", "finish the current drag first", log)
    error = _placement_error(state, pool_index, target_index)
    if error is not None:
        return _reject(state, "INVALID_PLACEMENT", error, log)

    placed = _place(state, pool_index, target_index, log)
    placed = placed.model_copy(
        update={"history": state.history.record(state.snapshot(), "insert_letter")}
    )
    return _after_change(placed, detect, log)


def remove_edge_letter(
    state: SessionState,
    target_index: int,
    detect: bool = True,
    log: Optional["Logger"] = None,
) -> SessionState:
    """
    Tap a placed letter back to the pool.

    Only the lowest or highest placed letter (by pool order) may be removed.
    The letter becomes available again.
    """
    log = log or logger
    if not state.is_active:
        return _reject(state, "INACTIVE", f"session is {state.status}", log)
    if state.dragging is not None:
        return _reject(state, "DRAG_IN_PROGRESS", "finish the current drag first", log)
    if not constraints.is_edge_letter(state.target, target_index):
        return _reject(state, "NOT_EDGE", f"letter at {target_index} is not a chain end", log)

    letter = state.target.get_at(target_index)
    original_index = letter.original_index
    recorded = state.placements.position_of(original_index)
    if recorded != target_index:
        log.warning(
            f"Placement record has letter {original_index} at {recorded}, "
            f"found at {target_index}"
        )

    pool = state.pool
    pool_index = pool.find_original(original_index)
    if pool_index is not None:
        pool = pool.replace_at(
            pool_index, pool.get_at(pool_index).model_copy(update={"is_available": True})
        )
    else:
        log.warning(f"No pool letter with original index {original_index}")

    log.debug(f"Tapped letter '{letter.value}' at index {target_index}")
    removed = state.model_copy(update={
        "target": state.target.remove_at(target_index),
        "pool": pool,
        "placements": state.placements.with_removal(original_index, target_index),
        "history": state.history.record(state.snapshot(), "tap_letter"),
    })
    return _after_change(removed, detect, log)


def remove_detected_word(
    state: SessionState,
    word: DetectedWord,
    detect: bool = True,
    log: Optional["Logger"] = None,
) -> SessionState:
    """
    Harvest a detected word.

    Removes the word's slots from the target, retires its pool letters for
    good and clears the detected words before re-running detection.
    """
    log = log or logger
    if not state.is_active:
        return _reject(state, "INACTIVE", f"session is {state.status}", log)
    if state.dragging is not None:
        return _reject(state, "DRAG_IN_PROGRESS", "finish the current drag first", log)
    if word not in state.detected_words:
        return _reject(state, "UNKNOWN_WORD", f"'{word.word}' is not a detected word", log)
    if word.end_index >= len(state.target) or (
        state.target.text[word.start_index:word.end_index + 1] != word.word
    ):
        return _reject(state, "STALE_WORD", f"'{word.word}' no longer matches the target", log)

    harvested = [
        state.target.get_at(i).original_index
        for i in range(word.start_index, word.end_index + 1)
        if not state.target.get_at(i).is_backbone
    ]
    retired = set(harvested)
    pool = LetterSequence(letters=tuple(
        letter.model_copy(update={"is_available": False, "is_completed": True})
        if letter.original_index in retired else letter
        for letter in state.pool.letters
    ))

    log.info(f"Harvested '{word.word}' ({len(harvested)} pool letters)")
    removed = state.model_copy(update={
        "target": state.target.remove_range(word.start_index, word.end_index),
        "pool": pool,
        "placements": state.placements.with_range_removed(
            harvested, word.start_index, word.end_index
        ),
        "detected_words": (),
        "harvested_words": state.harvested_words + (word.word,),
        "history": state.history.record(state.snapshot(), "remove_word"),
    })
    return _after_change(removed, detect, log)


def undo(state: SessionState, log: Optional["Logger"] = None) -> SessionState:
    """Restore the state saved before the last undoable action."""
    log = log or logger
    if not state.is_active:
        return _reject(state, "INACTIVE", f"session is {state.status}", log)
    history, snapshot = state.history.pop()
    if snapshot is None:
        return _reject(state, "EMPTY_HISTORY", "nothing to undo", log)
    log.debug("Undo completed - restored previous state")
    return state.model_copy(update={
        "target": snapshot.target,
        "pool": snapshot.pool,
        "placements": snapshot.placements,
        "detected_words": snapshot.detected_words,
        "harvested_words": snapshot.harvested_words,
        "history": history,
        "dragging": None,
    })


def tick(
    state: SessionState,
    elapsed_seconds: float,
    log: Optional["Logger"] = None,
) -> SessionState:
    """Advance the countdown; the session times out when it reaches zero."""
    log = log or logger
    if not state.is_active or elapsed_seconds <= 0:
        return state
    remaining = max(0.0, state.time_remaining - elapsed_seconds)
    if remaining > 0:
        return state.model_copy(update={"time_remaining": remaining})
    log.info("Time's up")
    return state.model_copy(update={
        "time_remaining": 0.0,
        "status": "timed_out",
        "dragging": None,
        "history": state.history.end_drag(placed=False),
    })
