from typing import Collection, List, Sequence

from ..engine.models import DetectedWord, LetterSequence
from ..session import controller
from ..session.models import SessionState


def format_time(seconds: float) -> str:
    """Format a countdown as mm:ss."""
    total = max(0, int(seconds))
    return f"{total // 60}:{total % 60:02d}"


def render_target(target: LetterSequence, destinations: Collection[int] = ()) -> str:
    """
    Render the target on two lines: letters and slot numbers.

    Backbone letters are lowercase, placed pool letters uppercase. A ``^``
    before a letter (or at the end) marks a valid drop position.
    """
    letters = []
    numbers = []
    for i in range(len(target) + 1):
        marker = "^" if i in destinations else " "
        if i == len(target):
            letters.append(marker)
            break
        letter = target.get_at(i)
        value = letter.value.lower() if letter.is_backbone else letter.value.upper()
        letters.append(f"{marker}{value}")
        numbers.append(f" {i % 10}")
    return "".join(letters).rstrip() + "\n" + "".join(numbers)


def render_pool(pool: LetterSequence, eligible: Collection[int] = ()) -> str:
    """
    Render the pool letters.

    Draggable letters are shown plain, blocked ones in parentheses, placed
    ones as ``_`` and harvested ones as ``*``.
    """
    cells = []
    for i, letter in enumerate(pool.letters):
        if letter.is_completed:
            cells.append("*")
        elif not letter.is_available:
            cells.append("_")
        elif i in eligible:
            cells.append(letter.value)
        else:
            cells.append(f"({letter.value})")
    return " ".join(cells)


def render_detected(words: Sequence[DetectedWord]) -> List[str]:
    return [
        f"{n}. {word.word} [{word.start_index}-{word.end_index}]"
        for n, word in enumerate(words, start=1)
    ]


def render_session(state: SessionState) -> str:
    """Render the whole session for the text front-end."""
    lines = [
        f"Time: {format_time(state.time_remaining)}   Status: {state.status}"
        f"   Undo: {state.history.depth}",
        render_target(state.target, controller.valid_destinations(state)),
        "Pool: " + render_pool(state.pool, controller.eligible_letters(state)),
    ]
    if state.dragging is not None:
        lines.append(f"Dragging: {state.pool.get_at(state.dragging).value} ({state.dragging})")
    detected = render_detected(state.detected_words)
    if detected:
        lines.append("Words:")
        lines.extend(f"  {line}" for line in detected)
    if state.harvested_words:
        lines.append("Harvested: " + ", ".join(state.harvested_words))
    return "\n".join(lines)
