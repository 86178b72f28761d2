"""
Dictionary word detection over the target sequence.

Detection splits the target range in a divide-and-conquer fashion:
1. A range that spells a dictionary word and holds at least one added letter
   is reported as-is and not searched further.
2. Ranges at or below the minimum word length stop the search.
3. Otherwise [start, end-1] and [start+1, end] are searched and combined.

Finally, any match nested inside another match is dropped so only the
longest covering words remain.
"""

from typing import AbstractSet, Dict, List, Optional, Tuple, TYPE_CHECKING

from loguru import logger

from .models import DetectedWord, LetterSequence

if TYPE_CHECKING:
    from loguru import Logger


MIN_WORD_LENGTH = 3


def has_added_letter(target: LetterSequence, start: int, end: int) -> bool:
    """Check if target slots [start, end] contain a non-backbone letter."""
    return any(not target.get_at(i).is_backbone for i in range(start, end + 1))


def filter_contained_words(words: List[DetectedWord]) -> List[DetectedWord]:
    """
    Deduplicate equal ranges and drop words completely contained in another.

    Returns the survivors ordered by (start_index, end_index).
    """
    unique: Dict[Tuple[int, int], DetectedWord] = {}
    for word in words:
        unique.setdefault((word.start_index, word.end_index), word)

    candidates = list(unique.values())
    kept = [
        word for word in candidates
        if not any(other.contains(word) for other in candidates)
    ]
    return sorted(kept, key=lambda w: (w.start_index, w.end_index))


def detect_words(
    target: LetterSequence,
    dictionary: AbstractSet[str],
    min_length: int = MIN_WORD_LENGTH,
    log: Optional["Logger"] = None,
) -> List[DetectedWord]:
    """
    Find the maximal dictionary words in the target.

    Args:
        target: Current target sequence
        dictionary: Lowercase dictionary words
        min_length: Minimum word length considered
        log: Logger for detection tracing (defaults to the loguru logger)

    Returns:
        Detected words with no word nested inside another, sorted by position
    """
    log = log or logger
    length = len(target)
    if length == 0 or length < min_length:
        return []
    if not has_added_letter(target, 0, length - 1):
        return []

    text = target.text
    # Scoped to this call: the dictionary may change between calls.
    cache: Dict[Tuple[int, int], List[DetectedWord]] = {}

    def search(start: int, end: int) -> List[DetectedWord]:
        key = (start, end)
        if key in cache:
            return cache[key]

        substring = text[start:end + 1]
        if substring in dictionary and has_added_letter(target, start, end):
            log.debug(f"Found word '{substring}' at {start}-{end}")
            result = [DetectedWord(word=substring, start_index=start, end_index=end)]
        elif end - start + 1 <= min_length:
            result = []
        else:
            result = search(start, end - 1) + search(start + 1, end)

        cache[key] = result
        return result

    found = search(0, length - 1)
    filtered = filter_contained_words(found)
    log.debug(f"Found {len(found)} words, filtered to {len(filtered)}")
    return filtered
