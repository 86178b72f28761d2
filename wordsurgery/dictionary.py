"""Word list loading."""

from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional


def normalize_words(words: Iterable[str]) -> List[str]:
    """Lowercase, strip and deduplicate words, keeping first-seen order.

    Entries with non-alphabetic characters are dropped.
    """
    seen = set()
    result = []
    for word in words:
        word = word.strip().lower()
        if not word or not word.isalpha() or word in seen:
            continue
        seen.add(word)
        result.append(word)
    return result


def load_word_list(path: str | Path) -> List[str]:
    """
    Load a word list file with one word per line.

    Args:
        path: Path to the word list

    Returns:
        Normalized words in file order

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Word list not found: {path}")

    with open(path, encoding="utf-8") as f:
        return normalize_words(f)


def build_dictionary(
    words: Iterable[str],
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> FrozenSet[str]:
    """Build a lookup set from words, optionally bounded by length."""
    return frozenset(
        word for word in normalize_words(words)
        if (min_length is None or len(word) >= min_length)
        and (max_length is None or len(word) <= max_length)
    )
