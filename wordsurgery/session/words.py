import random
from typing import Optional, Sequence, TYPE_CHECKING
from pydantic import BaseModel

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger


# Built-in pair used when no qualifying words are found
FALLBACK_BACKBONE = "voiture"
FALLBACK_POOL = "verrat"


class WordPair(BaseModel):
    """The two words a session is built from."""
    backbone: str
    pool: str
    is_fallback: bool = False


def generate_word_pair(
    word_pool: Sequence[str],
    length_min: int = 5,
    length_max: int = 8,
    max_attempts: int = 1000,
    rng: Optional[random.Random] = None,
    fallback: Optional[WordPair] = None,
    log: Optional["Logger"] = None,
) -> WordPair:
    """
    Pick a backbone word and a pool word at random.

    Both words are drawn independently from ``word_pool`` and must have a
    length within [length_min, length_max]. After ``max_attempts`` draws
    without a qualifying pair, the fallback pair is returned.

    Args:
        word_pool: Candidate words
        length_min: Minimum word length (inclusive)
        length_max: Maximum word length (inclusive)
        max_attempts: Number of draws before falling back
        rng: Random generator (a fresh unseeded one if omitted)
        fallback: Pair returned when no qualifying pair is found
        log: Logger (defaults to the loguru logger)

    Returns:
        The chosen word pair, lowercased
    """
    log = log or logger
    rng = rng or random.Random()
    fallback = fallback or WordPair(backbone=FALLBACK_BACKBONE, pool=FALLBACK_POOL)

    def qualifies(word: str) -> bool:
        return length_min <= len(word) <= length_max and word.isalpha()

    if word_pool:
        for _ in range(max_attempts):
            backbone = word_pool[rng.randrange(len(word_pool))].strip().lower()
            pool = word_pool[rng.randrange(len(word_pool))].strip().lower()
            if qualifies(backbone) and qualifies(pool):
                log.info(f"Selected random word pair: {backbone}, {pool}")
                return WordPair(backbone=backbone, pool=pool)

    log.warning(
        f"No word pair of length {length_min}-{length_max} found in "
        f"{len(word_pool)} words, using fallback words"
    )
    return WordPair(
        backbone=fallback.backbone.lower(),
        pool=fallback.pool.lower(),
        is_fallback=True,
    )
