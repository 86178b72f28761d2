"""Tests for word detection and the detection throttle."""

from loguru import logger

from wordsurgery.engine import (
    DetectedWord,
    DetectionThrottle,
    Letter,
    LetterSequence,
    detect_words,
    filter_contained_words,
    has_added_letter,
)


def pool_target(word):
    """A target made only of pool letters."""
    return LetterSequence.pool(word)


def backbone_with(backbone, placed):
    target = LetterSequence.backbone(backbone)
    for slot, char, original_index in placed:
        target = target.insert_at(Letter(value=char, original_index=original_index), slot)
    return target


class TestDetectWords:
    """Test cases for dictionary detection over the target."""

    def test_finds_word_with_added_letters(self):
        """A prefix spelled by placed letters is detected."""
        target = backbone_with("dt", [(0, "c", 0), (1, "a", 1), (2, "r", 2)])
        words = detect_words(target, {"cat", "car", "art"})
        assert words == [DetectedWord(word="car", start_index=0, end_index=2)]

    def test_nothing_before_word_is_complete(self):
        """No word is detected while it is still incomplete."""
        target = backbone_with("dt", [(0, "c", 0), (1, "a", 1)])
        assert detect_words(target, {"cat", "car", "art"}) == []

    def test_backbone_only_word_ignored(self):
        """A word made entirely of backbone letters is never reported."""
        assert detect_words(LetterSequence.backbone("cat"), {"cat"}) == []

    def test_backbone_substring_ignored(self):
        """Backbone-only substrings stay hidden even when a pool letter is present."""
        target = backbone_with("cat", [(3, "s", 0)])
        assert detect_words(target, {"cat"}) == []

    def test_word_spanning_backbone_and_pool(self):
        """A word may mix backbone and placed letters."""
        target = backbone_with("cat", [(3, "s", 0)])
        assert detect_words(target, {"cat", "cats"}) == [
            DetectedWord(word="cats", start_index=0, end_index=3)
        ]

    def test_contained_word_dropped(self):
        """A match nested inside a longer match is filtered out."""
        words = detect_words(pool_target("xcartx"), {"car", "cart"})
        assert words == [DetectedWord(word="cart", start_index=1, end_index=4)]

    def test_overlapping_words_kept(self):
        """Overlapping matches that do not contain each other both survive."""
        words = detect_words(pool_target("carts"), {"car", "cart", "arts"})
        assert [(w.word, w.start_index, w.end_index) for w in words] == [
            ("cart", 0, 3),
            ("arts", 1, 4),
        ]

    def test_short_words_ignored(self):
        """Words below the minimum length are not found."""
        assert detect_words(pool_target("at"), {"at"}) == []
        assert detect_words(pool_target("xatx"), {"at"}) == []

    def test_custom_min_length(self):
        """The minimum length can be lowered."""
        words = detect_words(pool_target("at"), {"at"}, min_length=2)
        assert words == [DetectedWord(word="at", start_index=0, end_index=1)]

    def test_empty_target(self):
        """An empty target has no words."""
        assert detect_words(LetterSequence(), {"cat"}) == []

    def test_case_insensitive(self):
        """Uppercase letter values match lowercase dictionary words."""
        assert detect_words(pool_target("CAR"), {"car"})[0].word == "car"

    def test_deterministic(self):
        """Repeated calls on the same input give the same result."""
        target = pool_target("cartsandcars")
        dictionary = {"car", "cart", "carts", "arts", "and", "sand", "cars"}
        first = detect_words(target, dictionary)
        assert first == detect_words(target, dictionary)
        assert first == detect_words(target, set(dictionary))

    def test_dictionary_change_between_calls(self):
        """No state carries over from one call to the next."""
        target = pool_target("car")
        assert detect_words(target, {"cat"}) == []
        assert len(detect_words(target, {"car"})) == 1

    def test_sorted_by_position(self):
        """Words are returned in target order."""
        words = detect_words(pool_target("dogxcat"), {"dog", "cat"})
        assert [w.word for w in words] == ["dog", "cat"]

    def test_logs_matches(self):
        """Each match and the filtered total are logged at debug level."""
        messages = []
        handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
        try:
            detect_words(pool_target("car"), {"car"})
        finally:
            logger.remove(handler_id)
        text = "".join(messages)
        assert "Found word 'car' at 0-2" in text
        assert "Found 1 words, filtered to 1" in text


class TestFilterContainedWords:
    """Test cases for containment filtering."""

    def test_deduplicates(self):
        """Equal ranges are reported once."""
        word = DetectedWord(word="car", start_index=0, end_index=2)
        assert filter_contained_words([word, word]) == [word]

    def test_drops_nested(self):
        """A range inside another is dropped."""
        outer = DetectedWord(word="carts", start_index=0, end_index=4)
        inner = DetectedWord(word="art", start_index=1, end_index=3)
        assert filter_contained_words([inner, outer]) == [outer]

    def test_empty(self):
        """Filtering nothing gives nothing."""
        assert filter_contained_words([]) == []


class TestHasAddedLetter:
    """Test cases for the pool-letter check."""

    def test_range_with_pool_letter(self):
        """A range holding a placed letter qualifies."""
        target = backbone_with("cat", [(3, "s", 0)])
        assert has_added_letter(target, 1, 3) is True

    def test_range_without_pool_letter(self):
        """A backbone-only range does not qualify."""
        target = backbone_with("cat", [(3, "s", 0)])
        assert has_added_letter(target, 0, 2) is False


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestDetectionThrottle:
    """Test cases for detection rate limiting."""

    def test_first_request_runs(self):
        """The first request runs at once."""
        throttle = DetectionThrottle(interval=0.3, clock=FakeClock())
        assert throttle.request() is True
        assert throttle.pending is False

    def test_burst_is_deferred(self):
        """Requests inside the interval wait for poll."""
        clock = FakeClock()
        throttle = DetectionThrottle(interval=0.3, clock=clock)
        throttle.request()
        clock.now = 0.1
        assert throttle.request() is False
        assert throttle.pending is True
        assert throttle.poll() is False

        clock.now = 0.4
        assert throttle.poll() is True
        assert throttle.pending is False
        assert throttle.poll() is False

    def test_flush_ignores_timing(self):
        """Flushing runs a pending request regardless of the interval."""
        clock = FakeClock()
        throttle = DetectionThrottle(interval=0.3, clock=clock)
        throttle.request()
        throttle.request()
        assert throttle.flush() is True
        assert throttle.flush() is False

    def test_request_after_interval_runs(self):
        """A request once the interval has passed runs at once."""
        clock = FakeClock()
        throttle = DetectionThrottle(interval=0.3, clock=clock)
        throttle.request()
        clock.now = 0.3
        assert throttle.request() is True

    def test_reset(self):
        """Reset forgets the last run and any pending request."""
        clock = FakeClock()
        throttle = DetectionThrottle(interval=0.3, clock=clock)
        throttle.request()
        throttle.request()
        throttle.reset()
        assert throttle.pending is False
        assert throttle.request() is True
