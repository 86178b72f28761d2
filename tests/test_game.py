"""Tests for the stateful GameSession wrapper."""

import pytest
from loguru import logger

from wordsurgery.commands import Command, parse_command
from wordsurgery.engine import DetectedWord
from wordsurgery.session import GameSession, SessionConfig


DICTIONARY = {"cat", "car", "art"}


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def session():
    return GameSession.create(DICTIONARY, [], pair=("dt", "car"))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def throttled(clock):
    return GameSession.create(
        DICTIONARY,
        [],
        config=SessionConfig(detection_interval=0.3),
        throttled=True,
        clock=clock,
        pair=("dt", "car"),
    )


def run(session, *lines):
    for line in lines:
        command, errors = parse_command(line)
        assert errors == []
        session.execute(command)


class TestGameSession:
    """Test cases for the stateful session."""

    def test_create_with_pair(self, session):
        """A fixed pair sets the backbone and pool."""
        assert session.state.target.text == "dt"
        assert session.state.pool.text == "car"
        assert session.is_active

    def test_create_random_pair(self):
        """Without a pair the words come from the word pool."""
        session = GameSession.create(DICTIONARY, ["apple", "table"], config=SessionConfig(seed=3))
        assert session.state.backbone_word in ("apple", "table")

    def test_seed_fixes_session_id(self):
        """A seeded config gives a repeatable session id."""
        config = SessionConfig(seed=9)
        first = GameSession.create(DICTIONARY, ["apple"], config=config)
        second = GameSession.create(DICTIONARY, ["apple"], config=config)
        assert first.session_id == second.session_id

    def test_play_to_completion(self, session):
        """Placing and harvesting 'car' completes the game."""
        assert session.insert_letter(0, 0) is True
        assert session.insert_letter(1, 1) is True
        assert session.insert_letter(2, 2) is True
        assert session.detected_words == [DetectedWord(word="car", start_index=0, end_index=2)]

        assert session.harvest(session.detected_words[0]) is True
        assert session.state.status == "completed"
        assert session.is_active is False

    def test_rejected_command_reports_no_change(self, session):
        """Rejected moves return False."""
        session.insert_letter(0, 0)
        assert session.insert_letter(2, 1) is False
        assert session.tap_letter(1) is False

    def test_drag_protocol(self, session):
        """Drag and drop through the session places the letter."""
        session.insert_letter(1, 0)
        assert session.start_drag(2) is True
        assert session.valid_destinations() == [1]
        assert session.is_destination_valid(1) is True
        assert session.drop(1) is True
        assert session.state.target.text == "ardt"

    def test_failed_drop(self, session):
        """A drop at an illegal slot ends the drag without an undo entry."""
        session.insert_letter(1, 0)
        session.start_drag(2)
        assert session.drop(0) is False
        assert session.state.dragging is None
        assert session.state.history.depth == 1

    def test_undo(self, session):
        """Undo restores the target and reports when nothing is left."""
        session.insert_letter(0, 0)
        assert session.can_undo
        assert session.undo() is True
        assert session.state.target.text == "dt"
        assert session.undo() is False

    def test_tick_and_timeout(self, session):
        """The session times out and then rejects moves."""
        session.tick(100)
        assert session.state.time_remaining == 20.0
        session.tick(20)
        assert session.state.status == "timed_out"
        assert session.insert_letter(0, 0) is False

    def test_reset(self):
        """Reset draws a new pair from the word pool and clears history."""
        session = GameSession.create(
            DICTIONARY, ["apple", "table"], config=SessionConfig(seed=1), pair=("dt", "car")
        )
        session.insert_letter(0, 0)
        session.reset()
        assert session.state.backbone_word in ("apple", "table")
        assert session.can_undo is False

    def test_get_state(self, session):
        """The state summary carries the session id."""
        state = session.get_state()
        assert state["session_id"] == session.session_id
        assert state["target"] == "dt"
        assert state["eligible_letters"] == [0, 1, 2]

    def test_session_id_in_log_records(self, session):
        """Every log record is bound to the session id."""
        records = []
        handler_id = logger.add(lambda m: records.append(m.record), level="DEBUG")
        try:
            session.insert_letter(0, 0)
        finally:
            logger.remove(handler_id)
        assert records
        assert all(r["extra"].get("session") == session.session_id for r in records)


class TestExecute:
    """Test cases for applying parsed commands."""

    def test_script(self, session):
        """A command script plays a full game."""
        run(session, "insert 0 0", "insert 1 1", "drag 2", "drop 2", "harvest 1")
        assert session.state.harvested_words == ("car",)
        assert session.state.status == "completed"

    def test_harvest_number_out_of_range(self, session):
        """A harvest number with no detected word changes nothing."""
        assert session.execute(Command(name="harvest", args=(1.0,))) is False

    def test_tap_and_undo(self, session):
        """tap and undo commands round-trip a letter."""
        run(session, "insert 0 0", "insert 1 1", "tap 1")
        assert session.state.target.text == "cdt"
        run(session, "undo")
        assert session.state.target.text == "cadt"

    def test_cancel(self, session):
        """cancel aborts a drag with no undo entry."""
        run(session, "drag 1", "cancel")
        assert session.state.dragging is None
        assert session.can_undo is False

    def test_tick(self, session):
        """tick commands accept fractional seconds."""
        run(session, "tick 2.5")
        assert session.state.time_remaining == 117.5


class TestThrottledDetection:
    """Test cases for rate-limited detection."""

    def test_first_move_detects_immediately(self, throttled):
        """The first move runs detection straight away."""
        throttled.insert_letter(0, 0)
        assert throttled.state.detected_words == ()
        assert throttled.throttle.pending is False

    def test_burst_defers_detection(self, throttled, clock):
        """Moves inside the interval leave detection pending until it is due."""
        throttled.insert_letter(0, 0)
        throttled.insert_letter(1, 1)
        throttled.insert_letter(2, 2)
        assert throttled.state.target.text == "cardt"
        assert throttled.detected_words == []
        assert throttled.poll() is False

        clock.now = 0.5
        assert throttled.poll() is True
        assert throttled.detected_words == [DetectedWord(word="car", start_index=0, end_index=2)]

    def test_flush(self, throttled):
        """flush runs deferred detection at once."""
        throttled.insert_letter(0, 0)
        throttled.insert_letter(1, 1)
        throttled.insert_letter(2, 2)
        throttled.flush()
        assert [w.word for w in throttled.detected_words] == ["car"]

    def test_snapshots_hold_fresh_detection(self, throttled, clock):
        """Pending detection runs before the next undoable action is recorded."""
        throttled.insert_letter(0, 0)
        throttled.insert_letter(1, 1)
        throttled.insert_letter(2, 2)
        throttled.tap_letter(2)
        assert throttled.state.history.stack[-1].detected_words == (
            DetectedWord(word="car", start_index=0, end_index=2),
        )

    def test_harvest_command_uses_current_words(self, throttled):
        """Harvest numbers refer to the words in the latest target, not a deferred list."""
        run(throttled, "insert 0 0", "insert 1 1", "insert 2 2")
        assert throttled.state.detected_words == ()
        assert throttled.execute(Command(name="harvest", args=(1.0,))) is True
        assert throttled.state.harvested_words == ("car",)

    def test_detect_command_flushes(self, throttled):
        """The detect command runs deferred detection."""
        run(throttled, "insert 0 0", "insert 1 1", "insert 2 2", "detect")
        assert [w.word for w in throttled.detected_words] == ["car"]

    def test_harvest_after_flush(self, throttled, clock):
        """A flushed word can be harvested by number."""
        run(throttled, "insert 0 0", "insert 1 1", "insert 2 2", "detect", "harvest 1")
        assert throttled.state.status == "completed"
