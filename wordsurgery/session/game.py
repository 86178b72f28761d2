import random
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ..commands import Command
from ..engine.models import DetectedWord
from ..engine.throttle import DetectionThrottle
from . import controller
from .models import SessionConfig, SessionState


class GameSession(BaseModel):
    """
    Stateful front for the session operations.

    Holds the current ``SessionState``, the word pool used for resets, an
    injected loguru logger and an optional detection throttle. UI layers talk
    to this object; every method delegates to ``controller`` with the current
    state, so no handler ever works on a stale copy.

    When a throttle is set, detection after letter moves is deferred to its
    cadence. Pending detection is flushed before any snapshot is taken so the
    undo history always holds up-to-date detected words.

    Attributes:
        state: Current session state
        word_pool: Words used to generate new word pairs
        log: Logger used for every operation
        throttle: Rate limiter for word detection (None runs it immediately)
        session_id: Identifier bound into log records
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    state: SessionState
    word_pool: List[str] = Field(default_factory=list)
    log: Any = None
    throttle: Optional[DetectionThrottle] = None
    session_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    rng: random.Random = Field(default_factory=random.Random)

    def model_post_init(self, __context) -> None:
        """Bind the session id into the logger."""
        self.log = (self.log or logger).bind(session=self.session_id)

    @classmethod
    def create(
        cls,
        dictionary: Iterable[str],
        word_pool: Sequence[str],
        config: Optional[SessionConfig] = None,
        log: Any = None,
        throttled: bool = False,
        clock: Optional[Callable[[], float]] = None,
        pair: Optional[Tuple[str, str]] = None,
    ) -> "GameSession":
        """
        Factory method to create a session.

        Args:
            dictionary: Dictionary words used for detection
            word_pool: Words to draw word pairs from
            config: Session configuration
            log: Logger to inject (defaults to the loguru logger)
            throttled: Whether to rate-limit detection by config.detection_interval
            clock: Time source for the throttle
            pair: Fixed (backbone, pool) words instead of a random pair

        Returns:
            A new GameSession
        """
        config = config or SessionConfig()
        rng = random.Random(config.seed)
        session_id = uuid.UUID(int=rng.getrandbits(128)).hex[:8]
        bound = (log or logger).bind(session=session_id)
        if pair is not None:
            state = controller.session_from_words(
                dictionary, pair[0], pair[1], config=config, log=bound
            )
        else:
            state = controller.new_session(
                dictionary, word_pool, config=config, rng=rng, log=bound
            )

        throttle = None
        if throttled:
            clock_kwargs = {"clock": clock} if clock is not None else {}
            throttle = DetectionThrottle(interval=config.detection_interval, **clock_kwargs)

        return cls(
            state=state,
            word_pool=list(word_pool),
            log=log,
            throttle=throttle,
            session_id=session_id,
            rng=rng,
        )

    # Detection scheduling

    @property
    def _detect_now(self) -> bool:
        return self.throttle is None

    def _changed(self, new_state: SessionState, moved: bool = True) -> bool:
        if new_state is self.state:
            return False
        self.state = new_state
        if moved and self.throttle is not None and self.throttle.request():
            self.state = controller.refresh_detection(self.state, log=self.log)
        return True

    def _flush_detection(self) -> None:
        if self.throttle is not None and self.throttle.flush():
            self.state = controller.refresh_detection(self.state, log=self.log)

    def poll(self) -> bool:
        """Run a deferred detection if it is due. Returns True if it ran."""
        if self.throttle is not None and self.throttle.poll():
            self.state = controller.refresh_detection(self.state, log=self.log)
            return True
        return False

    def flush(self) -> None:
        """Run any deferred detection now."""
        self._flush_detection()

    # Queries

    @property
    def detected_words(self) -> List[DetectedWord]:
        return list(self.state.detected_words)

    @property
    def is_active(self) -> bool:
        return self.state.is_active

    @property
    def can_undo(self) -> bool:
        return self.state.can_undo

    def is_letter_eligible(self, original_index: int) -> bool:
        return controller.is_letter_eligible(self.state, original_index)

    def is_destination_valid(self, insert_index: int) -> bool:
        return controller.is_destination_valid(self.state, insert_index)

    def valid_destinations(self) -> List[int]:
        return controller.valid_destinations(self.state)

    def detect_words(self) -> List[DetectedWord]:
        return controller.detect_words(self.state, log=self.log)

    def get_state(self) -> Dict[str, Any]:
        state = controller.get_state(self.state)
        state["session_id"] = self.session_id
        return state

    # Commands. Each returns True if the state changed.

    def start_drag(self, pool_index: int) -> bool:
        self._flush_detection()
        return self._changed(
            controller.start_drag(self.state, pool_index, log=self.log), moved=False
        )

    def drop(self, target_index: int) -> bool:
        """End the drag at ``target_index``. Returns True if the letter was placed."""
        before = len(self.state.target)
        self._changed(controller.drop_letter(
            self.state, target_index, detect=self._detect_now, log=self.log
        ))
        return len(self.state.target) == before + 1

    def cancel_drag(self) -> bool:
        return self._changed(controller.cancel_drag(self.state, log=self.log), moved=False)

    def insert_letter(self, pool_index: int, target_index: int) -> bool:
        self._flush_detection()
        return self._changed(controller.insert_letter(
            self.state, pool_index, target_index, detect=self._detect_now, log=self.log
        ))

    def tap_letter(self, target_index: int) -> bool:
        self._flush_detection()
        return self._changed(controller.remove_edge_letter(
            self.state, target_index, detect=self._detect_now, log=self.log
        ))

    def harvest(self, word: DetectedWord) -> bool:
        self._flush_detection()
        # A harvest always re-runs detection immediately.
        return self._changed(
            controller.remove_detected_word(self.state, word, log=self.log), moved=False
        )

    def undo(self) -> bool:
        changed = self._changed(controller.undo(self.state, log=self.log), moved=False)
        if changed and self.throttle is not None:
            self.throttle.reset()
        return changed

    def tick(self, elapsed_seconds: float) -> bool:
        return self._changed(
            controller.tick(self.state, elapsed_seconds, log=self.log), moved=False
        )

    def reset(self) -> None:
        self.state = controller.reset_session(
            self.state, self.word_pool, rng=self.rng, log=self.log
        )
        if self.throttle is not None:
            self.throttle.reset()

    def execute(self, command: Command) -> bool:
        """
        Apply a parsed command.

        Args:
            command: The command to apply

        Returns:
            True if the state changed
        """
        name = command.name
        if name == "insert":
            return self.insert_letter(command.int_arg(0), command.int_arg(1))
        if name == "drag":
            return self.start_drag(command.int_arg())
        if name == "drop":
            return self.drop(command.int_arg())
        if name == "cancel":
            return self.cancel_drag()
        if name == "tap":
            return self.tap_letter(command.int_arg())
        if name == "harvest":
            # Word numbers refer to the up-to-date list.
            self._flush_detection()
            number = command.int_arg()
            words = self.state.detected_words
            if not 1 <= number <= len(words):
                self.log.debug(f"Rejected [UNKNOWN_WORD]: no detected word #{number}")
                return False
            return self.harvest(words[number - 1])
        if name == "undo":
            return self.undo()
        if name == "tick":
            return self.tick(command.args[0])
        if name == "reset":
            self.reset()
            return True
        if name == "detect":
            self.flush()
            return False
        return False
