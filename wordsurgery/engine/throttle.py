"""Rate limiting for word detection."""

import time
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


class DetectionThrottle(BaseModel):
    """
    Decides when a requested detection may run.

    A request runs immediately if ``interval`` seconds have passed since the
    last run; otherwise it stays pending until ``poll`` finds the interval
    elapsed or ``flush`` forces it. Detection is a pure function of the
    target, so running it late only delays the result.

    Attributes:
        interval: Minimum seconds between two detection runs
        clock: Monotonic time source
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    interval: float = Field(default=0.3, ge=0.0)
    clock: Callable[[], float] = time.monotonic
    _last_run: Optional[float] = None
    _pending: bool = False

    @property
    def pending(self) -> bool:
        return self._pending

    def _due(self) -> bool:
        if self._last_run is None:
            return True
        return self.clock() - self._last_run >= self.interval

    def _mark_run(self) -> None:
        self._last_run = self.clock()
        self._pending = False

    def request(self) -> bool:
        """Ask for a detection run. Returns True if it should run now."""
        if self._due():
            self._mark_run()
            return True
        self._pending = True
        return False

    def poll(self) -> bool:
        """Returns True if a pending request is now due."""
        if self._pending and self._due():
            self._mark_run()
            return True
        return False

    def flush(self) -> bool:
        """Returns True if a request was pending, clearing it regardless of timing."""
        if self._pending:
            self._mark_run()
            return True
        return False

    def reset(self) -> None:
        self._last_run = None
        self._pending = False
