"""Run timer: the bounded-duration wait of a stress run."""

import threading
import time
from enum import Enum
from typing import Callable, Optional


class RunOutcome(str, Enum):
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"


class RunTimer:
    """Tracks the global time budget and blocks until it runs out.

    The wait returns early when ``cancel_event`` is set, which is how
    signals reach the main context.
    """

    def __init__(
        self,
        duration_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.duration_seconds = duration_seconds
        self._clock = clock
        self._started_at: Optional[float] = None

    def start(self) -> None:
        self._started_at = self._clock()

    @property
    def elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return self._clock() - self._started_at

    @property
    def remaining(self) -> float:
        return max(0.0, self.duration_seconds - self.elapsed)

    def wait(self, cancel_event: threading.Event) -> RunOutcome:
        if self._started_at is None:
            self.start()

        while True:
            if cancel_event.is_set():
                return RunOutcome.INTERRUPTED
            remaining = self.remaining
            if remaining <= 0:
                return RunOutcome.COMPLETED
            if cancel_event.wait(remaining):
                return RunOutcome.INTERRUPTED
