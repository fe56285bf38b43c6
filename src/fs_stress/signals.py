"""Bridge from OS signals into the orchestrator's cancellation event.

The handler only records the signal and sets an event. Shutdown itself runs
in the main context, so a second SIGINT or SIGTERM arriving mid-shutdown
cannot interrupt it.
"""

import signal
import threading
from typing import Dict, Iterable, Optional

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SignalBridge:
    """Turns SIGINT/SIGTERM into a threading.Event.

    Usable as a context manager; previous handlers are restored on exit.
    """

    def __init__(self, signals: Iterable[int] = DEFAULT_SIGNALS):
        self.signals = tuple(signals)
        self.event = threading.Event()
        self.received: Optional[int] = None
        self._previous: Dict[int, object] = {}

    @property
    def triggered(self) -> bool:
        return self.event.is_set()

    def install(self) -> None:
        for signum in self.signals:
            self._previous[signum] = signal.signal(signum, self._handle)

    def restore(self) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def trigger(self, signum: Optional[int] = None) -> None:
        """Report an interruption without a real signal."""
        if self.received is None:
            self.received = signum
        self.event.set()

    def _handle(self, signum, frame) -> None:
        self.trigger(signum)

    def __enter__(self) -> "SignalBridge":
        self.install()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()
