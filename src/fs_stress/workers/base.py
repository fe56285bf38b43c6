"""Base workload abstraction for stress generation.

Provides the abstract base class every workload plugin implements. A
workload is a single independent, indefinitely-looping unit of work that
runs in its own process until the orchestrator terminates it.
"""

import signal
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Optional

WORKER_SIGNALS = {signal.SIGINT, signal.SIGTERM}


class WorkloadCategory(str, Enum):
    """Category tag carried by every workload and worker handle."""

    CPU = "cpu"
    MEMORY = "memory"
    SHARED_WRITER = "shared_writer"
    SHARED_READER = "shared_reader"
    ATTRIBUTE = "attribute"
    CONTESTED_ATTRIBUTE = "contested_attribute"
    METADATA = "metadata"
    LINK = "link"
    SEQUENTIAL = "sequential"


class Workload(ABC):
    """Abstract base class for stress workloads.

    Implements the Template Method pattern for the worker loop:
    1. setup() - Prepare the unit's resource (once)
    2. iterate() - One pass of the stress payload (forever)

    OSError raised by either step is swallowed: transient resource
    exhaustion under load is expected and must not stop the worker.
    """

    @property
    @abstractmethod
    def category(self) -> WorkloadCategory:
        """Return the workload category."""
        pass

    def setup(self) -> None:
        """Prepare resources before the loop starts."""

    @abstractmethod
    def iterate(self) -> None:
        """Run one pass of the workload."""
        pass

    def run(self, max_iterations: Optional[int] = None) -> int:
        """Run the workload loop.

        Args:
            max_iterations: Stop after this many passes. None loops until
                the process is terminated.

        Returns:
            Number of passes executed
        """
        try:
            self.setup()
        except OSError:
            pass

        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            try:
                self.iterate()
            except OSError:
                pass
            iterations += 1
        return iterations


@contextmanager
def worker_signals_blocked():
    """Block SIGINT and SIGTERM in the calling thread for the duration.

    Wrap process.start() in this: a forked child inherits the parent's
    handlers along with the mask, so a SIGTERM sent before run_workload
    resets them stays pending instead of reaching the parent's handler.
    """
    previous = signal.pthread_sigmask(signal.SIG_BLOCK, WORKER_SIGNALS)
    try:
        yield
    finally:
        signal.pthread_sigmask(signal.SIG_SETMASK, previous)


def run_workload(workload: Workload) -> None:
    """Process entry point for a workload.

    The parent owns interrupt handling: children ignore SIGINT (a Ctrl-C on
    the terminal reaches the whole process group) and take the default
    action on SIGTERM so terminate() stops them even mid-syscall. Both are
    unblocked only after that, so a pending SIGTERM lands on SIG_DFL.
    """
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    signal.signal(signal.SIGTERM, signal.SIG_DFL)
    signal.pthread_sigmask(signal.SIG_UNBLOCK, WORKER_SIGNALS)
    workload.run()
