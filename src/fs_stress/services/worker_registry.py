"""Worker registry for tracking and reclaiming worker processes.

Replaces a global mutable list of worker pids with a service class that
owns every handle behind a lock. Handles are appended on spawn and taken
out, all at once, on shutdown. Draining closes the registry: a handle
offered after that is refused, and the spawner must reclaim it itself.
"""

import logging
import threading
import time
from dataclasses import dataclass
from multiprocessing import Process
from typing import Callable, List, Optional

import psutil

from fs_stress.constants import PROCESS_KILL_TIMEOUT, PROCESS_TERMINATE_TIMEOUT
from fs_stress.workers.base import WorkloadCategory


@dataclass
class WorkerHandle:
    """Reference to one running workload process."""

    category: WorkloadCategory
    index: int
    pool: str
    process: Process

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid

    @property
    def started(self) -> bool:
        return self.process.pid is not None

    def is_alive(self) -> bool:
        return self.started and self.process.is_alive()

    def terminate(self) -> None:
        """Send SIGTERM. No-op for processes that never started or already exited."""
        if self.is_alive():
            self.process.terminate()

    def kill(self) -> None:
        if self.is_alive():
            self.process.kill()

    def join(self, timeout: Optional[float] = None) -> None:
        if self.started:
            self.process.join(timeout)

    def reclaim(
        self,
        grace_seconds: float = PROCESS_TERMINATE_TIMEOUT,
        kill_seconds: float = PROCESS_KILL_TIMEOUT,
    ) -> bool:
        """Terminate and join this one worker, killing it if it outlives the grace.

        Returns:
            True if the worker had to be killed
        """
        self.terminate()
        self.join(grace_seconds)
        if not self.is_alive():
            return False
        self.kill()
        self.join(kill_seconds)
        return True

    def describe(self) -> str:
        """Short status string for logs, including the kernel process state."""
        try:
            state = psutil.Process(self.pid).status()
        except (psutil.Error, TypeError, ValueError):
            state = "gone"
        return f"{self.pool}[{self.index}] pid={self.pid} state={state}"


class WorkerRegistry:
    """Thread-safe set of worker handles.

    Supports append-on-spawn and drain-on-shutdown only; handles that have
    been drained are owned by the caller that drained them. After a drain
    the registry is closed and add() refuses new handles.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize worker registry.

        Args:
            logger: Optional logger instance. If not provided, creates one.
            clock: Monotonic clock used for the shutdown deadline.
        """
        self._handles: List[WorkerHandle] = []
        self._lock = threading.Lock()
        self._logger = logger or logging.getLogger(self.__class__.__name__)
        self._clock = clock
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def add(self, handle: WorkerHandle) -> bool:
        """Register a started handle.

        Returns:
            False if the registry is already closed. The handle was not
            recorded and the caller still owns it.
        """
        with self._lock:
            if self._closed:
                return False
            self._handles.append(handle)
            return True

    def snapshot(self) -> List[WorkerHandle]:
        """Return a copy of the current handles."""
        with self._lock:
            return list(self._handles)

    def count(self, category: Optional[WorkloadCategory] = None) -> int:
        with self._lock:
            if category is None:
                return len(self._handles)
            return sum(1 for h in self._handles if h.category == category)

    def __len__(self) -> int:
        return self.count()

    def drain(self) -> List[WorkerHandle]:
        """Take ownership of every handle and close the registry."""
        with self._lock:
            self._closed = True
            handles, self._handles = self._handles, []
        return handles

    def terminate_all(
        self, grace_seconds: float = PROCESS_TERMINATE_TIMEOUT
    ) -> List[WorkerHandle]:
        """Terminate and reclaim every registered worker.

        SIGTERM is broadcast to all handles before any of them is awaited.
        All joins share a single deadline; processes still alive after it
        are logged, killed and given a short final join.

        Args:
            grace_seconds: Total time to wait for workers after SIGTERM

        Returns:
            Handles that had to be killed
        """
        handles = self.drain()
        if not handles:
            return []

        for handle in handles:
            handle.terminate()

        deadline = self._clock() + grace_seconds
        for handle in handles:
            handle.join(max(0.0, deadline - self._clock()))

        stragglers = [h for h in handles if h.is_alive()]
        for handle in stragglers:
            self._logger.warning(
                "Worker ignored SIGTERM, killing: %s", handle.describe()
            )
            handle.kill()
        for handle in stragglers:
            handle.join(PROCESS_KILL_TIMEOUT)
            if handle.is_alive():
                self._logger.error(
                    "Worker still alive after SIGKILL, abandoning: %s",
                    handle.describe(),
                )

        self._logger.info(
            "Reclaimed workers: total=%s stragglers=%s", len(handles), len(stragglers)
        )
        return stragglers
