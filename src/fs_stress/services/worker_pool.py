"""Worker pool: spawn N processes of one workload category."""

import logging
import multiprocessing
from typing import Callable, List, Optional

from fs_stress.services.metrics import StressMetrics
from fs_stress.services.worker_registry import WorkerHandle, WorkerRegistry
from fs_stress.workers.base import (
    Workload,
    WorkloadCategory,
    run_workload,
    worker_signals_blocked,
)

WorkloadFactory = Callable[[int], Workload]


class WorkerPool:
    """Spawns workload processes and records their handles.

    A failure to build or start one worker is logged and skipped; the pool
    carries on with the rest. Once the registry is closed the pool stops
    spawning, and a worker started in the meantime is reclaimed here.
    """

    def __init__(
        self,
        registry: WorkerRegistry,
        metrics: Optional[StressMetrics] = None,
        logger: Optional[logging.Logger] = None,
        context=None,
    ):
        """Initialize worker pool.

        Args:
            registry: Registry that receives every started handle
            metrics: Optional metrics sink
            logger: Optional logger instance
            context: multiprocessing context (defaults to the platform default)
        """
        self.registry = registry
        self.metrics = metrics
        self._logger = logger or logging.getLogger(self.__class__.__name__)
        self._context = context or multiprocessing.get_context()

    def spawn(
        self,
        category: WorkloadCategory,
        count: int,
        workload_factory: WorkloadFactory,
    ) -> List[WorkerHandle]:
        """Start ``count`` workers of ``category``.

        Args:
            category: Category tag for the handles
            count: Number of workers; 0 spawns nothing
            workload_factory: Builds the workload for ordinal index i

        Returns:
            Handles for the workers that started and were registered
        """
        handles = []
        for index in range(count):
            if self.registry.closed:
                self._logger.info(
                    "Registry closed, not spawning: category=%s remaining=%s",
                    category.value, count - index,
                )
                break

            name = f"{category.value}-{index}"
            try:
                workload = workload_factory(index)
                process = self._context.Process(
                    target=run_workload,
                    args=(workload,),
                    name=name,
                    daemon=True,
                )
                with worker_signals_blocked():
                    process.start()
            except Exception as exc:
                self._logger.error(
                    "Failed to spawn worker: category=%s index=%s error=%s",
                    category.value, index, exc,
                )
                if self.metrics:
                    self.metrics.spawn_failed(category)
                continue

            handle = WorkerHandle(
                category=category, index=index, pool=category.value, process=process
            )
            if not self.registry.add(handle):
                self._logger.warning(
                    "Registry closed during spawn, reclaiming: %s", handle.describe()
                )
                handle.reclaim()
                break

            handles.append(handle)
            self._logger.debug(
                "Spawned worker: category=%s index=%s pid=%s",
                category.value, index, process.pid,
            )

        if self.metrics:
            self.metrics.workers_started(category, len(handles))
        if count:
            self._logger.info(
                "Spawned pool: category=%s requested=%s started=%s",
                category.value, count, len(handles),
            )
        return handles
