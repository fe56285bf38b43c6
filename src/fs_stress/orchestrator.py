"""Orchestrator for a stress run.

Owns the workspace, the worker registry and the shutdown sequence. The
lifecycle is: start() spawns every pool, await_completion_or_signal() blocks
until the time budget runs out or a signal arrives, and shutdown() reclaims
every worker and then removes the workspace. shutdown() is idempotent and
run() guarantees it is reached on every exit path.
"""

import logging
import random
import signal
import threading
from enum import Enum
from typing import Any, Callable, Optional

from fs_stress.config import MemoryMode, RunConfiguration
from fs_stress.constants import CONTESTED_ATTRIBUTE_MODES
from fs_stress.scheduler import RunOutcome, RunTimer
from fs_stress.services.metrics import StressMetrics
from fs_stress.services.worker_pool import WorkerPool
from fs_stress.services.worker_registry import WorkerRegistry
from fs_stress.signals import SignalBridge
from fs_stress.workers import (
    AttributeChurnWorkload,
    CPUBurnWorkload,
    LinkChurnWorkload,
    MemoryPressureWorkload,
    MetadataStormWorkload,
    RandomBlockWorkload,
    SequentialWriteWorkload,
    WorkloadCategory,
    allocate_zeroed,
    memory_capability_available,
    preallocate_sparse,
)
from fs_stress.workspace import Workspace


class ShutdownState(str, Enum):
    PENDING = "pending"
    TRIGGERING = "triggering"
    COMPLETE = "complete"


class ShutdownLatch:
    """One-shot latch guarding the shutdown sequence."""

    def __init__(self):
        self._lock = threading.Lock()
        self.state = ShutdownState.PENDING

    def try_trigger(self) -> bool:
        """Move PENDING -> TRIGGERING. Only the first caller gets True."""
        with self._lock:
            if self.state is not ShutdownState.PENDING:
                return False
            self.state = ShutdownState.TRIGGERING
            return True

    def complete(self) -> None:
        with self._lock:
            self.state = ShutdownState.COMPLETE


class Orchestrator:
    """
    Composes worker pools per the requested category mix and tears them down.
    """

    def __init__(
        self,
        config: RunConfiguration,
        registry: Optional[WorkerRegistry] = None,
        metrics: Optional[StressMetrics] = None,
        signal_bridge: Optional[SignalBridge] = None,
        timer: Optional[RunTimer] = None,
        allocator: Callable[[int], Any] = allocate_zeroed,
        logger: Optional[logging.Logger] = None,
        context=None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Run configuration (validated again in start())
            registry: Worker handle set. If not provided, a new one is created.
            metrics: Metrics sink. If not provided, one is created on the
                global Prometheus registry.
            signal_bridge: Source of external interruption
            timer: Run timer for the configured duration
            allocator: Memory allocator probed before spawning memory pressure
            logger: Optional logger instance
            context: multiprocessing context for worker processes
        """
        self.config = config
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.registry = registry if registry is not None else WorkerRegistry(logger=self.logger)
        self.metrics = metrics or StressMetrics()
        self.signal_bridge = signal_bridge or SignalBridge()
        self.timer = timer or RunTimer(config.duration_seconds)
        self.workspace = Workspace(config.workspace, logger=self.logger)
        self.pool = WorkerPool(
            self.registry, metrics=self.metrics, logger=self.logger, context=context
        )
        self.memory_status = "disabled"
        self.spawned = 0
        self._allocator = allocator
        self._latch = ShutdownLatch()
        self._start_lock = threading.Lock()
        self._started = False
        self._workspace_created = False

    @property
    def shutdown_state(self) -> ShutdownState:
        return self._latch.state

    # ---- Lifecycle ----

    def start(self) -> None:
        """Validate config, create the workspace and spawn every pool.

        Returns as soon as all requested workers have been started. If
        shutdown() begins meanwhile, the remaining pools are not spawned.

        Raises:
            ConfigurationError: If the configuration is invalid
            RuntimeError: If this orchestrator was already started or shut down
        """
        with self._start_lock:
            if self._started or self._latch.state is not ShutdownState.PENDING:
                raise RuntimeError("Orchestrator cannot be started twice or after shutdown")
            self.config.validate()
            self._started = True

            self._workspace_created = True
            self.workspace.create()

            if self.config.metrics_port:
                self.metrics.serve(self.config.metrics_port)
            self.metrics.run_seconds.set(self.config.duration_seconds)

            for spawn_pool in (
                self._spawn_cpu,
                self._spawn_memory,
                self._spawn_shared_io,
                self._spawn_attribute_churn,
                self._spawn_metadata_storm,
                self._spawn_link_churn,
                self._spawn_sequential,
            ):
                if self._latch.state is not ShutdownState.PENDING:
                    self.logger.warning("Shutdown began during start, skipping remaining pools")
                    break
                spawn_pool()

            self.spawned = len(self.registry)
        self.timer.start()
        self.logger.info(
            "Stress run started: workers=%s duration=%ss workspace=%s",
            self.spawned, self.config.duration_seconds, self.workspace.root,
        )

    def await_completion_or_signal(self) -> RunOutcome:
        """Block until the duration elapses or a signal is delivered."""
        outcome = self.timer.wait(self.signal_bridge.event)
        if outcome is RunOutcome.INTERRUPTED:
            received = self.signal_bridge.received
            name = signal.Signals(received).name if received else "external"
            self.logger.info(
                "Run interrupted: signal=%s elapsed=%.1fs", name, self.timer.elapsed
            )
        else:
            self.logger.info("Run completed: duration=%ss", self.config.duration_seconds)
        return outcome

    def shutdown(self) -> bool:
        """Terminate every worker, then remove the workspace.

        Only the first call does anything; later or concurrent calls return
        immediately. When called while start() is still spawning, the
        workspace is removed only after start() has stopped and reclaimed
        any worker it started late.

        Returns:
            True if this call performed the shutdown sequence
        """
        if not self._latch.try_trigger():
            return False

        try:
            stragglers = self.registry.terminate_all(
                self.config.terminate_grace_seconds
            )
            with self._start_lock:
                self.metrics.workers_reclaimed(len(stragglers))
            if self._workspace_created:
                self.workspace.remove()
        finally:
            self._latch.complete()

        self.logger.info("Shutdown complete")
        return True

    def run(self, on_started: Optional[Callable[["Orchestrator"], None]] = None) -> RunOutcome:
        """Full run: start, wait, and always shut down.

        Args:
            on_started: Called once every worker has been spawned (used by the
                CLI to print the summary)

        Returns:
            How the wait ended
        """
        with self.signal_bridge:
            try:
                self.start()
                if on_started:
                    on_started(self)
                return self.await_completion_or_signal()
            finally:
                self.shutdown()

    # ---- Pools ----

    def _spawn_cpu(self) -> None:
        self.pool.spawn(
            WorkloadCategory.CPU,
            self.config.cpu_workers,
            lambda i: CPUBurnWorkload(),
        )

    def _spawn_memory(self) -> None:
        config = self.config
        if config.memory_mb <= 0:
            self.memory_status = "disabled"
            return

        if not memory_capability_available(self._allocator):
            self.logger.warning("Memory allocation unavailable, skipping memory stress")
            self.memory_status = "skipped (allocation unavailable)"
            return

        handles = self.pool.spawn(
            WorkloadCategory.MEMORY,
            1,
            lambda i: MemoryPressureWorkload(
                size_mb=config.memory_mb,
                mode=config.memory_mode,
                tick_seconds=config.memory_tick_seconds,
                allocator=self._allocator,
            ),
        )
        if not handles:
            self.memory_status = "skipped (spawn failed)"
        elif config.memory_mode is MemoryMode.GROWING:
            self.memory_status = f"LEAK MODE ({config.memory_mb}MB/sec until OOM)"
        else:
            self.memory_status = f"static ({config.memory_mb}MB allocated)"

    def _spawn_shared_io(self) -> None:
        config = self.config
        if not (config.shared_writers or config.shared_readers):
            return

        shared_file = self.workspace.shared_file
        try:
            preallocate_sparse(shared_file, config.shared_file_bytes)
        except OSError as exc:
            self.logger.warning(
                "Failed to pre-size shared file: path=%s error=%s", shared_file, exc
            )

        for category, count, write in (
            (WorkloadCategory.SHARED_WRITER, config.shared_writers, True),
            (WorkloadCategory.SHARED_READER, config.shared_readers, False),
        ):
            self.pool.spawn(
                category,
                count,
                lambda i, write=write: RandomBlockWorkload(
                    path=shared_file,
                    write=write,
                    file_bytes=config.shared_file_bytes,
                    block_bytes=config.io_block_bytes,
                    rng=random.Random(),
                ),
            )

    def _spawn_attribute_churn(self) -> None:
        self.pool.spawn(
            WorkloadCategory.ATTRIBUTE,
            self.config.attribute_workers,
            lambda i: AttributeChurnWorkload(path=self.workspace.attr_file(i)),
        )
        self.pool.spawn(
            WorkloadCategory.CONTESTED_ATTRIBUTE,
            self.config.contested_attribute_workers,
            lambda i: AttributeChurnWorkload(
                path=self.workspace.contested_attr,
                modes=CONTESTED_ATTRIBUTE_MODES[i % len(CONTESTED_ATTRIBUTE_MODES)],
                contested=True,
            ),
        )

    def _spawn_metadata_storm(self) -> None:
        self.pool.spawn(
            WorkloadCategory.METADATA,
            self.config.metadata_workers,
            lambda i: MetadataStormWorkload(
                directory=self.workspace.meta_dir(i),
                batch_size=self.config.metadata_batch_size,
                watermark=self.config.metadata_watermark,
            ),
        )

    def _spawn_link_churn(self) -> None:
        self.pool.spawn(
            WorkloadCategory.LINK,
            self.config.link_workers,
            lambda i: LinkChurnWorkload(
                directory=self.workspace.link_dir(i),
                batch_size=self.config.link_batch_size,
            ),
        )

    def _spawn_sequential(self) -> None:
        self.pool.spawn(
            WorkloadCategory.SEQUENTIAL,
            self.config.sequential_workers,
            lambda i: SequentialWriteWorkload(
                path=self.workspace.sequential_file(i),
                block_mb=self.config.sequential_block_mb,
                read_back=self.config.sequential_read_back,
            ),
        )
