"""Prometheus metrics for a stress run.

Collectors are created per instance on an injectable registry so tests can
use a private CollectorRegistry or clear the global one between runs.
"""

import logging
from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, start_http_server

from fs_stress.workers.base import WorkloadCategory


class StressMetrics:
    """Worker lifecycle metrics.

    Attributes:
        registry: Registry the collectors are registered on
    """

    def __init__(
        self,
        registry: CollectorRegistry = REGISTRY,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self._logger = logger or logging.getLogger(self.__class__.__name__)
        self.workers_active = Gauge(
            "fs_stress_workers_active",
            "Worker processes currently running",
            ["category"],
            registry=registry,
        )
        self.spawn_failures = Counter(
            "fs_stress_spawn_failures",
            "Workers that failed to start",
            ["category"],
            registry=registry,
        )
        self.shutdown_stragglers = Counter(
            "fs_stress_shutdown_stragglers",
            "Workers that had to be killed after the shutdown grace period",
            registry=registry,
        )
        self.run_seconds = Gauge(
            "fs_stress_run_seconds",
            "Configured run duration",
            registry=registry,
        )

    def workers_started(self, category: WorkloadCategory, count: int) -> None:
        self.workers_active.labels(category=category.value).inc(count)

    def spawn_failed(self, category: WorkloadCategory) -> None:
        self.spawn_failures.labels(category=category.value).inc()

    def workers_reclaimed(self, stragglers: int) -> None:
        for category in WorkloadCategory:
            self.workers_active.labels(category=category.value).set(0)
        self.shutdown_stragglers.inc(stragglers)

    def serve(self, port: int) -> None:
        """Expose the registry over HTTP on ``port``."""
        start_http_server(port, registry=self.registry)
        self._logger.info("Metrics exporter listening: port=%s", port)
