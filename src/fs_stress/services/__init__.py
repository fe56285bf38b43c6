"""Services module for fs-stress.

This module provides service abstractions for:
- Worker tracking and teardown (WorkerRegistry, WorkerHandle)
- Spawning worker processes (WorkerPool)
- Prometheus metrics (StressMetrics)
- Host CPU/memory information (HostInfo)
"""

from fs_stress.services.metrics import StressMetrics
from fs_stress.services.system_info import HostInfo, get_available_cpu_cores
from fs_stress.services.worker_pool import WorkerPool
from fs_stress.services.worker_registry import WorkerHandle, WorkerRegistry

__all__ = [
    "StressMetrics",
    "HostInfo",
    "get_available_cpu_cores",
    "WorkerPool",
    "WorkerHandle",
    "WorkerRegistry",
]
