"""Worker module for stress generation.

This module provides the workload plugins run by the orchestrator.
Each workload runs in its own process so the orchestrator stays responsive
and can terminate it even while it is blocked in a syscall.
"""

from fs_stress.workers.base import (
    WORKER_SIGNALS,
    Workload,
    WorkloadCategory,
    run_workload,
    worker_signals_blocked,
)
from fs_stress.workers.cpu_worker import CPUBurnWorkload
from fs_stress.workers.io_worker import (
    RandomBlockWorkload,
    SequentialWriteWorkload,
    preallocate_sparse,
    random_block_offset,
)
from fs_stress.workers.memory_worker import (
    MemoryPressureWorkload,
    allocate_zeroed,
    memory_capability_available,
)
from fs_stress.workers.metadata_worker import (
    AttributeChurnWorkload,
    LinkChurnWorkload,
    MetadataStormWorkload,
)

__all__ = [
    "Workload",
    "WorkloadCategory",
    "run_workload",
    "WORKER_SIGNALS",
    "worker_signals_blocked",
    "CPUBurnWorkload",
    "RandomBlockWorkload",
    "SequentialWriteWorkload",
    "preallocate_sparse",
    "random_block_offset",
    "MemoryPressureWorkload",
    "allocate_zeroed",
    "memory_capability_available",
    "AttributeChurnWorkload",
    "LinkChurnWorkload",
    "MetadataStormWorkload",
]
