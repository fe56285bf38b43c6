"""Host information shown in the run summary."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import psutil

CGROUP_V2_CPU_MAX = Path("/sys/fs/cgroup/cpu.max")
CGROUP_V1_CPU_DIR = Path("/sys/fs/cgroup/cpu")


def _read_cgroup_quota() -> Optional[Tuple[int, int]]:
    """Return (quota, period) of the CPU controller, or None when unlimited."""
    try:
        quota, period = CGROUP_V2_CPU_MAX.read_text().split()
        if quota != "max":
            return int(quota), int(period)
    except (OSError, ValueError):
        pass

    try:
        quota = int((CGROUP_V1_CPU_DIR / "cpu.cfs_quota_us").read_text())
        period = int((CGROUP_V1_CPU_DIR / "cpu.cfs_period_us").read_text())
        if quota > 0:
            return quota, period
    except (OSError, ValueError):
        pass
    return None


def get_available_cpu_cores() -> int:
    """CPUs a burn worker can actually get: the affinity mask, capped by any cgroup quota."""
    try:
        cores = len(psutil.Process().cpu_affinity())
    except (AttributeError, psutil.Error, OSError):
        cores = psutil.cpu_count() or 1

    limit = _read_cgroup_quota()
    if limit:
        quota, period = limit
        cores = min(cores, quota // period)
    return max(1, cores)


@dataclass
class HostInfo:
    """CPU and memory available to this run."""

    cpu_cores: int
    memory_total_mb: Optional[int] = None
    memory_available_mb: Optional[int] = None

    @classmethod
    def collect(cls) -> "HostInfo":
        try:
            memory = psutil.virtual_memory()
            memory_total_mb = memory.total // (1024 * 1024)
            memory_available_mb = memory.available // (1024 * 1024)
        except (psutil.Error, OSError):
            memory_total_mb = None
            memory_available_mb = None

        return cls(
            cpu_cores=get_available_cpu_cores(),
            memory_total_mb=memory_total_mb,
            memory_available_mb=memory_available_mb,
        )
