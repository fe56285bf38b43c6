"""CPU burn workload.

Saturates one core with a tight loop that performs no I/O and no allocation.
"""

from dataclasses import dataclass

from fs_stress.constants import CPU_BURN_SPIN
from fs_stress.workers.base import Workload, WorkloadCategory


@dataclass
class CPUBurnWorkload(Workload):
    """Spin a core at 100%."""

    spin: int = CPU_BURN_SPIN

    @property
    def category(self) -> WorkloadCategory:
        return WorkloadCategory.CPU

    def iterate(self) -> None:
        for _ in range(self.spin):
            pass
