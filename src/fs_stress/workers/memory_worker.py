"""Memory pressure workload.

Two mutually exclusive modes:

- static: allocate ``size_mb`` once and hold it until the process exits.
- growing: allocate another ``size_mb`` every tick, forever. There is no
  upper bound; this mode exists to drive the host into the kernel OOM
  killer and must be requested explicitly.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, List

from fs_stress.config import MemoryMode
from fs_stress.constants import (
    MEMORY_PAGE_SIZE_BYTES,
    MEMORY_PROBE_BYTES,
    MEMORY_TICK_SECONDS,
)
from fs_stress.workers.base import Workload, WorkloadCategory


def allocate_zeroed(nbytes: int) -> bytearray:
    """Allocate ``nbytes`` and touch every page so it is resident."""
    block = bytearray(nbytes)
    for i in range(0, len(block), MEMORY_PAGE_SIZE_BYTES):
        block[i] = 0
    return block


def memory_capability_available(
    allocator: Callable[[int], Any] = allocate_zeroed,
) -> bool:
    """Probe the allocator with a small request.

    Returns:
        False when the allocator cannot serve even the probe, in which case
        the memory category is skipped for the run.
    """
    try:
        allocator(MEMORY_PROBE_BYTES)
    except (MemoryError, OSError):
        return False
    return True


@dataclass
class MemoryPressureWorkload(Workload):
    """Allocate and hold memory, once or on every tick."""

    size_mb: int
    mode: MemoryMode = MemoryMode.STATIC
    tick_seconds: float = MEMORY_TICK_SECONDS
    allocator: Callable[[int], Any] = allocate_zeroed
    sleep: Callable[[float], None] = time.sleep
    held: List[Any] = field(default_factory=list, repr=False)

    @property
    def category(self) -> WorkloadCategory:
        return WorkloadCategory.MEMORY

    @property
    def chunk_bytes(self) -> int:
        return self.size_mb * 1024 * 1024

    @property
    def allocations(self) -> int:
        """Number of successful allocations held so far."""
        return len(self.held)

    def setup(self) -> None:
        if self.mode is MemoryMode.STATIC:
            try:
                self.held.append(self.allocator(self.chunk_bytes))
            except MemoryError:
                pass

    def iterate(self) -> None:
        if self.mode is MemoryMode.GROWING:
            try:
                self.held.append(self.allocator(self.chunk_bytes))
            except MemoryError:
                # Keep pushing; the OOM killer ends this mode
                pass
        self.sleep(self.tick_seconds)
