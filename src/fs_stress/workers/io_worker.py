"""Data I/O workloads.

Sequential bulk writes keep some throughput flowing; random 4 KiB writes
and reads against one shared sparse file force constant token revocation
between processes.
"""

import os
import random
from dataclasses import dataclass, field
from pathlib import Path

from fs_stress.constants import (
    IO_BLOCK_BYTES,
    SEQUENTIAL_BLOCK_MB,
    SEQUENTIAL_CHUNK_BYTES,
    SHARED_FILE_BYTES,
)
from fs_stress.workers.base import Workload, WorkloadCategory

_datasync = getattr(os, "fdatasync", os.fsync)


def preallocate_sparse(path: Path, size: int) -> None:
    """Create ``path`` as a sparse file of ``size`` bytes (or extend it)."""
    with open(path, "ab") as handle:
        if handle.seek(0, os.SEEK_END) < size:
            handle.truncate(size)


def random_block_offset(rng: random.Random, file_bytes: int, block_bytes: int) -> int:
    """Pick a uniformly random block-aligned offset inside the file.

    The result lies in ``[0, file_bytes - block_bytes]`` and is a multiple of
    ``block_bytes``.
    """
    return rng.randrange(file_bytes // block_bytes) * block_bytes


@dataclass
class RandomBlockWorkload(Workload):
    """Write (or read) one block at a random aligned offset per pass."""

    path: Path
    write: bool = True
    file_bytes: int = SHARED_FILE_BYTES
    block_bytes: int = IO_BLOCK_BYTES
    rng: random.Random = field(default_factory=random.Random, repr=False)

    @property
    def category(self) -> WorkloadCategory:
        if self.write:
            return WorkloadCategory.SHARED_WRITER
        return WorkloadCategory.SHARED_READER

    def next_offset(self) -> int:
        return random_block_offset(self.rng, self.file_bytes, self.block_bytes)

    def iterate(self) -> None:
        offset = self.next_offset()
        if self.write:
            fd = os.open(self.path, os.O_WRONLY)
            try:
                os.pwrite(fd, bytes(self.block_bytes), offset)
                _datasync(fd)
            finally:
                os.close(fd)
        else:
            fd = os.open(self.path, os.O_RDONLY)
            try:
                os.pread(fd, self.block_bytes, offset)
            finally:
                os.close(fd)


@dataclass
class SequentialWriteWorkload(Workload):
    """Rewrite a private file with zeros, flush it, optionally read it back."""

    path: Path
    block_mb: int = SEQUENTIAL_BLOCK_MB
    read_back: bool = False
    chunk_bytes: int = SEQUENTIAL_CHUNK_BYTES

    @property
    def category(self) -> WorkloadCategory:
        return WorkloadCategory.SEQUENTIAL

    def iterate(self) -> None:
        chunk = bytes(self.chunk_bytes)
        remaining = self.block_mb * 1024 * 1024
        with open(self.path, "wb") as handle:
            while remaining > 0:
                remaining -= handle.write(chunk[:remaining])
            handle.flush()
            _datasync(handle.fileno())

        if self.read_back:
            with open(self.path, "rb") as handle:
                while handle.read(self.chunk_bytes):
                    pass
