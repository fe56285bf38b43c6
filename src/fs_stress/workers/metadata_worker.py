"""Metadata-heavy workloads.

Every operation here needs a metadata token grant and a journal write on a
clustered filesystem: permission and timestamp churn, small-file storms in
ever-growing directories, and hard/symbolic link create/stat/delete cycles.
"""

import contextlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from fs_stress.constants import (
    LINK_BATCH_SIZE,
    METADATA_BATCH_SIZE,
    METADATA_WATERMARK,
    PRIVATE_ATTRIBUTE_MODES,
)
from fs_stress.workers.base import Workload, WorkloadCategory


def _touch_byte(path: Path) -> None:
    with open(path, "wb") as handle:
        handle.write(b"x")


@dataclass
class AttributeChurnWorkload(Workload):
    """Flip permission bits and refresh mtime on one file.

    Contested instances share the same target with different mode pairs.
    """

    path: Path
    modes: Tuple[int, int] = PRIVATE_ATTRIBUTE_MODES
    contested: bool = False

    @property
    def category(self) -> WorkloadCategory:
        if self.contested:
            return WorkloadCategory.CONTESTED_ATTRIBUTE
        return WorkloadCategory.ATTRIBUTE

    def setup(self) -> None:
        if not self.path.exists():
            _touch_byte(self.path)

    def iterate(self) -> None:
        for mode in self.modes:
            os.chmod(self.path, mode)
            os.utime(self.path)


@dataclass
class MetadataStormWorkload(Workload):
    """Create small-file batches in a private directory that keeps growing.

    Entries are only purged once the directory holds more than
    ``watermark`` of them, so large-directory scans stay expensive.
    """

    directory: Path
    batch_size: int = METADATA_BATCH_SIZE
    watermark: int = METADATA_WATERMARK
    sequence: int = 0
    purges: int = 0
    last_entry_count: int = 0

    @property
    def category(self) -> WorkloadCategory:
        return WorkloadCategory.METADATA

    def setup(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def iterate(self) -> None:
        for n in range(self.batch_size):
            _touch_byte(self.directory / f"f_{self.sequence}_{n}")
        self.sequence += 1

        count = 0
        with os.scandir(self.directory) as entries:
            for entry in entries:
                with contextlib.suppress(OSError):
                    entry.stat(follow_symlinks=False)
                count += 1
        self.last_entry_count = count

        if count > self.watermark:
            self.purge()

    def purge(self) -> None:
        with os.scandir(self.directory) as entries:
            for entry in entries:
                if entry.name.startswith("f_"):
                    with contextlib.suppress(OSError):
                        os.unlink(entry.path)
        self.purges += 1


@dataclass
class LinkChurnWorkload(Workload):
    """Create, stat and delete batches of hard and symbolic links."""

    directory: Path
    batch_size: int = LINK_BATCH_SIZE

    @property
    def category(self) -> WorkloadCategory:
        return WorkloadCategory.LINK

    @property
    def source(self) -> Path:
        return self.directory / "source"

    def setup(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        _touch_byte(self.source)

    def iterate(self) -> None:
        hard = [self.directory / f"hl_{n}" for n in range(self.batch_size)]
        soft = [self.directory / f"sl_{n}" for n in range(self.batch_size)]

        for hard_link, soft_link in zip(hard, soft):
            with contextlib.suppress(OSError):
                os.link(self.source, hard_link)
            with contextlib.suppress(OSError):
                os.symlink(self.source, soft_link)

        for link in hard + soft:
            with contextlib.suppress(OSError):
                os.stat(link)

        for link in hard + soft:
            with contextlib.suppress(OSError):
                os.unlink(link)
