"""Workspace directory owned by a stress run.

Layout::

    <root>/
        shared/contested         sparse file for random 4K I/O
        shared/attrfile_<i>      private attribute churn targets
        shared/contested_attr    attribute target shared by contested workers
        meta/worker_<i>/         metadata storm directories
        links/worker_<i>/        link churn directories
        seq_bulk_<i>             sequential bulk write files
"""

import logging
import shutil
import threading
from pathlib import Path
from typing import Optional

from fs_stress.constants import (
    CONTESTED_ATTR_NAME,
    LINKS_DIR,
    META_DIR,
    SHARED_DIR,
    SHARED_FILE_NAME,
)


class Workspace:
    """Scratch directory tree created at start and removed on shutdown."""

    def __init__(self, root: Path, logger: Optional[logging.Logger] = None):
        self.root = Path(root)
        self._logger = logger or logging.getLogger(self.__class__.__name__)
        self._lock = threading.Lock()
        self._removed = False

    @property
    def shared(self) -> Path:
        return self.root / SHARED_DIR

    @property
    def meta(self) -> Path:
        return self.root / META_DIR

    @property
    def links(self) -> Path:
        return self.root / LINKS_DIR

    @property
    def shared_file(self) -> Path:
        return self.shared / SHARED_FILE_NAME

    @property
    def contested_attr(self) -> Path:
        return self.shared / CONTESTED_ATTR_NAME

    def attr_file(self, index: int) -> Path:
        return self.shared / f"attrfile_{index}"

    def meta_dir(self, index: int) -> Path:
        return self.meta / f"worker_{index}"

    def link_dir(self, index: int) -> Path:
        return self.links / f"worker_{index}"

    def sequential_file(self, index: int) -> Path:
        return self.root / f"seq_bulk_{index}"

    def create(self) -> None:
        for directory in (self.shared, self.meta, self.links):
            directory.mkdir(parents=True, exist_ok=True)
        self._logger.info("Created workspace: root=%s", self.root)

    def remove(self) -> bool:
        """Recursively remove the tree.

        Only the first call does anything. A missing directory counts as
        success, and other failures are logged rather than raised.

        Returns:
            True if this call performed the removal attempt
        """
        with self._lock:
            if self._removed:
                return False
            self._removed = True

        try:
            shutil.rmtree(self.root)
        except FileNotFoundError:
            self._logger.debug("Workspace already absent: root=%s", self.root)
        except OSError as exc:
            self._logger.warning(
                "Failed to remove workspace: root=%s error=%s", self.root, exc
            )
        else:
            self._logger.info("Removed workspace: root=%s", self.root)
        return True
