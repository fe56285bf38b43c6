"""Run configuration for fs-stress.

The configuration is immutable once built and is validated before the
orchestrator touches the filesystem or spawns anything.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from fs_stress.constants import (
    CONTESTED_ATTRIBUTE_WORKERS,
    DEFAULT_WORKSPACE,
    ENV_GRACE_SECONDS,
    ENV_METRICS_PORT,
    ENV_SEQ_BLOCK_MB,
    ENV_SEQ_READ_BACK,
    ENV_SHARED_FILE_MB,
    ENV_WORKSPACE,
    IO_BLOCK_BYTES,
    LINK_BATCH_SIZE,
    MEMORY_TICK_SECONDS,
    METADATA_BATCH_SIZE,
    METADATA_WATERMARK,
    PROCESS_TERMINATE_TIMEOUT,
    SEQUENTIAL_BLOCK_MB,
    SEQUENTIAL_WRITERS,
    SHARED_FILE_BYTES,
)


class ConfigurationError(ValueError):
    """Raised when a run configuration is invalid."""


class MemoryMode(str, Enum):
    """How the memory workload applies pressure."""

    STATIC = "static"
    GROWING = "growing"

    @classmethod
    def parse(cls, value: str) -> "MemoryMode":
        """Parse a CLI mode name. ``leak`` is the CLI spelling of growing."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        if normalized == "leak":
            return cls.GROWING
        try:
            return cls(normalized)
        except ValueError:
            raise ConfigurationError(
                f"memory mode must be 'static' or 'leak', got {value!r}"
            ) from None


_COUNT_FIELDS = (
    "cpu_workers",
    "shared_writers",
    "shared_readers",
    "attribute_workers",
    "contested_attribute_workers",
    "metadata_workers",
    "link_workers",
    "sequential_workers",
    "memory_mb",
)


@dataclass(frozen=True)
class RunConfiguration:
    """Everything a single stress run needs to know."""

    duration_seconds: float
    workspace: Path
    cpu_workers: int = 0
    shared_writers: int = 0
    shared_readers: int = 0
    attribute_workers: int = 0
    contested_attribute_workers: int = 0
    metadata_workers: int = 0
    link_workers: int = 0
    sequential_workers: int = 0
    memory_mb: int = 0
    memory_mode: MemoryMode = MemoryMode.STATIC
    shared_file_bytes: int = SHARED_FILE_BYTES
    io_block_bytes: int = IO_BLOCK_BYTES
    sequential_block_mb: int = SEQUENTIAL_BLOCK_MB
    sequential_read_back: bool = False
    metadata_batch_size: int = METADATA_BATCH_SIZE
    metadata_watermark: int = METADATA_WATERMARK
    link_batch_size: int = LINK_BATCH_SIZE
    memory_tick_seconds: float = MEMORY_TICK_SECONDS
    terminate_grace_seconds: float = PROCESS_TERMINATE_TIMEOUT
    metrics_port: Optional[int] = None

    def validate(self) -> "RunConfiguration":
        """Check every invariant.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: If any field is invalid
        """
        for name in _COUNT_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(f"{name} must be an integer")
            if value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")

        if not isinstance(self.duration_seconds, (int, float)) or isinstance(
            self.duration_seconds, bool
        ):
            raise ConfigurationError("duration_seconds must be a number")
        if self.duration_seconds <= 0:
            raise ConfigurationError(
                f"duration_seconds must be > 0, got {self.duration_seconds}"
            )

        if not isinstance(self.memory_mode, MemoryMode):
            raise ConfigurationError("memory_mode must be static or growing")

        for name in (
            "io_block_bytes",
            "shared_file_bytes",
            "sequential_block_mb",
            "metadata_batch_size",
            "metadata_watermark",
            "link_batch_size",
        ):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be > 0")

        if self.shared_file_bytes % self.io_block_bytes != 0:
            raise ConfigurationError(
                "shared_file_bytes must be a multiple of io_block_bytes"
            )
        if self.memory_tick_seconds <= 0:
            raise ConfigurationError("memory_tick_seconds must be > 0")
        if self.terminate_grace_seconds < 0:
            raise ConfigurationError("terminate_grace_seconds must be >= 0")
        if self.metrics_port is not None and not 0 < self.metrics_port < 65536:
            raise ConfigurationError("metrics_port must be between 1 and 65535")

        return self

    @property
    def total_workers(self) -> int:
        """Number of worker processes this configuration asks for."""
        memory = 1 if self.memory_mb > 0 else 0
        return memory + sum(
            getattr(self, name) for name in _COUNT_FIELDS if name != "memory_mb"
        )

    @classmethod
    def from_cli(
        cls,
        cpus: int,
        duration_seconds: float,
        workers_per_category: int,
        memory_mb: int,
        memory_mode: str,
        env: Optional[Mapping[str, str]] = None,
    ) -> "RunConfiguration":
        """Build a validated configuration from the positional CLI values.

        Tunables that have no positional argument are read from the
        environment (or ``env`` when given, for testing).

        Raises:
            ConfigurationError: If any value is invalid
        """
        env = os.environ if env is None else env
        per_category = workers_per_category
        filesystem_enabled = isinstance(per_category, int) and per_category > 0

        config = cls(
            duration_seconds=duration_seconds,
            workspace=Path(env.get(ENV_WORKSPACE) or DEFAULT_WORKSPACE),
            cpu_workers=cpus,
            shared_writers=per_category,
            shared_readers=per_category,
            attribute_workers=per_category,
            contested_attribute_workers=(
                CONTESTED_ATTRIBUTE_WORKERS if filesystem_enabled else 0
            ),
            metadata_workers=per_category,
            link_workers=per_category,
            sequential_workers=SEQUENTIAL_WRITERS if filesystem_enabled else 0,
            memory_mb=memory_mb,
            memory_mode=MemoryMode.parse(memory_mode),
            shared_file_bytes=_env_int(env, ENV_SHARED_FILE_MB, SHARED_FILE_BYTES // (1024 * 1024)) * 1024 * 1024,
            sequential_block_mb=_env_int(env, ENV_SEQ_BLOCK_MB, SEQUENTIAL_BLOCK_MB),
            sequential_read_back=_env_flag(env, ENV_SEQ_READ_BACK),
            terminate_grace_seconds=_env_float(env, ENV_GRACE_SECONDS, PROCESS_TERMINATE_TIMEOUT),
            metrics_port=_env_optional_int(env, ENV_METRICS_PORT),
        )
        return config.validate()


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_optional_int(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if raw in (None, ""):
        return None
    return _env_int(env, name, 0)


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw in (None, ""):
        return float(default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def _env_flag(env: Mapping[str, str], name: str) -> bool:
    return str(env.get(name, "")).strip().lower() in ("1", "true", "yes", "on")
