"""fs-stress: synthetic load generator for clustered filesystems."""

from fs_stress.config import ConfigurationError, MemoryMode, RunConfiguration
from fs_stress.orchestrator import Orchestrator
from fs_stress.scheduler import RunOutcome

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "MemoryMode",
    "RunConfiguration",
    "Orchestrator",
    "RunOutcome",
]
