"""Application constants for fs-stress.

Centralizes magic numbers and default tunables to improve maintainability.
"""

# =============================================================================
# CLI Defaults
# =============================================================================
DEFAULT_CPU_WORKERS = 8
DEFAULT_DURATION_SECONDS = 300
DEFAULT_WORKERS_PER_CATEGORY = 4
DEFAULT_MEMORY_MB = 4096
DEFAULT_MEMORY_MODE = "static"

DEFAULT_WORKSPACE = "/tmp/stress"

# Extra workers added whenever the filesystem categories are enabled
CONTESTED_ATTRIBUTE_WORKERS = 2
SEQUENTIAL_WRITERS = 1

# =============================================================================
# Random I/O
# =============================================================================
SHARED_FILE_BYTES = 128 * 1024 * 1024  # 128 MiB sparse file
IO_BLOCK_BYTES = 4096

# =============================================================================
# Sequential I/O
# =============================================================================
SEQUENTIAL_BLOCK_MB = 256
SEQUENTIAL_CHUNK_BYTES = 1024 * 1024

# =============================================================================
# Metadata / Attribute / Link churn
# =============================================================================
METADATA_BATCH_SIZE = 500
METADATA_WATERMARK = 10_000
LINK_BATCH_SIZE = 200

PRIVATE_ATTRIBUTE_MODES = (0o644, 0o755)
CONTESTED_ATTRIBUTE_MODES = (
    (0o644, 0o755),
    (0o600, 0o777),
)

# =============================================================================
# Memory
# =============================================================================
MEMORY_TICK_SECONDS = 1.0
MEMORY_PAGE_SIZE_BYTES = 4096
MEMORY_PROBE_BYTES = 1024 * 1024

# =============================================================================
# Process Management
# =============================================================================
PROCESS_TERMINATE_TIMEOUT = 5  # seconds, shared by all joins
PROCESS_KILL_TIMEOUT = 1  # seconds, per straggler after SIGKILL
CPU_BURN_SPIN = 100_000  # no-op iterations per loop pass

# =============================================================================
# Workspace Layout
# =============================================================================
SHARED_DIR = "shared"
META_DIR = "meta"
LINKS_DIR = "links"
SHARED_FILE_NAME = "contested"
CONTESTED_ATTR_NAME = "contested_attr"

# =============================================================================
# Environment Variables
# =============================================================================
ENV_WORKSPACE = "FS_STRESS_DIR"
ENV_GRACE_SECONDS = "FS_STRESS_GRACE_SECONDS"
ENV_SHARED_FILE_MB = "FS_STRESS_SHARED_FILE_MB"
ENV_SEQ_BLOCK_MB = "FS_STRESS_SEQ_BLOCK_MB"
ENV_SEQ_READ_BACK = "FS_STRESS_SEQ_READ_BACK"
ENV_METRICS_PORT = "FS_STRESS_METRICS_PORT"
ENV_LOG_LEVEL = "FS_STRESS_LOG_LEVEL"
