"""Configuration summary printed before a run starts."""

from typing import List, Optional

from fs_stress.config import RunConfiguration
from fs_stress.services.system_info import HostInfo

_WIDTH = 23


def _line(label: str, value) -> str:
    return f"{label + ':':<{_WIDTH}}{value}"


def format_summary(
    config: RunConfiguration,
    memory_status: str,
    host: Optional[HostInfo] = None,
) -> str:
    """Render the run configuration as the operator-facing summary block."""
    lines: List[str] = ["=== filesystem stress test config ==="]
    lines.append(_line("cpu workers", config.cpu_workers))
    lines.append(_line("memory drain", memory_status))

    block_kib = config.io_block_bytes // 1024
    if config.shared_writers or config.shared_readers or config.attribute_workers \
            or config.metadata_workers or config.link_workers or config.sequential_workers:
        lines.append(_line(
            "shared file writers",
            f"{config.shared_writers} ({block_kib}K random fdatasync, same file)",
        ))
        lines.append(_line(
            "shared file readers",
            f"{config.shared_readers} ({block_kib}K random reads, same file)",
        ))
        lines.append(_line(
            "attribute churn",
            f"{config.attribute_workers} (chmod/touch loops) "
            f"+ {config.contested_attribute_workers} contested",
        ))
        lines.append(_line(
            "metadata storm",
            f"{config.metadata_workers} ({config.metadata_batch_size}-file batches, "
            f"purge above {config.metadata_watermark}, stat/ls)",
        ))
        lines.append(_line(
            "hardlink/symlink",
            f"{config.link_workers} ({config.link_batch_size} link create/stat/delete loops)",
        ))
        lines.append(_line(
            "sequential write",
            f"{config.sequential_workers} ({config.sequential_block_mb}MB bulk writes)",
        ))
    else:
        lines.append(_line("fs stress", "disabled"))

    lines.append(_line("target dir", config.workspace))
    lines.append(_line("duration", f"{config.duration_seconds:g} secs"))

    if host is not None:
        lines.append(_line("host cpu cores", host.cpu_cores))
        if host.memory_total_mb is not None:
            lines.append(_line(
                "host memory",
                f"{host.memory_available_mb}MB available / {host.memory_total_mb}MB total",
            ))

    lines.append("=" * 37)
    return "\n".join(lines)
