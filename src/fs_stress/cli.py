"""Command-line interface for fs-stress."""

import logging
import os
import sys
from typing import Annotated, List, Optional

import typer

from fs_stress.config import ConfigurationError, RunConfiguration
from fs_stress.constants import (
    DEFAULT_CPU_WORKERS,
    DEFAULT_DURATION_SECONDS,
    DEFAULT_MEMORY_MB,
    DEFAULT_MEMORY_MODE,
    DEFAULT_WORKERS_PER_CATEGORY,
    ENV_LOG_LEVEL,
)
from fs_stress.orchestrator import Orchestrator
from fs_stress.report import format_summary
from fs_stress.services.system_info import HostInfo

app = typer.Typer(
    name="fs-stress",
    help="Synthetic CPU, memory and clustered-filesystem stress generator",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _setup_logging() -> None:
    level = logging.getLevelName(os.getenv(ENV_LOG_LEVEL, "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def stress(
    cpus: Annotated[
        int, typer.Argument(metavar="CPUS", help="CPU burn workers (0 to disable)")
    ] = DEFAULT_CPU_WORKERS,
    duration: Annotated[
        int, typer.Argument(metavar="DURATION_SECS", help="Test duration in seconds")
    ] = DEFAULT_DURATION_SECONDS,
    workers: Annotated[
        int,
        typer.Argument(
            metavar="WORKERS_PER_CATEGORY",
            help="Workers per filesystem category: shared file writers, "
            "shared file readers, attribute churn (+2 contested), metadata "
            "storm, hardlink/symlink churn, plus 1 sequential writer "
            "(0 to disable)"
        ),
    ] = DEFAULT_WORKERS_PER_CATEGORY,
    mem_mb: Annotated[
        int,
        typer.Argument(
            metavar="MEM_MB",
            help="Memory in MB (0 to disable). static: total to hold; "
            "leak: MB added per second until OOM"
        ),
    ] = DEFAULT_MEMORY_MB,
    mem_mode: Annotated[
        str,
        typer.Argument(
            metavar="MEM_MODE",
            help="static = allocate once and hold; leak = grow every second "
            "until the OOM killer fires"
        ),
    ] = DEFAULT_MEMORY_MODE,
) -> None:
    """Drive CPU, memory and filesystem load against a scratch directory.

    \b
    Examples:
      fs-stress                       # 8 CPU, 300s, 4 fs workers, 4096MB static
      fs-stress 16 600 8 8192 static  # heavy
      fs-stress 8 300 4 100 leak      # leak 100MB/sec until OOM + full stress
      fs-stress 0 300 4 0             # filesystem stress only
      fs-stress 8 300 0 0             # CPU burn only

    \b
    The workspace root defaults to /tmp/stress (FS_STRESS_DIR) and is
    removed when the run ends. WARNING: leak mode WILL trigger the OOM killer.

    \b
    Monitoring on GPFS (separate terminals):
      watch -n2 'mmdiag --tokenmgr'   # token revocations
      watch -n2 'mmdiag --waiters'    # blocked threads
      watch -n2 'mmdiag --iohist'     # recent I/O operations
      vmstat 1                        # CPU, memory and I/O overview
      top -d1                         # per-process CPU usage
    """
    _setup_logging()

    try:
        config = RunConfiguration.from_cli(cpus, duration, workers, mem_mb, mem_mode)
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)

    orchestrator = Orchestrator(config)

    def print_summary(orch: Orchestrator) -> None:
        typer.echo(format_summary(orch.config, orch.memory_status, HostInfo.collect()))

    try:
        orchestrator.run(on_started=print_summary)
    except OSError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo("done")


def main(argv: Optional[List[str]] = None) -> None:
    """Console script entry point. Accepts the bare word ``help`` as --help."""
    args = list(sys.argv[1:] if argv is None else argv)
    if args[:1] == ["help"]:
        args = ["--help"]
    app(args=args, prog_name="fs-stress")


if __name__ == "__main__":
    main()
