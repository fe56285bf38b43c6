"""CLI tests for fs-stress.

Full runs use zero workers and a one second budget inside tmp_path.
"""

import pytest
from typer.testing import CliRunner

from fs_stress.cli import app, main
from fs_stress.config import RunConfiguration
from fs_stress.report import format_summary
from fs_stress.services.system_info import HostInfo

runner = CliRunner()


@pytest.fixture
def env(workspace_root):
    return {"FS_STRESS_DIR": str(workspace_root), "FS_STRESS_LOG_LEVEL": "WARNING"}


class TestHelp:
    """Tests for usage output."""

    @pytest.mark.parametrize("flag", ["-h", "--help"])
    def test_help_flags_exit_zero_without_side_effects(self, flag, env, workspace_root):
        result = runner.invoke(app, [flag], env=env)

        assert result.exit_code == 0
        assert "Usage" in result.output
        assert "MEM_MODE" in result.output
        assert "mmdiag --iohist" in result.output
        assert not workspace_root.exists()

    def test_bare_help_word(self, capsys, workspace_root, monkeypatch):
        monkeypatch.setenv("FS_STRESS_DIR", str(workspace_root))
        with pytest.raises(SystemExit) as exc_info:
            main(["help"])

        assert exc_info.value.code in (0, None)
        assert "Usage" in capsys.readouterr().out
        assert not workspace_root.exists()


class TestRun:
    """Tests for complete CLI runs."""

    def test_zero_worker_run_prints_summary_and_done(self, env, workspace_root):
        result = runner.invoke(app, ["0", "1", "0", "0"], env=env)

        assert result.exit_code == 0, result.output
        assert "=== filesystem stress test config ===" in result.output
        assert "memory drain:" in result.output
        assert "fs stress:" in result.output
        assert result.output.rstrip().endswith("done")
        assert not workspace_root.exists()

    def test_cpu_only_run(self, env, workspace_root):
        result = runner.invoke(app, ["1", "1", "0", "0", "static"], env=env)

        assert result.exit_code == 0, result.output
        assert "cpu workers:           1" in result.output
        assert not workspace_root.exists()

    def test_unknown_memory_mode_is_usage_error(self, env, workspace_root):
        result = runner.invoke(app, ["0", "1", "0", "0", "burst"], env=env)

        assert result.exit_code == 2
        assert "memory mode" in result.output
        assert not workspace_root.exists()

    def test_zero_duration_is_usage_error(self, env, workspace_root):
        result = runner.invoke(app, ["0", "0"], env=env)

        assert result.exit_code == 2
        assert "duration_seconds" in result.output
        assert not workspace_root.exists()

    def test_non_numeric_argument_rejected(self, env):
        result = runner.invoke(app, ["lots"], env=env)
        assert result.exit_code == 2


class TestSummary:
    """Tests for format_summary."""

    def test_lists_every_category(self, tmp_path):
        config = RunConfiguration.from_cli(
            8, 300, 4, 100, "leak", env={"FS_STRESS_DIR": str(tmp_path)}
        )
        text = format_summary(
            config,
            "LEAK MODE (100MB/sec until OOM)",
            HostInfo(cpu_cores=16, memory_total_mb=64000, memory_available_mb=60000),
        )

        assert "cpu workers:           8" in text
        assert "memory drain:          LEAK MODE (100MB/sec until OOM)" in text
        assert "shared file writers:   4 (4K random fdatasync, same file)" in text
        assert "attribute churn:       4 (chmod/touch loops) + 2 contested" in text
        assert "sequential write:      1 (256MB bulk writes)" in text
        assert f"target dir:            {tmp_path}" in text
        assert "duration:              300 secs" in text
        assert "60000MB available / 64000MB total" in text
