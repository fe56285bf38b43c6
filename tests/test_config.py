"""Tests for RunConfiguration parsing and validation."""

from pathlib import Path

import pytest

from fs_stress.config import ConfigurationError, MemoryMode, RunConfiguration
from fs_stress.constants import SHARED_FILE_BYTES


class TestMemoryMode:
    """Tests for MemoryMode.parse."""

    @pytest.mark.parametrize("raw", ["static", "STATIC", " static "])
    def test_parses_static(self, raw):
        assert MemoryMode.parse(raw) is MemoryMode.STATIC

    @pytest.mark.parametrize("raw", ["leak", "growing", "Leak"])
    def test_leak_is_growing(self, raw):
        assert MemoryMode.parse(raw) is MemoryMode.GROWING

    def test_unknown_mode_rejected(self):
        with pytest.raises(ConfigurationError, match="memory mode"):
            MemoryMode.parse("burst")


class TestFromCli:
    """Tests for RunConfiguration.from_cli."""

    def test_defaults_map_to_categories(self):
        """WORKERS_PER_CATEGORY fans out to every filesystem category."""
        config = RunConfiguration.from_cli(8, 300, 4, 4096, "static", env={})

        assert config.cpu_workers == 8
        assert config.duration_seconds == 300
        assert config.shared_writers == 4
        assert config.shared_readers == 4
        assert config.attribute_workers == 4
        assert config.metadata_workers == 4
        assert config.link_workers == 4
        assert config.contested_attribute_workers == 2
        assert config.sequential_workers == 1
        assert config.memory_mb == 4096
        assert config.memory_mode is MemoryMode.STATIC
        assert config.workspace == Path("/tmp/stress")
        assert config.shared_file_bytes == SHARED_FILE_BYTES
        assert config.metrics_port is None

    def test_zero_workers_disables_all_filesystem_categories(self):
        config = RunConfiguration.from_cli(0, 10, 0, 0, "static", env={})

        assert config.contested_attribute_workers == 0
        assert config.sequential_workers == 0
        assert config.total_workers == 0

    def test_total_workers_counts_memory_once(self):
        config = RunConfiguration.from_cli(2, 10, 1, 100, "leak", env={})
        # 2 cpu + 1 memory + 5 categories + 2 contested + 1 sequential
        assert config.total_workers == 11

    def test_environment_overrides(self):
        env = {
            "FS_STRESS_DIR": "/scratch/gpfs/stress",
            "FS_STRESS_GRACE_SECONDS": "2.5",
            "FS_STRESS_SHARED_FILE_MB": "16",
            "FS_STRESS_SEQ_BLOCK_MB": "32",
            "FS_STRESS_SEQ_READ_BACK": "yes",
            "FS_STRESS_METRICS_PORT": "9400",
        }
        config = RunConfiguration.from_cli(1, 10, 1, 0, "static", env=env)

        assert config.workspace == Path("/scratch/gpfs/stress")
        assert config.terminate_grace_seconds == 2.5
        assert config.shared_file_bytes == 16 * 1024 * 1024
        assert config.sequential_block_mb == 32
        assert config.sequential_read_back is True
        assert config.metrics_port == 9400

    def test_bad_environment_value_is_configuration_error(self):
        with pytest.raises(ConfigurationError, match="FS_STRESS_SEQ_BLOCK_MB"):
            RunConfiguration.from_cli(
                1, 10, 1, 0, "static", env={"FS_STRESS_SEQ_BLOCK_MB": "lots"}
            )

    def test_unknown_mode_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            RunConfiguration.from_cli(1, 10, 1, 0, "chaos", env={})


class TestValidate:
    """Tests for RunConfiguration.validate."""

    def _config(self, **overrides):
        values = dict(duration_seconds=10, workspace=Path("/tmp/x"))
        values.update(overrides)
        return RunConfiguration(**values)

    def test_valid_config_returns_self(self):
        config = self._config(cpu_workers=2)
        assert config.validate() is config

    @pytest.mark.parametrize(
        "field",
        ["cpu_workers", "shared_writers", "metadata_workers", "link_workers", "memory_mb"],
    )
    def test_negative_counts_rejected(self, field):
        with pytest.raises(ConfigurationError, match=field):
            self._config(**{field: -1}).validate()

    def test_non_integer_count_rejected(self):
        with pytest.raises(ConfigurationError, match="integer"):
            self._config(cpu_workers=1.5).validate()

    @pytest.mark.parametrize("duration", [0, -5])
    def test_duration_must_be_positive(self, duration):
        with pytest.raises(ConfigurationError, match="duration_seconds"):
            self._config(duration_seconds=duration).validate()

    def test_memory_mode_must_be_enum(self):
        with pytest.raises(ConfigurationError, match="memory_mode"):
            self._config(memory_mode="leak").validate()

    def test_shared_file_must_be_block_multiple(self):
        with pytest.raises(ConfigurationError, match="multiple"):
            self._config(shared_file_bytes=4096 * 3 + 1).validate()

    def test_metrics_port_range(self):
        with pytest.raises(ConfigurationError, match="metrics_port"):
            self._config(metrics_port=70000).validate()

    def test_configuration_is_immutable(self):
        config = self._config()
        with pytest.raises(AttributeError):
            config.cpu_workers = 3
