"""Shared pytest fixtures for fs-stress tests.

This module provides common fixtures for testing the orchestrator and its
workers. All fixtures that are used across multiple test files should be
defined here.
"""

import pytest
from prometheus_client import REGISTRY, CollectorRegistry

from fs_stress.config import RunConfiguration
from fs_stress.orchestrator import Orchestrator
from fs_stress.services.metrics import StressMetrics


def _clear_prometheus_registry():
    """Clear all Prometheus collectors to avoid duplicates between tests.

    Prometheus uses a global registry, so collectors registered in one test
    persist to the next. This helper ensures test isolation.
    """
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        try:
            REGISTRY.unregister(collector)
        except (KeyError, ValueError):
            # Collector was already unregistered
            pass


@pytest.fixture(autouse=True)
def clean_prometheus():
    """Automatically clean Prometheus registry before and after each test."""
    _clear_prometheus_registry()
    yield
    _clear_prometheus_registry()


@pytest.fixture
def metrics():
    """StressMetrics on a private registry."""
    return StressMetrics(registry=CollectorRegistry())


@pytest.fixture
def workspace_root(tmp_path):
    """Workspace path inside the test's tmp dir (not created yet)."""
    return tmp_path / "stress"


@pytest.fixture
def make_config(workspace_root):
    """Factory for small, fast run configurations.

    Every tunable is shrunk so real worker processes stay cheap: a 1 MiB
    shared file, 1 MiB sequential writes and tiny metadata batches.
    """

    def _make(**overrides):
        values = dict(
            duration_seconds=1,
            workspace=workspace_root,
            shared_file_bytes=1024 * 1024,
            sequential_block_mb=1,
            metadata_batch_size=5,
            metadata_watermark=50,
            link_batch_size=3,
            terminate_grace_seconds=5,
        )
        values.update(overrides)
        return RunConfiguration(**values)

    return _make


@pytest.fixture
def make_orchestrator(metrics):
    """Factory for orchestrators that are always shut down after the test."""
    created = []

    def _make(config, **kwargs):
        kwargs.setdefault("metrics", metrics)
        orchestrator = Orchestrator(config, **kwargs)
        created.append(orchestrator)
        return orchestrator

    yield _make

    for orchestrator in created:
        orchestrator.shutdown()
