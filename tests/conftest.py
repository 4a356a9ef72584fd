"""
Pytest configuration and shared fixtures for the clustermetrics test suite.

This module provides common fixtures, snapshot builders and configuration
for all test modules in the clustermetrics project.
"""

import shutil
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from clustermetrics.config import AggregationConfig, clear_config_cache  # noqa: E402
from clustermetrics.config import manager as config_manager  # noqa: E402
from clustermetrics.models import (  # noqa: E402
    DiskMetric,
    Metrics,
    OSMetrics,
    RealtimeMetrics,
    TimedAction,
)


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_config(monkeypatch):
    """Make sure no test sees a config path or configuration left by another one."""
    monkeypatch.setattr(config_manager, "_CONFIG_FILE_PATH", config_manager._CONFIG_FILE_PATH)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def t0():
    """A fixed, minute-aligned reference time."""
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fast_aggregation_config():
    """Aggregation settings with short timeouts for worker tests."""
    return AggregationConfig(
        queue_size=64,
        queue_timeout=0.01,
        submit_timeout=0.5,
        join_timeout=5.0,
        thread_name="TestAggregator",
    )


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "aggregation": {
            "queue_size": 256,
            "queue_timeout": 0.05,
            "submit_timeout": 2.0,
            "join_timeout": 10.0,
            "thread_name": "Aggregator",
        },
        "export": {
            "include_empty_segments": False,
            "time_zone": "Europe/Berlin",
        },
        "logging": {
            "level": "debug",
        },
    }


# ============================================================================
# Snapshot Builders
# ============================================================================


def make_node_snapshot(
    host: str,
    ops: int = 1,
    acc_time: int = 100,
    pool_idx: int = 0,
    set_idx: int = 0,
    disk_idx: int = 0,
    collected_at=None,
    final: bool = False,
) -> RealtimeMetrics:
    """Build a snapshot one node would report: OS timings plus one drive."""
    disk_name = f"{host}:/data{disk_idx}"

    def metrics() -> Metrics:
        return Metrics(
            os=OSMetrics(
                collected_at=collected_at,
                nodes=1,
                lifetime_ops={"read": ops},
                last_minute={
                    "read": TimedAction(
                        count=ops, acc_time=acc_time, min_time=acc_time, max_time=acc_time
                    )
                },
            ),
            disk=DiskMetric(
                collected_at=collected_at,
                n_disks=1,
                pool_idx=pool_idx,
                set_idx=set_idx,
                disk_idx=disk_idx,
                lifetime_ops={"read": ops},
            ),
        )

    snapshot = RealtimeMetrics(hosts=[host], aggregated=metrics(), final=final)
    snapshot.by_host[host] = metrics()
    snapshot.by_disk[disk_name] = metrics().disk
    snapshot.by_disk_set = {pool_idx: {set_idx: metrics().disk}}
    return snapshot


@pytest.fixture
def node_snapshot():
    """Factory fixture for single-node snapshots."""
    return make_node_snapshot
