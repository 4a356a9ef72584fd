"""
ClusterMetrics: metrics aggregation for a distributed storage cluster.

Each node reports a snapshot of its runtime metrics; this package merges those
snapshots into one cluster-wide view that keeps per-host, per-disk and
per-erasure-set breakdowns alongside the aggregate.

The package is organized into specialized modules:
- models: Metric records and their merge rules
- aggregation: Single-writer and partitioned aggregation passes
- system: Local host snapshots collected with psutil
- export: Polars DataFrame views of merged results
- config: Configuration management and validation
- validation: Input validation and error handling

Usage:
    from clustermetrics import SnapshotAggregator

    with SnapshotAggregator() as aggregator:
        for snapshot in node_snapshots:
            aggregator.submit(snapshot)
    cluster = aggregator.result()
"""

# Main interfaces
from .aggregation import SnapshotAggregator, merge_partitioned, merge_snapshots
from .config import clear_config_cache, configure_logging, get_config, set_config_path

# Model classes for external use
from .models import (
    DiskMetric,
    Metrics,
    MetricType,
    RealtimeMetrics,
    Segmented,
)

# Validation utilities
from .validation import AggregatorClosedError, ErrorSeverity, ValidationError

# Local sampling and export
from .system import sample_local_metrics
from .export import disk_breakdown_frame, segmented_to_frame, stats_map_to_frame

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "SnapshotAggregator",
    "merge_snapshots",
    "merge_partitioned",
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "configure_logging",
    # Models
    "Metrics",
    "MetricType",
    "RealtimeMetrics",
    "DiskMetric",
    "Segmented",
    # Validation
    "ValidationError",
    "ErrorSeverity",
    "AggregatorClosedError",
    # Sampling and export
    "sample_local_metrics",
    "segmented_to_frame",
    "stats_map_to_frame",
    "disk_breakdown_frame",
]
