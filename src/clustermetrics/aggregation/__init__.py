"""
Aggregation passes over node snapshots.

- SnapshotAggregator: queue-fed worker that owns one accumulator
- merge_snapshots: synchronous fold
- merge_partitioned: parallel fold over disjoint partitions
"""

from .aggregator import SnapshotAggregator, merge_partitioned, merge_snapshots

__all__ = [
    "SnapshotAggregator",
    "merge_snapshots",
    "merge_partitioned",
]
