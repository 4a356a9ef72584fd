"""
Bucket replication metrics, per remote target.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from .base import Mergeable, later, merge_map
from .segmented import SegmentedReplicationStats
from .stats import ReplicationStats


@dataclass
class ReplicationTargetStats(Mergeable):
    """
    Replication statistics towards one target.

    A record with ``nodes == 0`` carries no data; merging one is a no-op.
    """

    nodes: int = 0
    last_hour: ReplicationStats = field(default_factory=ReplicationStats)
    since_start: ReplicationStats = field(default_factory=ReplicationStats)
    last_day: Optional[SegmentedReplicationStats] = None

    def merge(self, other: Optional["ReplicationTargetStats"]) -> None:
        if other is None or other.nodes == 0:
            return
        self.nodes += other.nodes
        self.last_hour.merge(other.last_hour)
        self.since_start.merge(other.since_start)
        if other.last_day is not None:
            if self.last_day is None:
                self.last_day = SegmentedReplicationStats()
            self.last_day.merge(other.last_day)


@dataclass
class ReplicationMetrics(Mergeable):
    """
    Replication state of the cluster.

    Attributes:
        collected_at: Latest collection time
        nodes: Contributing hosts
        active: Replication operations in progress
        queued: Replication operations waiting
        targets: Statistics keyed by target ARN
    """

    collected_at: Optional[datetime] = None
    nodes: int = 0
    active: int = 0
    queued: int = 0
    targets: Dict[str, ReplicationTargetStats] = field(default_factory=dict)

    def merge(self, other: Optional["ReplicationMetrics"]) -> None:
        if other is None:
            return
        self.collected_at = later(self.collected_at, other.collected_at)
        self.nodes += other.nodes
        self.active += other.active
        self.queued += other.queued
        merge_map(self.targets, other.targets, ReplicationTargetStats)

    def all_targets(self) -> ReplicationTargetStats:
        """Every target combined into one record."""
        result = ReplicationTargetStats()
        for target in self.targets.values():
            result.merge(target)
        return result
