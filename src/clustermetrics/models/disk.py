"""
Drive metrics.

A ``DiskMetric`` can describe a single drive, an erasure set, a pool or the
whole cluster depending on how many per-drive records were merged into it.
Its pool/set/disk indexes are only kept while every merged drive agrees on
them.
"""

import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Dict, Optional

from .actions import DiskAction, DiskIOStats
from .base import Mergeable, add_fields, collapse_identity, later, merge_map, sum_counters
from .segmented import SegmentedDiskActions, SegmentedDiskIO

logger = logging.getLogger(__name__)


@dataclass
class DriveSpaceInfo(Mergeable):
    """Capacity figures summed across drives."""

    n: int = 0
    free: int = 0
    used: int = 0
    total: int = 0
    used_inodes: int = 0
    free_inodes: int = 0

    def merge(self, other: Optional["DriveSpaceInfo"]) -> None:
        if other is None:
            return
        add_fields(self, other, (f.name for f in fields(self)))

    def used_ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.used / self.total


@dataclass
class DiskMetric(Mergeable):
    """
    Metrics for one or more drives.

    Attributes:
        collected_at: Latest collection time among merged inputs
        n_disks: Number of drives merged in; 0 marks the record as empty
        offline: Drives that are offline
        healing: Drives that are healing
        hanging: Drives with operations that stopped responding
        pool_idx: Pool index, None once merged drives span pools
        set_idx: Erasure set index, None once merged drives span sets
        disk_idx: Drive index within the set, None once more than one drive is merged
        state: Drive count by reported state
        lifetime_ops: Operation counts since server start
        last_minute: Last-minute timing per operation
        last_day_segmented: Day series per operation
        io_stats_minute: Kernel IO counters for the last minute
        io_stats_day: Day series of kernel IO counters
        space: Capacity figures
    """

    collected_at: Optional[datetime] = None
    n_disks: int = 0
    offline: int = 0
    healing: int = 0
    hanging: int = 0

    pool_idx: Optional[int] = None
    set_idx: Optional[int] = None
    disk_idx: Optional[int] = None

    state: Dict[str, int] = field(default_factory=dict)
    lifetime_ops: Dict[str, int] = field(default_factory=dict)
    last_minute: Dict[str, DiskAction] = field(default_factory=dict)
    last_day_segmented: Dict[str, SegmentedDiskActions] = field(default_factory=dict)
    io_stats_minute: DiskIOStats = field(default_factory=DiskIOStats)
    io_stats_day: Optional[SegmentedDiskIO] = None
    space: DriveSpaceInfo = field(default_factory=DriveSpaceInfo)

    def merge(self, other: Optional["DiskMetric"]) -> None:
        if other is None:
            return
        self.collected_at = later(self.collected_at, other.collected_at)
        if other.n_disks == 0:
            return

        previous = (self.pool_idx, self.set_idx, self.disk_idx)
        self.pool_idx, self.set_idx, self.disk_idx = collapse_identity(
            previous,
            (other.pool_idx, other.set_idx, other.disk_idx),
            self.n_disks == 0,
        )
        if self.n_disks > 0 and previous != (self.pool_idx, self.set_idx, self.disk_idx):
            logger.debug(
                f"Drive identity collapsed from {previous} to "
                f"{(self.pool_idx, self.set_idx, self.disk_idx)}"
            )

        add_fields(self, other, ("n_disks", "offline", "healing", "hanging"))
        sum_counters(self.state, other.state)
        sum_counters(self.lifetime_ops, other.lifetime_ops)
        merge_map(self.last_minute, other.last_minute, DiskAction)
        merge_map(self.last_day_segmented, other.last_day_segmented, SegmentedDiskActions)
        self.io_stats_minute.merge(other.io_stats_minute)
        if other.io_stats_day is not None:
            if self.io_stats_day is None:
                self.io_stats_day = SegmentedDiskIO()
            self.io_stats_day.merge(other.io_stats_day)
        self.space.merge(other.space)

    def last_minute_total(self) -> DiskAction:
        """All last-minute operations combined."""
        result = DiskAction()
        for action in self.last_minute.values():
            result.merge(action)
        return result

    def last_day_total(self) -> SegmentedDiskActions:
        """Day series of all operations combined."""
        result = SegmentedDiskActions()
        for series in self.last_day_segmented.values():
            result.merge(series)
        return result
