"""
Background scanner metrics.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .actions import TimedAction
from .base import Mergeable, later, merge_map, sum_counters


@dataclass
class BucketScanInfo:
    """Scan progress of one bucket in one erasure set."""

    pool: int = 0
    set: int = 0
    cycle: int = 0
    ongoing: bool = False
    last_update: Optional[datetime] = None
    last_started: Optional[datetime] = None
    completed: List[datetime] = field(default_factory=list)


@dataclass
class ScannerMetrics(Mergeable):
    """
    Scanner state and activity.

    Cycle fields describe the most advanced scanner seen: a higher
    ``current_cycle`` brings its start time and completion times along.

    Attributes:
        collected_at: Latest collection time
        current_cycle: Highest scan cycle reported
        current_started: Start of that cycle
        cycles_completed_at: Completion times of recent cycles
        ongoing_buckets: Buckets being scanned, highest reported value
        per_bucket_stats: Scan info per bucket, first report wins
        lifetime_ops: Scanner operations since server start
        lifetime_ilm: Lifecycle operations since server start
        last_minute_actions: Last-minute timing per scanner action
        last_minute_ilm: Last-minute timing per lifecycle action
        active_paths: Paths being scanned right now
        excessive_prefixes: Prefixes with too many objects, deduplicated
    """

    collected_at: Optional[datetime] = None
    current_cycle: int = 0
    current_started: Optional[datetime] = None
    cycles_completed_at: List[datetime] = field(default_factory=list)
    ongoing_buckets: int = 0
    per_bucket_stats: Dict[str, List[BucketScanInfo]] = field(default_factory=dict)
    lifetime_ops: Dict[str, int] = field(default_factory=dict)
    lifetime_ilm: Dict[str, int] = field(default_factory=dict)
    last_minute_actions: Dict[str, TimedAction] = field(default_factory=dict)
    last_minute_ilm: Dict[str, TimedAction] = field(default_factory=dict)
    active_paths: List[str] = field(default_factory=list)
    excessive_prefixes: List[str] = field(default_factory=list)

    def merge(self, other: Optional["ScannerMetrics"]) -> None:
        if other is None:
            return
        self.collected_at = later(self.collected_at, other.collected_at)
        self.ongoing_buckets = max(self.ongoing_buckets, other.ongoing_buckets)

        for bucket, infos in other.per_bucket_stats.items():
            if infos and bucket not in self.per_bucket_stats:
                self.per_bucket_stats[bucket] = copy.deepcopy(infos)

        if self.current_cycle < other.current_cycle:
            self.current_cycle = other.current_cycle
            self.current_started = other.current_started
            self.cycles_completed_at = list(other.cycles_completed_at)
        if len(other.cycles_completed_at) > len(self.cycles_completed_at):
            self.cycles_completed_at = list(other.cycles_completed_at)

        sum_counters(self.lifetime_ops, other.lifetime_ops)
        sum_counters(self.lifetime_ilm, other.lifetime_ilm)
        merge_map(self.last_minute_actions, other.last_minute_actions, TimedAction)
        merge_map(self.last_minute_ilm, other.last_minute_ilm, TimedAction)

        self.active_paths = sorted(self.active_paths + other.active_paths)
        self.excessive_prefixes = sorted(set(self.excessive_prefixes) | set(other.excessive_prefixes))
