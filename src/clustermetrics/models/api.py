"""
S3 API call metrics.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from .base import Mergeable, later, merge_map
from .segmented import SegmentedAPIMetrics
from .stats import APIStats


@dataclass
class APIMetrics(Mergeable):
    """
    API statistics keyed by API name.

    Attributes:
        collected_at: Latest collection time
        nodes: Contributing hosts
        active_requests: Requests in flight
        queued_requests: Requests waiting for a handler
        last_minute_api: Last-minute stats per API
        last_day_api: Day series per API
        since_start: Totals since server start
    """

    collected_at: Optional[datetime] = None
    nodes: int = 0
    active_requests: int = 0
    queued_requests: int = 0
    last_minute_api: Dict[str, APIStats] = field(default_factory=dict)
    last_day_api: Dict[str, SegmentedAPIMetrics] = field(default_factory=dict)
    since_start: APIStats = field(default_factory=APIStats)

    def merge(self, other: Optional["APIMetrics"]) -> None:
        if other is None:
            return
        self.collected_at = later(self.collected_at, other.collected_at)
        self.nodes += other.nodes
        self.active_requests += other.active_requests
        self.queued_requests += other.queued_requests
        merge_map(self.last_minute_api, other.last_minute_api, APIStats)
        merge_map(self.last_day_api, other.last_day_api, SegmentedAPIMetrics)
        self.since_start.merge(other.since_start)

    def last_minute_total(self) -> APIStats:
        result = APIStats()
        for stats in self.last_minute_api.values():
            result.merge(stats)
        return result

    def last_day_total_segmented(self) -> SegmentedAPIMetrics:
        result = SegmentedAPIMetrics()
        for series in self.last_day_api.values():
            result.merge(series)
        return result

    def last_day_total(self) -> APIStats:
        return self.last_day_total_segmented().total()
