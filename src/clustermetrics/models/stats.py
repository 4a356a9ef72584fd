"""
Windowed statistics records.

A windowed record bundles counters for one window of activity (one bucket of
a day series, or the last minute) together with the window's start/end times
and min/max pairs. The time range is trustworthy only while every merged input
reports the same window; as soon as two inputs disagree it is cleared.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Iterable, Optional, Tuple

from .base import Mergeable, add_fields, merge_time_range, select_max, select_min


def _merge_bounds(target, other, names: Iterable[Tuple[str, str]], target_empty: bool, other_empty: bool) -> None:
    for min_name, max_name in names:
        setattr(
            target,
            min_name,
            select_min(getattr(target, min_name), getattr(other, min_name), target_empty, other_empty),
        )
        setattr(
            target,
            max_name,
            select_max(getattr(target, max_name), getattr(other, max_name), target_empty, other_empty),
        )


@dataclass
class RejectedAPIStats(Mergeable):
    """Requests rejected before they reached a handler, by reason."""

    auth: int = 0
    requests_time: int = 0
    header: int = 0
    invalid: int = 0
    not_implemented: int = 0

    def merge(self, other: Optional["RejectedAPIStats"]) -> None:
        if other is None:
            return
        add_fields(self, other, (f.name for f in fields(self)))

    def total(self) -> int:
        return self.auth + self.requests_time + self.header + self.invalid + self.not_implemented


_API_SUMMED = (
    "nodes",
    "wall_time_secs",
    "incoming_bytes",
    "outgoing_bytes",
    "errors_4xx",
    "errors_5xx",
    "canceled",
    "request_time_secs",
    "req_read_secs",
    "resp_secs",
    "resp_ttfb_secs",
    "read_blocked_secs",
    "write_blocked_secs",
)

_API_BOUNDS = (
    ("request_time_secs_min", "request_time_secs_max"),
    ("req_read_secs_min", "req_read_secs_max"),
    ("resp_secs_min", "resp_secs_max"),
    ("resp_ttfb_secs_min", "resp_ttfb_secs_max"),
)


@dataclass
class APIStats(Mergeable):
    """
    API call statistics for one window.

    Attributes:
        nodes: Number of nodes that contributed
        start_time: Window start, ``None`` when inputs disagree
        end_time: Window end, ``None`` when inputs disagree
        wall_time_secs: Total wall time covered by the contributing windows
        requests: Completed requests; 0 marks the record as empty
        request_time_secs: Accumulated request handling time
        req_read_secs: Accumulated time spent reading request bodies
        resp_secs: Accumulated time spent writing responses
        resp_ttfb_secs: Accumulated time to first response byte
        read_blocked_secs: Time blocked reading from clients
        write_blocked_secs: Time blocked writing to clients
        rejected: Requests rejected before handling
    """

    nodes: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    wall_time_secs: float = 0.0

    requests: int = 0
    incoming_bytes: int = 0
    outgoing_bytes: int = 0
    errors_4xx: int = 0
    errors_5xx: int = 0
    canceled: int = 0
    rejected: RejectedAPIStats = field(default_factory=RejectedAPIStats)

    request_time_secs: float = 0.0
    req_read_secs: float = 0.0
    resp_secs: float = 0.0
    resp_ttfb_secs: float = 0.0

    request_time_secs_min: float = 0.0
    request_time_secs_max: float = 0.0
    req_read_secs_min: float = 0.0
    req_read_secs_max: float = 0.0
    resp_secs_min: float = 0.0
    resp_secs_max: float = 0.0
    resp_ttfb_secs_min: float = 0.0
    resp_ttfb_secs_max: float = 0.0

    read_blocked_secs: float = 0.0
    write_blocked_secs: float = 0.0

    def merge(self, other: Optional["APIStats"]) -> None:
        if other is None:
            return
        self_empty = self.requests == 0
        other_empty = other.requests == 0

        self.start_time, self.end_time = merge_time_range(
            (self.start_time, self.end_time), (other.start_time, other.end_time), self_empty
        )
        _merge_bounds(self, other, _API_BOUNDS, self_empty, other_empty)
        add_fields(self, other, _API_SUMMED)
        self.requests += other.requests
        self.rejected.merge(other.rejected)

    def avg_request_time(self) -> float:
        """Mean request time in seconds."""
        if self.requests == 0:
            return 0.0
        return self.request_time_secs / self.requests

    def error_rate(self) -> float:
        if self.requests == 0:
            return 0.0
        return (self.errors_4xx + self.errors_5xx) / self.requests


@dataclass
class RPCStats(Mergeable):
    """RPC handler statistics for one window. ``requests == 0`` marks the record empty."""

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    wall_time_secs: float = 0.0
    requests: int = 0
    request_time_secs: float = 0.0
    request_time_secs_min: float = 0.0
    request_time_secs_max: float = 0.0
    incoming_bytes: int = 0
    outgoing_bytes: int = 0

    def merge(self, other: Optional["RPCStats"]) -> None:
        if other is None:
            return
        self_empty = self.requests == 0
        other_empty = other.requests == 0

        self.start_time, self.end_time = merge_time_range(
            (self.start_time, self.end_time), (other.start_time, other.end_time), self_empty
        )
        _merge_bounds(
            self, other, (("request_time_secs_min", "request_time_secs_max"),), self_empty, other_empty
        )
        add_fields(
            self,
            other,
            ("wall_time_secs", "requests", "request_time_secs", "incoming_bytes", "outgoing_bytes"),
        )

    def avg_request_time(self) -> float:
        if self.requests == 0:
            return 0.0
        return self.request_time_secs / self.requests


_REPLICATION_SUMMED = (
    "nodes",
    "wall_time_secs",
    "events",
    "bytes",
    "event_time_secs",
    "put_object",
    "update_meta",
    "del_object",
    "del_tag",
    "latency_secs",
    "put_errors",
    "update_meta_errors",
    "del_errors",
    "del_tag_errors",
    "synced",
    "already_ok",
    "rejected",
    "proxy_events",
    "proxy_bytes",
    "proxy_head",
    "proxy_get",
    "proxy_get_tag",
    "proxy_get_ok",
    "proxy_get_tag_ok",
    "proxy_head_ok",
)


@dataclass
class ReplicationStats(Mergeable):
    """
    Replication activity for one window.

    A record with ``nodes == 0`` carries no data; merging one is a no-op.
    ``max_latency_secs`` is a plain maximum, every other counter is summed.
    """

    nodes: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    wall_time_secs: float = 0.0

    events: int = 0
    bytes: int = 0
    event_time_secs: float = 0.0

    put_object: int = 0
    update_meta: int = 0
    del_object: int = 0
    del_tag: int = 0

    latency_secs: float = 0.0
    max_latency_secs: float = 0.0

    put_errors: int = 0
    update_meta_errors: int = 0
    del_errors: int = 0
    del_tag_errors: int = 0

    synced: int = 0
    already_ok: int = 0
    rejected: int = 0

    proxy_events: int = 0
    proxy_bytes: int = 0
    proxy_head: int = 0
    proxy_get: int = 0
    proxy_get_tag: int = 0
    proxy_get_ok: int = 0
    proxy_get_tag_ok: int = 0
    proxy_head_ok: int = 0

    def merge(self, other: Optional["ReplicationStats"]) -> None:
        if other is None or other.nodes == 0:
            return
        self.start_time, self.end_time = merge_time_range(
            (self.start_time, self.end_time), (other.start_time, other.end_time), self.nodes == 0
        )
        self.max_latency_secs = max(self.max_latency_secs, other.max_latency_secs)
        add_fields(self, other, _REPLICATION_SUMMED)

    def errors(self) -> int:
        return self.put_errors + self.update_meta_errors + self.del_errors + self.del_tag_errors

    def avg_latency(self) -> float:
        """Mean replication latency per event in seconds."""
        if self.events == 0:
            return 0.0
        return self.latency_secs / self.events
