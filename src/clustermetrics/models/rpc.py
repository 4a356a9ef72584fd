"""
Internode RPC metrics.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from .base import Mergeable, add_fields, later, merge_map
from .segmented import SegmentedRPCMetrics
from .stats import RPCStats

_CONNECTION_SUMMED = (
    "connected",
    "disconnected",
    "reconnect_count",
    "outgoing_streams",
    "incoming_streams",
    "outgoing_messages",
    "incoming_messages",
    "outgoing_bytes",
    "incoming_bytes",
    "out_queue",
)


@dataclass
class ConnectionStats(Mergeable):
    """
    Connection counters between servers.

    ``last_pong_time`` and ``last_ping_ms`` describe the same ping and are
    always taken together from whichever side saw the latest pong.

    Attributes:
        connected: Connected remotes
        disconnected: Disconnected remotes
        reconnect_count: Reconnections since start
        outgoing_streams: Open outgoing streams
        incoming_streams: Open incoming streams
        outgoing_messages: Messages sent
        incoming_messages: Messages received
        outgoing_bytes: Bytes sent
        incoming_bytes: Bytes received
        out_queue: Messages waiting to be sent
        last_pong_time: Time of the latest pong
        last_ping_ms: Round trip of the latest ping (the slower one on a tie)
        max_ping_dur_ms: Slowest ping across all merged entries
        last_connect_time: Latest (re)connection
    """

    connected: int = 0
    disconnected: int = 0
    reconnect_count: int = 0
    outgoing_streams: int = 0
    incoming_streams: int = 0
    outgoing_messages: int = 0
    incoming_messages: int = 0
    outgoing_bytes: int = 0
    incoming_bytes: int = 0
    out_queue: int = 0
    last_pong_time: Optional[datetime] = None
    last_ping_ms: float = 0.0
    max_ping_dur_ms: float = 0.0
    last_connect_time: Optional[datetime] = None

    def merge(self, other: Optional["ConnectionStats"]) -> None:
        if other is None:
            return
        add_fields(self, other, _CONNECTION_SUMMED)
        if other.last_pong_time is not None:
            if self.last_pong_time is None or self.last_pong_time < other.last_pong_time:
                self.last_pong_time = other.last_pong_time
                self.last_ping_ms = other.last_ping_ms
            elif self.last_pong_time == other.last_pong_time:
                # Same pong time on both sides: keep the slower ping.
                self.last_ping_ms = max(self.last_ping_ms, other.last_ping_ms)
        self.max_ping_dur_ms = max(self.max_ping_dur_ms, other.max_ping_dur_ms)
        self.last_connect_time = later(self.last_connect_time, other.last_connect_time)


@dataclass
class RPCMetrics(ConnectionStats):
    """
    Cluster RPC metrics: connection totals plus per-handler statistics.

    Attributes:
        collected_at: Latest collection time
        nodes: Contributing hosts
        last_minute: Last-minute stats per RPC handler
        last_day: Day series per RPC handler
        by_destination: Connection stats keyed by remote host
        by_caller: Connection stats keyed by calling host
    """

    collected_at: Optional[datetime] = None
    nodes: int = 0
    last_minute: Dict[str, RPCStats] = field(default_factory=dict)
    last_day: Dict[str, SegmentedRPCMetrics] = field(default_factory=dict)
    by_destination: Dict[str, ConnectionStats] = field(default_factory=dict)
    by_caller: Dict[str, ConnectionStats] = field(default_factory=dict)

    def merge(self, other: Optional["RPCMetrics"]) -> None:
        if other is None:
            return
        super().merge(other)
        self.collected_at = later(self.collected_at, other.collected_at)
        self.nodes += other.nodes
        merge_map(self.last_minute, other.last_minute, RPCStats)
        merge_map(self.last_day, other.last_day, SegmentedRPCMetrics)
        merge_map(self.by_destination, other.by_destination, ConnectionStats)
        merge_map(self.by_caller, other.by_caller, ConnectionStats)

    def last_minute_total(self) -> RPCStats:
        """All handlers' last-minute stats combined."""
        result = RPCStats()
        for stats in self.last_minute.values():
            result.merge(stats)
        return result

    def last_day_total_segmented(self) -> SegmentedRPCMetrics:
        """Day series of all handlers combined bucket by bucket."""
        result = SegmentedRPCMetrics()
        for series in self.last_day.values():
            result.merge(series)
        return result

    def last_day_total(self) -> RPCStats:
        """All handlers over the whole day."""
        return self.last_day_total_segmented().total()
