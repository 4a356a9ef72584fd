"""
Host-level metrics: OS operations, CPU, memory, network and runtime.

Every container here follows the same shape: ``collected_at`` keeps the latest
collection time, ``nodes`` counts contributing hosts and the payload fields are
summed. Values that only make sense per host (load average, memory totals) are
summed too; divide by ``nodes`` for a per-host average.
"""

import copy
import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Dict, List, Optional

from .actions import SensorMetrics, TimedAction
from .base import Mergeable, add_fields, later, merge_map, sum_counters
from .segmented import Segmented, SegmentedActions

logger = logging.getLogger(__name__)


@dataclass
class OSMetrics(Mergeable):
    """
    Operating system call metrics and hardware sensors.

    Attributes:
        collected_at: Latest collection time
        nodes: Contributing hosts
        lifetime_ops: Operation counts since server start
        last_minute: Last-minute timing per operation
        last_day: Day series per operation
        sensors: Temperature sensors keyed by sensor type
    """

    collected_at: Optional[datetime] = None
    nodes: int = 0
    lifetime_ops: Dict[str, int] = field(default_factory=dict)
    last_minute: Dict[str, TimedAction] = field(default_factory=dict)
    last_day: Dict[str, SegmentedActions] = field(default_factory=dict)
    sensors: Dict[str, SensorMetrics] = field(default_factory=dict)

    def merge(self, other: Optional["OSMetrics"]) -> None:
        if other is None:
            return
        self.collected_at = later(self.collected_at, other.collected_at)
        self.nodes += other.nodes
        sum_counters(self.lifetime_ops, other.lifetime_ops)
        merge_map(self.last_minute, other.last_minute, TimedAction)
        merge_map(self.last_day, other.last_day, SegmentedActions)
        merge_map(self.sensors, other.sensors, SensorMetrics)


@dataclass
class CPUTimesStat(Mergeable):
    """Accumulated CPU time per mode, in seconds."""

    user: float = 0.0
    system: float = 0.0
    idle: float = 0.0
    nice: float = 0.0
    iowait: float = 0.0
    irq: float = 0.0
    softirq: float = 0.0
    steal: float = 0.0
    guest: float = 0.0
    guest_nice: float = 0.0

    def merge(self, other: Optional["CPUTimesStat"]) -> None:
        if other is None:
            return
        add_fields(self, other, (f.name for f in fields(self)))

    def busy(self) -> float:
        """Time spent outside idle and iowait."""
        return (
            self.user + self.system + self.nice + self.irq + self.softirq + self.steal
        )


@dataclass
class LoadAvgStat(Mergeable):
    load1: float = 0.0
    load5: float = 0.0
    load15: float = 0.0

    def merge(self, other: Optional["LoadAvgStat"]) -> None:
        if other is None:
            return
        add_fields(self, other, ("load1", "load5", "load15"))


@dataclass
class CPUMetrics(Mergeable):
    """
    CPU usage across hosts.

    ``times_stat`` and ``load_stat`` are optional because a host may not be able
    to report them; a receiver without one adopts a copy of the other side's.
    """

    collected_at: Optional[datetime] = None
    nodes: int = 0
    times_stat: Optional[CPUTimesStat] = None
    load_stat: Optional[LoadAvgStat] = None
    cpu_count: int = 0

    def merge(self, other: Optional["CPUMetrics"]) -> None:
        if other is None:
            return
        self.collected_at = later(self.collected_at, other.collected_at)
        self.nodes += other.nodes
        self.cpu_count += other.cpu_count

        if other.times_stat is not None:
            if self.times_stat is None:
                self.times_stat = CPUTimesStat()
            self.times_stat.merge(other.times_stat)
        if other.load_stat is not None:
            if self.load_stat is None:
                self.load_stat = LoadAvgStat()
            self.load_stat.merge(other.load_stat)


@dataclass
class MemInfo(Mergeable):
    """RAM and swap figures in bytes. ``limit`` is the cgroup limit when lower than ``total``."""

    total: int = 0
    used: int = 0
    free: int = 0
    available: int = 0
    shared: int = 0
    cache: int = 0
    buffers: int = 0
    swap_space_total: int = 0
    swap_space_free: int = 0
    limit: int = 0

    def merge(self, other: Optional["MemInfo"]) -> None:
        if other is None:
            return
        add_fields(self, other, (f.name for f in fields(self)))


class SegmentedMemMetrics(Segmented[MemInfo]):
    segment_type = MemInfo


@dataclass
class MemMetrics(Mergeable):
    collected_at: Optional[datetime] = None
    nodes: int = 0
    info: MemInfo = field(default_factory=MemInfo)
    last_day: Optional[SegmentedMemMetrics] = None

    def merge(self, other: Optional["MemMetrics"]) -> None:
        if other is None:
            return
        self.collected_at = later(self.collected_at, other.collected_at)
        self.nodes += other.nodes
        self.info.merge(other.info)
        if other.last_day is not None:
            if self.last_day is None:
                self.last_day = SegmentedMemMetrics()
            self.last_day.merge(other.last_day)


@dataclass
class NetDevLine(Mergeable):
    """Interface counters as reported by /proc/net/dev."""

    rx_bytes: int = 0
    rx_packets: int = 0
    rx_errors: int = 0
    rx_dropped: int = 0
    rx_fifo: int = 0
    rx_frame: int = 0
    rx_compressed: int = 0
    rx_multicast: int = 0
    tx_bytes: int = 0
    tx_packets: int = 0
    tx_errors: int = 0
    tx_dropped: int = 0
    tx_fifo: int = 0
    tx_collisions: int = 0
    tx_carrier: int = 0
    tx_compressed: int = 0

    def merge(self, other: Optional["NetDevLine"]) -> None:
        if other is None:
            return
        add_fields(self, other, (f.name for f in fields(NetDevLine)))


@dataclass
class InterfaceStats(NetDevLine):
    """Counters of one named interface, ``n`` counts the hosts that reported it."""

    n: int = 0

    def merge(self, other: Optional["InterfaceStats"]) -> None:
        if other is None:
            return
        super().merge(other)
        self.n += other.n


@dataclass
class NetMetrics(Mergeable):
    collected_at: Optional[datetime] = None
    nodes: int = 0
    net_stats: NetDevLine = field(default_factory=NetDevLine)
    interfaces: Dict[str, InterfaceStats] = field(default_factory=dict)

    def merge(self, other: Optional["NetMetrics"]) -> None:
        if other is None:
            return
        self.collected_at = later(self.collected_at, other.collected_at)
        self.nodes += other.nodes
        self.net_stats.merge(other.net_stats)
        merge_map(self.interfaces, other.interfaces, InterfaceStats)


@dataclass
class Float64Histogram:
    """Runtime histogram: ``counts[i]`` samples fell between ``buckets[i]`` and ``buckets[i + 1]``."""

    counts: List[int] = field(default_factory=list)
    buckets: List[float] = field(default_factory=list)


@dataclass
class RuntimeMetrics(Mergeable):
    """
    Language runtime metrics keyed by metric name.

    Histograms are merged only when both sides use the same bucket layout;
    otherwise the receiver's histogram is kept unchanged.
    """

    uint_metrics: Dict[str, int] = field(default_factory=dict)
    float_metrics: Dict[str, float] = field(default_factory=dict)
    hist_metrics: Dict[str, Float64Histogram] = field(default_factory=dict)
    n: int = 0

    def merge(self, other: Optional["RuntimeMetrics"]) -> None:
        if other is None:
            return
        sum_counters(self.uint_metrics, other.uint_metrics)
        sum_counters(self.float_metrics, other.float_metrics)
        for name, hist in other.hist_metrics.items():
            existing = self.hist_metrics.get(name)
            if existing is None or not existing.buckets:
                self.hist_metrics[name] = copy.deepcopy(hist)
                continue
            if existing.buckets != hist.buckets or len(existing.counts) != len(hist.counts):
                logger.debug(f"Skipping histogram {name}: bucket layouts differ")
                continue
            for i, count in enumerate(hist.counts):
                existing.counts[i] += count
        self.n += other.n
