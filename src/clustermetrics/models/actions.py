"""
Scalar accumulators.

These are the leaf records of the metrics tree: counters for a single measured
quantity, optionally with min/max bounds. Summed fields add on merge, bounded
fields only move once a non-empty sample has been seen.
"""

from dataclasses import dataclass, fields
from typing import Optional

from .base import Mergeable, add_fields


@dataclass
class TimedAction(Mergeable):
    """
    Accumulated timing of one kind of operation.

    Attributes:
        count: Number of operations
        acc_time: Accumulated duration in nanoseconds
        min_time: Fastest operation in nanoseconds
        max_time: Slowest operation in nanoseconds
        bytes: Bytes processed by the operations
    """

    count: int = 0
    acc_time: int = 0
    min_time: int = 0
    max_time: int = 0
    bytes: int = 0

    def merge(self, other: Optional["TimedAction"]) -> None:
        if other is None or other.count == 0:
            return
        if self.count == 0:
            self.min_time = other.min_time
            self.max_time = other.max_time
        else:
            self.min_time = min(self.min_time, other.min_time)
            self.max_time = max(self.max_time, other.max_time)
        self.count += other.count
        self.acc_time += other.acc_time
        self.bytes += other.bytes

    def avg(self) -> int:
        """Average duration in nanoseconds, truncated. 0 when empty."""
        if self.count <= 0:
            return 0
        return self.acc_time // self.count

    def avg_bytes(self) -> int:
        if self.count <= 0:
            return 0
        return self.bytes // self.count


@dataclass
class DiskAction(Mergeable):
    """
    Accumulated timing of one kind of drive operation, in seconds.

    Attributes:
        count: Number of operations
        acc_time: Accumulated duration in seconds
        min_time: Fastest operation in seconds
        max_time: Slowest operation in seconds
        bytes: Bytes transferred
        availability_errs: Operations that failed because the drive was unavailable
        timeouts: Operations that timed out
    """

    count: int = 0
    acc_time: float = 0.0
    min_time: float = 0.0
    max_time: float = 0.0
    bytes: int = 0
    availability_errs: int = 0
    timeouts: int = 0

    def merge(self, other: Optional["DiskAction"]) -> None:
        if other is None:
            return
        # Error counters can be non-zero without any completed operation.
        self.availability_errs += other.availability_errs
        self.timeouts += other.timeouts
        if other.count == 0:
            return
        if self.count == 0:
            self.min_time = other.min_time
            self.max_time = other.max_time
        else:
            self.min_time = min(self.min_time, other.min_time)
            self.max_time = max(self.max_time, other.max_time)
        self.count += other.count
        self.acc_time += other.acc_time
        self.bytes += other.bytes

    def avg(self) -> float:
        """Average duration in seconds."""
        if self.count <= 0:
            return 0.0
        return self.acc_time / self.count


@dataclass
class DiskIOStats(Mergeable):
    """Kernel block-device counters, summed across drives. ``n`` counts merged drives."""

    n: int = 0
    read_ios: int = 0
    read_merges: int = 0
    read_sectors: int = 0
    read_ticks: int = 0
    write_ios: int = 0
    write_merges: int = 0
    write_sectors: int = 0
    write_ticks: int = 0
    current_ios: int = 0
    total_ticks: int = 0
    req_ticks: int = 0
    discard_ios: int = 0
    discard_merges: int = 0
    discard_sectors: int = 0
    discard_ticks: int = 0
    flush_ios: int = 0
    flush_ticks: int = 0

    def merge(self, other: Optional["DiskIOStats"]) -> None:
        if other is None:
            return
        add_fields(self, other, (f.name for f in fields(self)))


@dataclass
class SensorMetrics(Mergeable):
    """
    Temperature readings of one sensor type across hosts.

    Attributes:
        count: Number of readings
        total_temp: Sum of all readings, for averaging
        min_temp: Lowest reading
        max_temp: Highest reading
        exceeds_critical: Readings above the sensor's critical threshold
    """

    count: int = 0
    total_temp: float = 0.0
    min_temp: float = 0.0
    max_temp: float = 0.0
    exceeds_critical: int = 0

    def merge(self, other: Optional["SensorMetrics"]) -> None:
        if other is None or other.count == 0:
            return
        if self.count == 0:
            self.min_temp = other.min_temp
            self.max_temp = other.max_temp
        else:
            self.min_temp = min(self.min_temp, other.min_temp)
            self.max_temp = max(self.max_temp, other.max_temp)
        self.count += other.count
        self.total_temp += other.total_temp
        self.exceeds_critical += other.exceeds_critical

    def avg_temp(self) -> float:
        if self.count <= 0:
            return 0.0
        return self.total_temp / self.count
