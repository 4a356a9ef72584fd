"""
Fixed-width time series of windowed records.

A ``Segmented`` series holds one record per bucket of ``interval`` seconds,
anchored at ``first_time``. Bucket ``i`` covers
``[first_time + i * interval, first_time + (i + 1) * interval)``.

Merging two series with the same anchor and length is an index-wise merge.
Series that start at different times are realigned onto one timeline that
covers both spans. Series with different bucket widths cannot be combined and
the merge is dropped.
"""

import copy
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import ClassVar, Generic, List, Optional, TypeVar

from .actions import DiskAction, DiskIOStats, TimedAction
from .base import Mergeable
from .stats import APIStats, ReplicationStats, RPCStats

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Mergeable)


@dataclass
class Segmented(Mergeable, Generic[T]):
    """
    Generic interval series.

    Typed subclasses set ``segment_type`` to the record class stored in each
    bucket; it is used to create zero-valued buckets when the timeline has to be
    rebuilt and to compute ``total()``. A plain ``Segmented`` takes the class of
    its first bucket instead.

    Attributes:
        interval: Bucket width in seconds
        first_time: Start of the first bucket
        segments: One record per bucket, oldest first
    """

    segment_type: ClassVar[Optional[type]] = None

    interval: int = 0
    first_time: Optional[datetime] = None
    segments: List[T] = field(default_factory=list)

    def end_time(self) -> Optional[datetime]:
        """Exclusive end of the covered span, or None when unanchored."""
        if self.first_time is None:
            return None
        return self.first_time + timedelta(seconds=self.interval * len(self.segments))

    def record_type(self) -> Optional[type]:
        """Class of the bucket records, or None for an untyped empty series."""
        if self.segment_type is not None:
            return self.segment_type
        if self.segments:
            return type(self.segments[0])
        return None

    def segment_time(self, index: int) -> Optional[datetime]:
        """Start time of bucket ``index``."""
        if self.first_time is None:
            return None
        return self.first_time + timedelta(seconds=self.interval * index)

    def merge(self, other: Optional["Segmented[T]"]) -> None:
        """
        Add ``other`` into this series.

        The receiver never aliases ``other``: adopting an empty receiver copies
        the bucket records, and realigned buckets are merged into fresh records.
        """
        if other is None or not other.segments:
            return

        if not self.segments:
            self.interval = other.interval
            self.first_time = other.first_time
            self.segments = copy.deepcopy(other.segments)
            return

        if other.interval != self.interval or self.interval <= 0:
            logger.debug(
                f"Dropping {type(self).__name__} merge: interval {other.interval}s "
                f"is incompatible with {self.interval}s"
            )
            return

        if self.first_time == other.first_time and len(self.segments) == len(other.segments):
            for mine, theirs in zip(self.segments, other.segments):
                mine.merge(theirs)
            return

        if self.first_time is None or other.first_time is None:
            logger.debug(f"Dropping {type(self).__name__} merge: series without a start time")
            return

        self._realign(other)

    def _realign(self, other: "Segmented[T]") -> None:
        step = timedelta(seconds=self.interval)
        start = min(self.first_time, other.first_time)
        end = max(self.end_time(), other.end_time())
        total_slots = math.ceil((end - start) / step)

        record_type = self.record_type()
        rebuilt = [record_type() for _ in range(total_slots)]

        offset = (self.first_time - start) // step
        for i, segment in enumerate(self.segments):
            index = offset + i
            if 0 <= index < total_slots:
                rebuilt[index] = segment

        offset = (other.first_time - start) // step
        for i, segment in enumerate(other.segments):
            index = offset + i
            if 0 <= index < total_slots:
                rebuilt[index].merge(segment)

        logger.debug(
            f"Realigned {type(self).__name__} to {total_slots} buckets starting {start.isoformat()}"
        )
        self.first_time = start
        self.segments = rebuilt

    def total(self) -> Optional[T]:
        """
        Fold every bucket into one record covering the whole series.

        Returns None only for an empty series with no ``segment_type``.
        """
        record_type = self.record_type()
        if record_type is None:
            return None
        result = record_type()
        for segment in self.segments:
            result.merge(segment)
        return result


class SegmentedActions(Segmented[TimedAction]):
    segment_type = TimedAction


class SegmentedDiskActions(Segmented[DiskAction]):
    segment_type = DiskAction


class SegmentedDiskIO(Segmented[DiskIOStats]):
    segment_type = DiskIOStats


class SegmentedAPIMetrics(Segmented[APIStats]):
    segment_type = APIStats


class SegmentedRPCMetrics(Segmented[RPCStats]):
    segment_type = RPCStats


class SegmentedReplicationStats(Segmented[ReplicationStats]):
    segment_type = ReplicationStats
