"""
Metric records and their merge rules.

The models are organized leaf-first:

Scalar accumulators:
- TimedAction, DiskAction, DiskIOStats, SensorMetrics

Windowed statistics:
- APIStats, RPCStats, ReplicationStats with time-range tracking
  and two-sided min/max selection

Interval series:
- Segmented and its per-record subclasses, realigning series that
  start at different times onto a common timeline

Category containers:
- Disk, OS, CPU, memory, network, runtime, process, RPC, API,
  replication, scanner, batch job and site resync metrics

Top-level snapshots:
- Metrics and RealtimeMetrics, merged node by node into the cluster view

Every record is a dataclass whose zero value is the merge identity. Merging
mutates the receiver in place and never raises.
"""

from .actions import DiskAction, DiskIOStats, SensorMetrics, TimedAction
from .api import APIMetrics
from .base import Mergeable
from .disk import DiskMetric, DriveSpaceInfo
from .jobs import (
    BatchJobMetrics,
    CatalogInfo,
    ExpirationInfo,
    JobMetric,
    KeyRotationInfo,
    ReplicateInfo,
    SiteResyncMetrics,
)
from .process import ProcessCPUTimes, ProcessIOCounters, ProcessMemInfo, ProcessMetrics
from .realtime import Metrics, MetricType, RealtimeMetrics
from .replication import ReplicationMetrics, ReplicationTargetStats
from .rpc import ConnectionStats, RPCMetrics
from .scanner import BucketScanInfo, ScannerMetrics
from .segmented import (
    Segmented,
    SegmentedActions,
    SegmentedAPIMetrics,
    SegmentedDiskActions,
    SegmentedDiskIO,
    SegmentedReplicationStats,
    SegmentedRPCMetrics,
)
from .stats import APIStats, RejectedAPIStats, ReplicationStats, RPCStats
from .system import (
    CPUMetrics,
    CPUTimesStat,
    Float64Histogram,
    InterfaceStats,
    LoadAvgStat,
    MemInfo,
    MemMetrics,
    NetDevLine,
    NetMetrics,
    OSMetrics,
    RuntimeMetrics,
    SegmentedMemMetrics,
)

__all__ = [
    # Base
    "Mergeable",
    # Scalar accumulators
    "TimedAction",
    "DiskAction",
    "DiskIOStats",
    "SensorMetrics",
    # Windowed statistics
    "APIStats",
    "RejectedAPIStats",
    "RPCStats",
    "ReplicationStats",
    # Interval series
    "Segmented",
    "SegmentedActions",
    "SegmentedAPIMetrics",
    "SegmentedDiskActions",
    "SegmentedDiskIO",
    "SegmentedMemMetrics",
    "SegmentedReplicationStats",
    "SegmentedRPCMetrics",
    # Category containers
    "DiskMetric",
    "DriveSpaceInfo",
    "OSMetrics",
    "CPUMetrics",
    "CPUTimesStat",
    "LoadAvgStat",
    "MemInfo",
    "MemMetrics",
    "NetDevLine",
    "InterfaceStats",
    "NetMetrics",
    "Float64Histogram",
    "RuntimeMetrics",
    "ProcessMetrics",
    "ProcessCPUTimes",
    "ProcessIOCounters",
    "ProcessMemInfo",
    "ConnectionStats",
    "RPCMetrics",
    "APIMetrics",
    "ReplicationTargetStats",
    "ReplicationMetrics",
    "BucketScanInfo",
    "ScannerMetrics",
    "BatchJobMetrics",
    "JobMetric",
    "ReplicateInfo",
    "KeyRotationInfo",
    "ExpirationInfo",
    "CatalogInfo",
    "SiteResyncMetrics",
    # Top-level
    "MetricType",
    "Metrics",
    "RealtimeMetrics",
]
