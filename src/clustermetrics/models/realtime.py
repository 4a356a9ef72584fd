"""
Top-level snapshot containers.

``RealtimeMetrics`` is the unit a node reports and also the running
cluster-wide accumulator: merging every node's snapshot into one instance
produces the cluster view, with optional breakdowns per host, per drive and
per erasure set.
"""

import logging
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Dict, List, Optional

from .api import APIMetrics
from .base import Mergeable, merge_map
from .disk import DiskMetric
from .jobs import BatchJobMetrics, SiteResyncMetrics
from .process import ProcessMetrics
from .replication import ReplicationMetrics
from .rpc import RPCMetrics
from .scanner import ScannerMetrics
from .system import CPUMetrics, MemMetrics, NetMetrics, OSMetrics, RuntimeMetrics

logger = logging.getLogger(__name__)


class MetricType(IntFlag):
    """Bit flags naming metric categories."""

    NONE = 0
    SCANNER = 1 << 0
    DISK = 1 << 1
    OS = 1 << 2
    BATCH_JOBS = 1 << 3
    SITE_RESYNC = 1 << 4
    NET = 1 << 5
    MEM = 1 << 6
    CPU = 1 << 7
    RPC = 1 << 8
    RUNTIME = 1 << 9
    API = 1 << 10
    REPLICATION = 1 << 11
    PROCESS = 1 << 12
    ALL = (1 << 13) - 1

    def contains(self, other: "MetricType") -> bool:
        """Whether every category in ``other`` is also in this set."""
        return self & other == other


# Attribute name, container class and flag of every category in Metrics.
_CATEGORIES = (
    ("scanner", ScannerMetrics, MetricType.SCANNER),
    ("disk", DiskMetric, MetricType.DISK),
    ("os", OSMetrics, MetricType.OS),
    ("batch_jobs", BatchJobMetrics, MetricType.BATCH_JOBS),
    ("site_resync", SiteResyncMetrics, MetricType.SITE_RESYNC),
    ("net", NetMetrics, MetricType.NET),
    ("mem", MemMetrics, MetricType.MEM),
    ("cpu", CPUMetrics, MetricType.CPU),
    ("rpc", RPCMetrics, MetricType.RPC),
    ("runtime", RuntimeMetrics, MetricType.RUNTIME),
    ("api", APIMetrics, MetricType.API),
    ("replication", ReplicationMetrics, MetricType.REPLICATION),
    ("process", ProcessMetrics, MetricType.PROCESS),
)


@dataclass
class Metrics(Mergeable):
    """
    One container per metric category. Absent categories are ``None``.

    Merging creates a category on the receiver the first time the other side
    carries it; categories absent on the other side are left untouched.
    """

    scanner: Optional[ScannerMetrics] = None
    disk: Optional[DiskMetric] = None
    os: Optional[OSMetrics] = None
    batch_jobs: Optional[BatchJobMetrics] = None
    site_resync: Optional[SiteResyncMetrics] = None
    net: Optional[NetMetrics] = None
    mem: Optional[MemMetrics] = None
    cpu: Optional[CPUMetrics] = None
    rpc: Optional[RPCMetrics] = None
    runtime: Optional[RuntimeMetrics] = None
    api: Optional[APIMetrics] = None
    replication: Optional[ReplicationMetrics] = None
    process: Optional[ProcessMetrics] = None

    def merge(self, other: Optional["Metrics"]) -> None:
        if other is None:
            return
        for name, container_cls, _ in _CATEGORIES:
            incoming = getattr(other, name)
            if incoming is None:
                continue
            existing = getattr(self, name)
            if existing is None:
                existing = container_cls()
                setattr(self, name, existing)
            existing.merge(incoming)

    def present_types(self) -> MetricType:
        """Categories that currently hold data."""
        present = MetricType.NONE
        for name, _, flag in _CATEGORIES:
            if getattr(self, name) is not None:
                present |= flag
        return present


@dataclass
class RealtimeMetrics(Mergeable):
    """
    A node snapshot, or the merge of many.

    Attributes:
        errors: Collection errors, concatenated across merges
        hosts: Hosts that contributed, sorted
        aggregated: Every category merged across all hosts
        by_host: Categories per host
        by_disk: Drive metrics per drive path
        by_disk_set: Drive metrics per pool index, then set index
        final: True once the producer has sent its last snapshot
    """

    errors: List[str] = field(default_factory=list)
    hosts: List[str] = field(default_factory=list)
    aggregated: Metrics = field(default_factory=Metrics)
    by_host: Dict[str, Metrics] = field(default_factory=dict)
    by_disk: Dict[str, DiskMetric] = field(default_factory=dict)
    by_disk_set: Dict[int, Dict[int, DiskMetric]] = field(default_factory=dict)
    final: bool = False

    def merge(self, other: Optional["RealtimeMetrics"]) -> None:
        if other is None:
            return
        if other.errors:
            logger.debug(f"Merging {len(other.errors)} collection errors from {other.hosts}")
            self.errors.extend(other.errors)

        self.hosts.extend(other.hosts)
        self.hosts.sort()
        self.aggregated.merge(other.aggregated)

        merge_map(self.by_host, other.by_host)
        merge_map(self.by_disk, other.by_disk)
        for pool_idx, sets in other.by_disk_set.items():
            merge_map(self.by_disk_set.setdefault(pool_idx, {}), sets)

        self.final = self.final or other.final
