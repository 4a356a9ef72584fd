"""
Server process metrics.

Per-process resource counters summed across hosts. Field groups mirror what
``psutil.Process`` reports so that a local snapshot can be built directly from
it (see ``clustermetrics.system.sampler``).
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Optional

from .base import Mergeable, add_fields, later


@dataclass
class ProcessCPUTimes(Mergeable):
    user: float = 0.0
    system: float = 0.0
    children_user: float = 0.0
    children_system: float = 0.0
    iowait: float = 0.0

    def merge(self, other: Optional["ProcessCPUTimes"]) -> None:
        if other is None:
            return
        add_fields(self, other, (f.name for f in fields(self)))


@dataclass
class ProcessIOCounters(Mergeable):
    read_count: int = 0
    write_count: int = 0
    read_bytes: int = 0
    write_bytes: int = 0

    def merge(self, other: Optional["ProcessIOCounters"]) -> None:
        if other is None:
            return
        add_fields(self, other, (f.name for f in fields(self)))


@dataclass
class ProcessMemInfo(Mergeable):
    rss: int = 0
    vms: int = 0
    shared: int = 0
    data: int = 0

    def merge(self, other: Optional["ProcessMemInfo"]) -> None:
        if other is None:
            return
        add_fields(self, other, (f.name for f in fields(self)))


@dataclass
class ProcessMetrics(Mergeable):
    """
    Resource usage of the server processes.

    Attributes:
        collected_at: Latest collection time
        nodes: Contributing hosts
        count: Processes merged in
        running_processes: Processes in a running state
        background_processes: Processes in a sleeping or idle state
        total_cpu_percent: Summed CPU percentage
        total_num_connections: Open network connections
        total_num_fds: Open file descriptors
        total_num_threads: Threads
        total_running_secs: Summed process uptime in seconds
        voluntary_ctx_switches: Voluntary context switches
        involuntary_ctx_switches: Involuntary context switches
        cpu_times: CPU time split by mode
        io_counters: Read/write counters
        mem_info: Memory usage
    """

    collected_at: Optional[datetime] = None
    nodes: int = 0
    count: int = 0
    running_processes: int = 0
    background_processes: int = 0
    total_cpu_percent: float = 0.0
    total_num_connections: int = 0
    total_num_fds: int = 0
    total_num_threads: int = 0
    total_running_secs: float = 0.0
    voluntary_ctx_switches: int = 0
    involuntary_ctx_switches: int = 0
    cpu_times: ProcessCPUTimes = field(default_factory=ProcessCPUTimes)
    io_counters: ProcessIOCounters = field(default_factory=ProcessIOCounters)
    mem_info: ProcessMemInfo = field(default_factory=ProcessMemInfo)

    def merge(self, other: Optional["ProcessMetrics"]) -> None:
        if other is None:
            return
        self.collected_at = later(self.collected_at, other.collected_at)
        add_fields(
            self,
            other,
            (
                "nodes",
                "count",
                "running_processes",
                "background_processes",
                "total_cpu_percent",
                "total_num_connections",
                "total_num_fds",
                "total_num_threads",
                "total_running_secs",
                "voluntary_ctx_switches",
                "involuntary_ctx_switches",
            ),
        )
        self.cpu_times.merge(other.cpu_times)
        self.io_counters.merge(other.io_counters)
        self.mem_info.merge(other.mem_info)
