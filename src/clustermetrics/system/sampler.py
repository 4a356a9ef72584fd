"""
Local host snapshot built with psutil.

Produces a ``RealtimeMetrics`` describing the current host in the same shape a
remote node reports, so local figures can be merged with cluster snapshots.
Each category is probed independently; a probe that the platform does not
support or that is denied is logged and its category left out.
"""

import copy
import logging
import os
import socket
from datetime import datetime, timezone
from typing import Optional

import psutil

from ..models import (
    CPUMetrics,
    CPUTimesStat,
    InterfaceStats,
    LoadAvgStat,
    MemInfo,
    MemMetrics,
    Metrics,
    MetricType,
    NetDevLine,
    NetMetrics,
    ProcessCPUTimes,
    ProcessIOCounters,
    ProcessMemInfo,
    ProcessMetrics,
    RealtimeMetrics,
)

logger = logging.getLogger(__name__)

DEFAULT_TYPES = MetricType.CPU | MetricType.MEM | MetricType.NET | MetricType.PROCESS

_RUNNING_STATES = (psutil.STATUS_RUNNING,)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def sample_cpu(collected_at: Optional[datetime] = None) -> Optional[CPUMetrics]:
    """CPU times, load average and logical CPU count of this host."""
    try:
        times = psutil.cpu_times()
        load1, load5, load15 = psutil.getloadavg()
        cpu_count = psutil.cpu_count() or 1
    except (psutil.Error, OSError) as e:
        logger.warning(f"CPU metrics unavailable: {e}")
        return None

    return CPUMetrics(
        collected_at=collected_at or _now(),
        nodes=1,
        times_stat=CPUTimesStat(
            user=times.user,
            system=times.system,
            idle=times.idle,
            nice=getattr(times, "nice", 0.0),
            iowait=getattr(times, "iowait", 0.0),
            irq=getattr(times, "irq", 0.0),
            softirq=getattr(times, "softirq", 0.0),
            steal=getattr(times, "steal", 0.0),
            guest=getattr(times, "guest", 0.0),
            guest_nice=getattr(times, "guest_nice", 0.0),
        ),
        load_stat=LoadAvgStat(load1=load1, load5=load5, load15=load15),
        cpu_count=cpu_count,
    )


def sample_mem(collected_at: Optional[datetime] = None) -> Optional[MemMetrics]:
    """RAM and swap figures of this host."""
    try:
        vm = psutil.virtual_memory()
        swap = psutil.swap_memory()
    except (psutil.Error, OSError) as e:
        logger.warning(f"Memory metrics unavailable: {e}")
        return None

    return MemMetrics(
        collected_at=collected_at or _now(),
        nodes=1,
        info=MemInfo(
            total=vm.total,
            used=vm.used,
            free=vm.free,
            available=vm.available,
            shared=getattr(vm, "shared", 0),
            cache=getattr(vm, "cached", 0),
            buffers=getattr(vm, "buffers", 0),
            swap_space_total=swap.total,
            swap_space_free=swap.free,
            # Without a cgroup limit the limit equals total memory.
            limit=vm.total,
        ),
    )


def _dev_counters(counters) -> dict:
    return dict(
        rx_bytes=counters.bytes_recv,
        rx_packets=counters.packets_recv,
        rx_errors=counters.errin,
        rx_dropped=counters.dropin,
        tx_bytes=counters.bytes_sent,
        tx_packets=counters.packets_sent,
        tx_errors=counters.errout,
        tx_dropped=counters.dropout,
    )


def sample_net(collected_at: Optional[datetime] = None) -> Optional[NetMetrics]:
    """Per-interface network counters of this host. Loopback is skipped."""
    try:
        per_nic = psutil.net_io_counters(pernic=True)
    except (psutil.Error, OSError) as e:
        logger.warning(f"Network metrics unavailable: {e}")
        return None

    net = NetMetrics(collected_at=collected_at or _now(), nodes=1)
    for name, counters in sorted(per_nic.items()):
        if name == "lo":
            continue
        values = _dev_counters(counters)
        net.net_stats.merge(NetDevLine(**values))
        net.interfaces[name] = InterfaceStats(n=1, **values)
    return net


def sample_process(pid: Optional[int] = None, collected_at: Optional[datetime] = None) -> Optional[ProcessMetrics]:
    """
    Resource usage of one process, the current process by default.

    Counters the platform does not provide (I/O on macOS, file descriptors on
    Windows) stay at zero.
    """
    try:
        proc = psutil.Process(pid or os.getpid())
        with proc.oneshot():
            status = proc.status()
            cpu_times = proc.cpu_times()
            mem = proc.memory_info()
            ctx = proc.num_ctx_switches()
            metrics = ProcessMetrics(
                collected_at=collected_at or _now(),
                nodes=1,
                count=1,
                running_processes=1 if status in _RUNNING_STATES else 0,
                background_processes=0 if status in _RUNNING_STATES else 1,
                total_cpu_percent=proc.cpu_percent(interval=None),
                total_num_threads=proc.num_threads(),
                total_running_secs=max(0.0, _now().timestamp() - proc.create_time()),
                voluntary_ctx_switches=ctx.voluntary,
                involuntary_ctx_switches=ctx.involuntary,
                cpu_times=ProcessCPUTimes(
                    user=cpu_times.user,
                    system=cpu_times.system,
                    children_user=getattr(cpu_times, "children_user", 0.0),
                    children_system=getattr(cpu_times, "children_system", 0.0),
                    iowait=getattr(cpu_times, "iowait", 0.0),
                ),
                mem_info=ProcessMemInfo(
                    rss=mem.rss,
                    vms=mem.vms,
                    shared=getattr(mem, "shared", 0),
                    data=getattr(mem, "data", 0),
                ),
            )
            if hasattr(proc, "num_fds"):
                metrics.total_num_fds = proc.num_fds()
            if hasattr(proc, "io_counters"):
                try:
                    io = proc.io_counters()
                    metrics.io_counters = ProcessIOCounters(
                        read_count=io.read_count,
                        write_count=io.write_count,
                        read_bytes=io.read_bytes,
                        write_bytes=io.write_bytes,
                    )
                except psutil.AccessDenied:
                    logger.debug(f"Access denied reading I/O counters of process {proc.pid}")
        try:
            metrics.total_num_connections = len(proc.net_connections())
        except psutil.AccessDenied:
            logger.debug(f"Access denied listing connections of process {proc.pid}")
        return metrics

    except psutil.NoSuchProcess:
        logger.debug(f"Process {pid} no longer exists")
        return None
    except psutil.AccessDenied:
        logger.warning(f"Access denied for process {pid or os.getpid()}")
        return None


def sample_local_metrics(
    types: MetricType = DEFAULT_TYPES,
    host: Optional[str] = None,
) -> RealtimeMetrics:
    """
    Build a snapshot of this host.

    Args:
        types: Categories to collect; unsupported categories are ignored
        host: Host name to report; the local host name when omitted

    Returns:
        A snapshot with ``aggregated`` and ``by_host[host]`` populated
    """
    host = host or socket.gethostname()
    collected_at = _now()
    metrics = Metrics()

    if types.contains(MetricType.CPU):
        metrics.cpu = sample_cpu(collected_at)
    if types.contains(MetricType.MEM):
        metrics.mem = sample_mem(collected_at)
    if types.contains(MetricType.NET):
        metrics.net = sample_net(collected_at)
    if types.contains(MetricType.PROCESS):
        metrics.process = sample_process(collected_at=collected_at)

    snapshot = RealtimeMetrics(hosts=[host], aggregated=metrics)
    snapshot.by_host[host] = copy.deepcopy(metrics)

    missing = types & ~metrics.present_types() & DEFAULT_TYPES
    if missing:
        snapshot.errors.append(f"{host}: metrics unavailable: {missing!r}")
    logger.debug(f"Sampled local metrics for {host}: {metrics.present_types()!r}")
    return snapshot
