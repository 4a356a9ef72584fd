"""
Unit tests for local host sampling.

psutil calls are mocked where the values matter; the current process is
sampled for real since psutil always supports it.
"""

from types import SimpleNamespace
from unittest.mock import patch

import psutil
import pytest

from clustermetrics.models import MetricType, RealtimeMetrics
from clustermetrics.system import (
    DEFAULT_TYPES,
    sample_cpu,
    sample_local_metrics,
    sample_mem,
    sample_net,
    sample_process,
)
from clustermetrics.system import sampler


def nic(sent=0, recv=0, errin=0):
    return SimpleNamespace(
        bytes_sent=sent,
        bytes_recv=recv,
        packets_sent=1,
        packets_recv=1,
        errin=errin,
        errout=0,
        dropin=0,
        dropout=0,
    )


@pytest.mark.unit
class TestSampleCPU:
    """Test cases for CPU sampling."""

    def test_values(self, t0):
        times = SimpleNamespace(user=10.0, system=5.0, idle=85.0, iowait=1.0)
        with patch.object(sampler.psutil, "cpu_times", return_value=times), \
             patch.object(sampler.psutil, "getloadavg", return_value=(1.0, 0.5, 0.25)), \
             patch.object(sampler.psutil, "cpu_count", return_value=16):
            metrics = sample_cpu(t0)

        assert metrics.collected_at == t0
        assert metrics.nodes == 1
        assert metrics.cpu_count == 16
        assert metrics.times_stat.user == 10.0
        assert metrics.times_stat.iowait == 1.0
        assert metrics.times_stat.steal == 0.0
        assert metrics.load_stat.load5 == 0.5

    def test_unknown_cpu_count(self):
        times = SimpleNamespace(user=1.0, system=1.0, idle=1.0)
        with patch.object(sampler.psutil, "cpu_times", return_value=times), \
             patch.object(sampler.psutil, "getloadavg", return_value=(0.0, 0.0, 0.0)), \
             patch.object(sampler.psutil, "cpu_count", return_value=None):
            metrics = sample_cpu()

        assert metrics.cpu_count == 1

    def test_unavailable(self):
        with patch.object(sampler.psutil, "getloadavg", side_effect=OSError("not supported")):
            assert sample_cpu() is None


@pytest.mark.unit
class TestSampleMemAndNet:
    """Test cases for memory and network sampling."""

    def test_mem(self):
        vm = SimpleNamespace(total=1000, used=400, free=300, available=600, cached=200)
        swap = SimpleNamespace(total=50, free=40)
        with patch.object(sampler.psutil, "virtual_memory", return_value=vm), \
             patch.object(sampler.psutil, "swap_memory", return_value=swap):
            metrics = sample_mem()

        assert metrics.info.total == 1000
        assert metrics.info.available == 600
        assert metrics.info.cache == 200
        assert metrics.info.shared == 0
        assert metrics.info.swap_space_free == 40
        assert metrics.info.limit == 1000

    def test_net_skips_loopback(self):
        counters = {"lo": nic(sent=999), "eth0": nic(sent=10, recv=20), "eth1": nic(recv=5, errin=1)}
        with patch.object(sampler.psutil, "net_io_counters", return_value=counters):
            metrics = sample_net()

        assert sorted(metrics.interfaces) == ["eth0", "eth1"]
        assert metrics.interfaces["eth0"].n == 1
        assert metrics.interfaces["eth0"].tx_bytes == 10
        assert metrics.net_stats.tx_bytes == 10
        assert metrics.net_stats.rx_bytes == 25
        assert metrics.net_stats.rx_errors == 1

    def test_net_unavailable(self):
        with patch.object(sampler.psutil, "net_io_counters", side_effect=psutil.AccessDenied()):
            assert sample_net() is None


@pytest.mark.unit
class TestSampleProcess:
    """Test cases for process sampling."""

    def test_current_process(self):
        metrics = sample_process()

        assert metrics is not None
        assert metrics.nodes == 1
        assert metrics.count == 1
        assert metrics.running_processes + metrics.background_processes == 1
        assert metrics.total_num_threads >= 1
        assert metrics.mem_info.rss > 0
        assert metrics.total_running_secs >= 0.0

    def test_missing_process(self):
        with patch.object(sampler.psutil, "Process", side_effect=psutil.NoSuchProcess(pid=999999)):
            assert sample_process(999999) is None

    def test_access_denied(self):
        with patch.object(sampler.psutil, "Process", side_effect=psutil.AccessDenied(pid=1)):
            assert sample_process(1) is None


@pytest.mark.unit
class TestSampleLocalMetrics:
    """Test cases for the local snapshot builder."""

    def test_snapshot_shape(self):
        snapshot = sample_local_metrics(MetricType.PROCESS, host="local-test")

        assert snapshot.hosts == ["local-test"]
        assert snapshot.aggregated.process is not None
        assert snapshot.aggregated.cpu is None
        assert snapshot.by_host["local-test"].process == snapshot.aggregated.process
        assert snapshot.by_host["local-test"].process is not snapshot.aggregated.process

    def test_default_host_name(self):
        with patch.object(sampler.socket, "gethostname", return_value="box-1"):
            snapshot = sample_local_metrics(MetricType.PROCESS)

        assert snapshot.hosts == ["box-1"]

    def test_unavailable_category_reported(self):
        with patch.object(sampler, "sample_cpu", return_value=None):
            snapshot = sample_local_metrics(MetricType.CPU | MetricType.PROCESS, host="h")

        assert snapshot.aggregated.cpu is None
        assert snapshot.aggregated.process is not None
        assert len(snapshot.errors) == 1
        assert snapshot.errors[0].startswith("h:")

    def test_unsupported_categories_ignored(self):
        snapshot = sample_local_metrics(MetricType.SCANNER | MetricType.PROCESS, host="h")

        assert snapshot.aggregated.scanner is None
        assert snapshot.errors == []

    def test_local_snapshot_merges(self):
        accumulator = RealtimeMetrics()
        accumulator.merge(sample_local_metrics(MetricType.PROCESS, host="a"))
        accumulator.merge(sample_local_metrics(MetricType.PROCESS, host="b"))

        assert accumulator.aggregated.process.nodes == 2
        assert accumulator.hosts == ["a", "b"]

    def test_default_types(self):
        assert DEFAULT_TYPES.contains(MetricType.CPU | MetricType.MEM | MetricType.NET | MetricType.PROCESS)
