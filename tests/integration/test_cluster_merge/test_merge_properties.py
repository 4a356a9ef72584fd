"""
Integration tests for the algebraic properties of cluster merging.

Builds realistic multi-node snapshots and checks that merge order and
grouping do not change summed results, that merging is not idempotent, and
that interval series conserve their totals when realigned.
"""

import copy
from datetime import timedelta

import pytest

from clustermetrics.aggregation import merge_partitioned, merge_snapshots
from clustermetrics.models import (
    APIMetrics,
    APIStats,
    DiskMetric,
    Metrics,
    RealtimeMetrics,
    SegmentedAPIMetrics,
    TimedAction,
)


def api_snapshot(host, t0, offset_minutes, requests, latencies):
    """A node snapshot with API stats and a day series shifted by ``offset_minutes``."""
    stats = APIStats(
        nodes=1,
        requests=requests,
        request_time_secs=sum(latencies),
        request_time_secs_min=min(latencies),
        request_time_secs_max=max(latencies),
    )
    series = SegmentedAPIMetrics(
        interval=60,
        first_time=t0 + timedelta(minutes=offset_minutes),
        segments=[APIStats(nodes=1, requests=requests), APIStats(nodes=1, requests=1)],
    )
    metrics = Metrics(
        api=APIMetrics(
            nodes=1,
            last_minute_api={"GetObject": stats},
            last_day_api={"GetObject": series},
        )
    )
    snapshot = RealtimeMetrics(hosts=[host], aggregated=metrics)
    snapshot.by_host[host] = copy.deepcopy(metrics)
    return snapshot


@pytest.fixture
def cluster(t0):
    return [
        api_snapshot("node-1", t0, 0, 3, [0.125, 0.5, 0.25]),
        api_snapshot("node-2", t0, 1, 2, [0.0625, 0.375]),
        api_snapshot("node-3", t0, 3, 4, [0.25, 0.25, 0.875, 0.625]),
    ]


@pytest.mark.integration
class TestMergeProperties:
    """Properties that hold for any consistent set of snapshots."""

    def test_associativity(self, cluster):
        a, b, c = (copy.deepcopy(s) for s in cluster)
        left = RealtimeMetrics()
        left.merge(a)
        left.merge(b)
        left.merge(c)

        a, b, c = (copy.deepcopy(s) for s in cluster)
        inner = RealtimeMetrics()
        inner.merge(b)
        inner.merge(c)
        right = RealtimeMetrics()
        right.merge(a)
        right.merge(inner)

        assert left.aggregated.api == right.aggregated.api
        assert left.hosts == right.hosts

    def test_commutativity_of_counters(self, cluster):
        forward = merge_snapshots(copy.deepcopy(cluster))
        backward = merge_snapshots(copy.deepcopy(list(reversed(cluster))))

        f_stats = forward.aggregated.api.last_minute_api["GetObject"]
        b_stats = backward.aggregated.api.last_minute_api["GetObject"]
        assert f_stats.requests == b_stats.requests
        assert f_stats.request_time_secs == pytest.approx(b_stats.request_time_secs)
        assert forward.aggregated.api.last_day_total().requests == backward.aggregated.api.last_day_total().requests

    def test_not_idempotent(self, cluster):
        snapshot = cluster[0]
        once = merge_snapshots([snapshot])
        twice = merge_snapshots([snapshot, snapshot])

        assert twice.aggregated.api.nodes == 2 * once.aggregated.api.nodes
        assert (
            twice.aggregated.api.last_minute_api["GetObject"].requests
            == 2 * once.aggregated.api.last_minute_api["GetObject"].requests
        )
        assert twice.hosts == ["node-1", "node-1"]

    def test_min_max_bound_every_sample(self, cluster):
        result = merge_snapshots(cluster).aggregated.api.last_minute_api["GetObject"]
        samples = [0.125, 0.5, 0.25, 0.0625, 0.375, 0.25, 0.25, 0.875, 0.625]

        assert result.request_time_secs_min == min(samples)
        assert result.request_time_secs_max == max(samples)
        assert all(result.request_time_secs_min <= s <= result.request_time_secs_max for s in samples)

    def test_segmented_conservation_and_span(self, cluster, t0):
        expected = sum(
            s.aggregated.api.last_day_api["GetObject"].total().requests for s in cluster
        )
        series = merge_snapshots(cluster).aggregated.api.last_day_api["GetObject"]

        assert series.total().requests == expected
        assert series.first_time == t0
        # node-3 covers minutes 3 and 4, so the union spans five buckets.
        assert series.end_time() == t0 + timedelta(minutes=5)
        assert [s.requests for s in series.segments] == [3, 3, 1, 4, 1]

    def test_partitioned_equals_sequential(self, cluster):
        sequential = merge_snapshots(copy.deepcopy(cluster))
        partitioned = merge_partitioned(copy.deepcopy(cluster), partitions=2)

        assert partitioned.aggregated.api.last_minute_api == sequential.aggregated.api.last_minute_api
        assert (
            partitioned.aggregated.api.last_day_total().requests
            == sequential.aggregated.api.last_day_total().requests
        )

    def test_identity_collapse_is_monotonic(self):
        metric = DiskMetric(n_disks=1, pool_idx=0, set_idx=0, disk_idx=0)
        for pool in (1, 0, 0, 0):
            metric.merge(DiskMetric(n_disks=1, pool_idx=pool, set_idx=0, disk_idx=0))
            assert metric.pool_idx is None


@pytest.mark.integration
class TestConcreteScenarios:
    """Worked examples of the merge rules."""

    def test_timed_action_average(self):
        action = TimedAction(count=1, acc_time=100, min_time=100, max_time=100)
        action.merge(TimedAction(count=2, acc_time=300, min_time=100, max_time=200))

        assert (action.count, action.acc_time, action.avg()) == (3, 400, 133)

    def test_same_timeline_series(self, t0):
        a = SegmentedAPIMetrics(interval=60, first_time=t0, segments=[APIStats(requests=5), APIStats(requests=7)])
        a.merge(SegmentedAPIMetrics(interval=60, first_time=t0, segments=[APIStats(requests=3), APIStats(requests=2)]))

        assert [s.requests for s in a.segments] == [8, 9]

    def test_shifted_series(self, t0):
        a = SegmentedAPIMetrics(interval=60, first_time=t0, segments=[APIStats(requests=1), APIStats(requests=2)])
        a.merge(
            SegmentedAPIMetrics(
                interval=60,
                first_time=t0 + timedelta(seconds=60),
                segments=[APIStats(requests=10), APIStats(requests=20)],
            )
        )

        assert [s.requests for s in a.segments] == [1, 12, 20]

    def test_disk_pools_collapse(self):
        metric = DiskMetric(n_disks=1, pool_idx=2)
        metric.merge(DiskMetric(n_disks=1, pool_idx=3))

        assert metric.pool_idx is None
        assert metric.n_disks == 2

    def test_empty_api_window_replaced(self, t0):
        t2 = t0 + timedelta(minutes=5)
        stats = APIStats(start_time=t0, requests=0)
        stats.merge(APIStats(start_time=t2, requests=5))

        assert stats.start_time == t2
