"""
Unit tests for scalar accumulators.
"""

import pytest

from clustermetrics.models import DiskAction, DiskIOStats, SensorMetrics, TimedAction


@pytest.mark.unit
class TestTimedAction:
    """Test cases for TimedAction merging and averages."""

    def test_counts_and_average(self):
        """Two actions sum their counters and average over the total count."""
        action = TimedAction(count=1, acc_time=100, min_time=100, max_time=100)
        action.merge(TimedAction(count=2, acc_time=300, min_time=120, max_time=180))

        assert action.count == 3
        assert action.acc_time == 400
        assert action.avg() == 133

    def test_min_max_across_merges(self):
        action = TimedAction(count=1, acc_time=50, min_time=50, max_time=50)
        action.merge(TimedAction(count=1, acc_time=10, min_time=10, max_time=10))
        action.merge(TimedAction(count=1, acc_time=90, min_time=90, max_time=90))

        assert action.min_time == 10
        assert action.max_time == 90

    def test_empty_receiver_adopts_bounds(self):
        """A zero receiver does not contribute its zero minimum."""
        action = TimedAction()
        action.merge(TimedAction(count=2, acc_time=40, min_time=15, max_time=25))

        assert action.min_time == 15
        assert action.max_time == 25

    def test_empty_other_is_identity(self):
        action = TimedAction(count=2, acc_time=40, min_time=15, max_time=25, bytes=8)
        action.merge(TimedAction())
        action.merge(None)

        assert action == TimedAction(count=2, acc_time=40, min_time=15, max_time=25, bytes=8)

    def test_averages_of_empty(self):
        assert TimedAction().avg() == 0
        assert TimedAction().avg_bytes() == 0

    def test_avg_bytes(self):
        assert TimedAction(count=4, bytes=10).avg_bytes() == 2

    def test_add_alias(self):
        action = TimedAction(count=1, acc_time=10, min_time=10, max_time=10)
        action.add(TimedAction(count=1, acc_time=20, min_time=20, max_time=20))
        assert action.count == 2


@pytest.mark.unit
class TestDiskAction:
    """Test cases for drive operation timings."""

    def test_merge_sums_errors(self):
        action = DiskAction(count=1, acc_time=0.5, min_time=0.5, max_time=0.5, availability_errs=1)
        action.merge(DiskAction(count=3, acc_time=1.5, min_time=0.2, max_time=0.9, timeouts=2))

        assert action.count == 4
        assert action.acc_time == pytest.approx(2.0)
        assert action.min_time == pytest.approx(0.2)
        assert action.max_time == pytest.approx(0.9)
        assert action.availability_errs == 1
        assert action.timeouts == 2
        assert action.avg() == pytest.approx(0.5)

    def test_error_counters_without_operations(self):
        """Failed operations are counted even when nothing completed."""
        action = DiskAction()
        action.merge(DiskAction(availability_errs=2, timeouts=1))

        assert action.count == 0
        assert action.availability_errs == 2
        assert action.timeouts == 1


@pytest.mark.unit
class TestDiskIOStats:
    def test_all_counters_summed(self):
        stats = DiskIOStats(n=1, read_ios=10, write_ios=5, flush_ticks=3)
        stats.merge(DiskIOStats(n=1, read_ios=2, write_ios=1, flush_ticks=4))

        assert stats.n == 2
        assert stats.read_ios == 12
        assert stats.write_ios == 6
        assert stats.flush_ticks == 7


@pytest.mark.unit
class TestSensorMetrics:
    def test_temperatures(self):
        sensors = SensorMetrics(count=1, total_temp=40.0, min_temp=40.0, max_temp=40.0)
        sensors.merge(SensorMetrics(count=1, total_temp=60.0, min_temp=60.0, max_temp=60.0, exceeds_critical=1))

        assert sensors.count == 2
        assert sensors.min_temp == 40.0
        assert sensors.max_temp == 60.0
        assert sensors.avg_temp() == pytest.approx(50.0)
        assert sensors.exceeds_critical == 1
