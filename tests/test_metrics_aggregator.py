"""Unit tests for MetricsAggregator."""
import pytest

from insights_core.models.trend import Bucket
from insights_core.services.metrics_aggregator import MetricsAggregator

from conftest import SUNDAY

VALUES = [5, 10, 15, 20, 25, 30, 35, 40, 45, 50]


class TestPercentile:
    """Nearest-rank percentile."""

    def test_p95_of_ten_values(self):
        assert MetricsAggregator.calculate_percentile(VALUES, 95) == 50

    def test_p50(self):
        assert MetricsAggregator.calculate_percentile(VALUES, 50) == 25

    def test_p100_is_max(self):
        assert MetricsAggregator.calculate_percentile(VALUES, 100) == 50

    def test_p0_is_min(self):
        assert MetricsAggregator.calculate_percentile(VALUES, 0) == 5

    def test_unsorted_input(self):
        assert MetricsAggregator.calculate_percentile([50, 5, 25, 10], 50) == 10

    def test_single_value(self):
        assert MetricsAggregator.calculate_percentile([7], 99) == 7

    def test_empty_returns_none(self):
        assert MetricsAggregator.calculate_percentile([], 95) is None

    @pytest.mark.parametrize("percentile", [-1, 100.5, 150])
    def test_out_of_range_raises(self, percentile):
        with pytest.raises(ValueError):
            MetricsAggregator.calculate_percentile(VALUES, percentile)


class TestSummaryStats:

    def test_summary_stats(self):
        stats = MetricsAggregator.calculate_summary_stats([10, 20, 30, 40, 50, 60, 70, 80, 90, 100])

        assert stats == {"count": 10, "min": 10, "max": 100, "avg": 55.0, "p95": 100, "p99": 100}

    def test_summary_stats_empty(self):
        stats = MetricsAggregator.calculate_summary_stats([])

        assert stats["count"] == 0
        assert stats["avg"] is None

    def test_summarize_series(self):
        buckets = [
            Bucket(key=(0, i), timestamp=SUNDAY, label=str(i), aggregate={"views": v})
            for i, v in enumerate([4, 8, 2])
        ]

        stats = MetricsAggregator.summarize_series(buckets, "views")

        assert stats["count"] == 3
        assert stats["max"] == 8
        assert MetricsAggregator.extract_bucket_values(buckets, "likes") == [0.0, 0.0, 0.0]


class TestGrowth:

    def test_growth(self):
        assert MetricsAggregator.calculate_growth(150, 100) == pytest.approx(50.0)
        assert MetricsAggregator.calculate_growth(50, 100) == pytest.approx(-50.0)

    def test_growth_from_zero(self):
        assert MetricsAggregator.calculate_growth(5, 0) == 100
        assert MetricsAggregator.calculate_growth(0, 0) == 0


class TestBenchmarkAverage:

    def test_short_history_floored_at_seven_days(self):
        assert MetricsAggregator.benchmark_average(700, 1, 7) == pytest.approx(700)

    def test_long_history(self):
        assert MetricsAggregator.benchmark_average(700, 70, 7) == pytest.approx(70)

    def test_month_unit_at_least_one(self):
        assert MetricsAggregator.benchmark_average(300, 10, 30) == pytest.approx(300)
        assert MetricsAggregator.benchmark_average(300, 90, 30) == pytest.approx(100)

    def test_invalid_unit_raises(self):
        with pytest.raises(ValueError):
            MetricsAggregator.benchmark_average(10, 10, 0)
