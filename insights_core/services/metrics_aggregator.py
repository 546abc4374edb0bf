"""
Metrics Aggregator

Derived statistics over merged trend series:
- Percentiles (nearest-rank, no interpolation)
- Summary statistics for a bucket series (count, min, max, avg, p95, p99)
- Growth rate between two periods
- Benchmark averages (long-run per-week / per-month rates)

Every division has a defined fallback; none of these raise on zero
denominators.
"""

import math
import logging
from typing import Dict, List, Optional, Sequence

from insights_core.config import settings
from insights_core.models.trend import Bucket

logger = logging.getLogger(__name__)


class MetricsAggregator:
    """Stateless statistics helpers for trend series."""

    @staticmethod
    def extract_bucket_values(buckets: Sequence[Bucket], metric: str) -> List[float]:
        """
        Extract one aggregate metric from every bucket.

        Args:
            buckets: Merged buckets
            metric: Aggregate key (e.g., "views", "interactions", "engagement_rate")

        Returns:
            One value per bucket; a bucket without the metric counts as 0

        Example:
            values = extract_bucket_values(trend.buckets, "views")  # [120.0, 40.0, ...]
        """
        return [float(bucket.aggregate.get(metric, 0)) for bucket in buckets]

    @staticmethod
    def calculate_percentile(values: Sequence[float], percentile: float) -> Optional[float]:
        """
        Calculate percentile using nearest-rank method.

        Args:
            values: List of numeric values
            percentile: Percentile to calculate, 0..100 (e.g., 95 for p95)

        Returns:
            Percentile value, or None for an empty list

        Raises:
            ValueError: If percentile is outside 0..100

        Example:
            values = [5, 10, 15, 20, 25, 30, 35, 40, 45, 50]
            calculate_percentile(values, 95)  # index ceil(9.5) - 1 = 9 -> 50
            calculate_percentile(values, 0)   # clamped to index 0 -> 5
        """
        if percentile < 0 or percentile > 100:
            raise ValueError(f"Percentile must be between 0 and 100, got {percentile}")

        if not values:
            return None

        sorted_values = sorted(values)

        # Calculate index using nearest-rank method
        index = (percentile / 100) * len(sorted_values)

        # Use ceiling for nearest-rank
        index = int(math.ceil(index)) - 1

        # Clamp to valid range
        index = max(0, min(index, len(sorted_values) - 1))

        return sorted_values[index]

    @staticmethod
    def calculate_summary_stats(values: Sequence[float]) -> Dict[str, Optional[float]]:
        """
        Calculate comprehensive summary statistics.

        Args:
            values: List of numeric values

        Returns:
            Dictionary with count, min, max, avg, p95, p99. For an empty
            list count is 0 and every statistic is None, so "no data" stays
            distinct from a series of zeros.

        Example:
            values = [10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
            calculate_summary_stats(values)
            # {"count": 10, "min": 10, "max": 100, "avg": 55.0, "p95": 100, "p99": 100}
        """
        if not values:
            return {
                "count": 0,
                "min": None,
                "max": None,
                "avg": None,
                "p95": None,
                "p99": None
            }

        return {
            "count": len(values),
            "min": min(values),
            "max": max(values),
            "avg": sum(values) / len(values),
            "p95": MetricsAggregator.calculate_percentile(values, 95),
            "p99": MetricsAggregator.calculate_percentile(values, 99)
        }

    @staticmethod
    def summarize_series(buckets: Sequence[Bucket], metric: str) -> Dict[str, Optional[float]]:
        """Summary statistics of one aggregate metric across a trend."""
        values = MetricsAggregator.extract_bucket_values(buckets, metric)
        summary = MetricsAggregator.calculate_summary_stats(values)
        logger.debug(f"Summarized {summary['count']} {metric} bucket values")
        return summary

    @staticmethod
    def calculate_growth(current: float, previous: float) -> float:
        """
        Percentage change from the previous period to the current one.

        Example:
            calculate_growth(150, 100)  # 50.0
            calculate_growth(5, 0)      # 100 (from nothing to something)
            calculate_growth(0, 0)      # 0 (stayed at zero)
        """
        if previous == 0:
            return 100.0 if current > 0 else 0.0
        return (current - previous) / previous * 100

    @staticmethod
    def benchmark_average(
        total: float,
        elapsed_days: float,
        unit_days: float,
        min_elapsed_days: Optional[float] = None,
    ) -> float:
        """
        Long-run average per unit of time.

        Args:
            total: All-time total of the metric
            elapsed_days: History span in days
            unit_days: 7 for per-week, 30 for per-month
            min_elapsed_days: Floor for the span (default 7) so a single day
                of history does not inflate the rate

        Returns:
            total / max(max(elapsed_days, floor) / unit_days, 1)

        Example:
            benchmark_average(700, 1, 7)    # 700.0 (span floored at 7 days)
            benchmark_average(700, 70, 7)   # 70.0
        """
        floor = settings.BENCHMARK_MIN_ELAPSED_DAYS if min_elapsed_days is None else min_elapsed_days
        if unit_days <= 0:
            raise ValueError(f"unit_days must be positive, got {unit_days}")
        span = max(elapsed_days, floor)
        return total / max(span / unit_days, 1)
