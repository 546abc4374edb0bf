"""
Benchmark Service

Computes long-run comparison baselines from an entity group's full history.
A benchmark is only produced when enough entities back it; otherwise the
result is absent (None), never a misleading zero.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from insights_core.config import settings
from insights_core.models.snapshots import INTERACTIONS, RATIO_METRICS, MetricName, Sample
from insights_core.models.statistics import BenchmarkComparison, BenchmarkProfile
from insights_core.models.trend import Period
from insights_core.services.metrics_aggregator import MetricsAggregator

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60
POSTS = "posts"


class BenchmarkService:
    """Builds BenchmarkProfiles and compares current values against them."""

    def __init__(
        self,
        min_samples: Optional[int] = None,
        week_unit_days: Optional[float] = None,
        month_unit_days: Optional[float] = None,
    ):
        self.min_samples = settings.BENCHMARK_MIN_SAMPLES if min_samples is None else min_samples
        self.week_unit_days = week_unit_days or settings.WEEK_UNIT_DAYS
        self.month_unit_days = month_unit_days or settings.MONTH_UNIT_DAYS

    @staticmethod
    def _latest_and_origin(history: Sequence[Sample]) -> Dict[str, Tuple[Sample, datetime]]:
        """Latest sample and first-seen timestamp of every entity."""
        by_entity: Dict[str, List[Sample]] = defaultdict(list)
        for sample in history:
            by_entity[sample.entity_id].append(sample)

        result = {}
        for entity_id, samples in by_entity.items():
            latest = max(samples, key=lambda s: s.bucket_ts)
            origin = min(s.bucket_ts for s in samples)
            result[entity_id] = (latest, origin)
        return result

    @staticmethod
    def _elapsed_days(origins: Sequence[datetime]) -> float:
        if not origins:
            return 0.0
        return (max(origins) - min(origins)).total_seconds() / SECONDS_PER_DAY

    def _profile(self, metric: str, total: float, elapsed_days: float, sample_count: int) -> BenchmarkProfile:
        return BenchmarkProfile(
            metric=metric,
            avg_rate_per_week=MetricsAggregator.benchmark_average(total, elapsed_days, self.week_unit_days),
            avg_rate_per_month=MetricsAggregator.benchmark_average(total, elapsed_days, self.month_unit_days),
            sample_count=sample_count,
            elapsed_days=elapsed_days,
        )

    def compute_profile(self, history: Sequence[Sample], metric: str) -> Optional[BenchmarkProfile]:
        """
        Build the benchmark for one metric.

        Args:
            history: All-time samples of the entity group (any order)
            metric: A MetricName value or "interactions"

        Returns:
            BenchmarkProfile, or None when the group has fewer than
            min_samples entities (including no history at all)

        Example:
            profile = service.compute_profile(history, "views")
            profile.avg_rate_per_week  # all-time views / weeks of history
        """
        entities = self._latest_and_origin(history)
        sample_count = len(entities)

        if sample_count == 0 or sample_count < self.min_samples:
            logger.debug(
                f"Benchmark for {metric} unavailable: {sample_count} entities "
                f"(minimum {self.min_samples})"
            )
            return None

        latest = [sample for sample, _ in entities.values()]
        elapsed_days = self._elapsed_days([origin for _, origin in entities.values()])

        if metric == INTERACTIONS:
            total = sum(sample.interactions for sample in latest)
            return self._profile(metric, total, elapsed_days, sample_count)

        metric_name = MetricName(metric)
        if metric_name in RATIO_METRICS:
            # Rates do not accumulate; the baseline is the all-time mean
            mean = sum(sample.get(metric_name) for sample in latest) / sample_count
            return BenchmarkProfile(
                metric=metric,
                avg_rate_per_week=mean,
                avg_rate_per_month=mean,
                sample_count=sample_count,
                elapsed_days=elapsed_days,
            )

        total = sum(sample.get(metric_name) for sample in latest)
        return self._profile(metric, total, elapsed_days, sample_count)

    def compute_posting_profile(self, history: Sequence[Sample]) -> Optional[BenchmarkProfile]:
        """Average number of posts per week / month, from entity first-seen times."""
        entities = self._latest_and_origin(history)
        sample_count = len(entities)
        if sample_count == 0 or sample_count < self.min_samples:
            return None

        elapsed_days = self._elapsed_days([origin for _, origin in entities.values()])
        return self._profile(POSTS, sample_count, elapsed_days, sample_count)

    def compare(
        self,
        current_value: float,
        profile: Optional[BenchmarkProfile],
        period: Period,
    ) -> Optional[BenchmarkComparison]:
        """
        Compare a current-period value with its benchmark.

        Returns:
            None when the profile is absent, backed by too few entities, or
            the benchmark value is 0. Otherwise the relative difference.
        """
        if profile is None or profile.sample_count < self.min_samples:
            return None

        benchmark_value = (
            profile.avg_rate_per_week if Period(period) == Period.WEEK else profile.avg_rate_per_month
        )
        if benchmark_value == 0:
            return None

        diff = (current_value - benchmark_value) / benchmark_value * 100
        return BenchmarkComparison(
            current_value=current_value,
            benchmark_value=benchmark_value,
            diff_percent=diff,
        )
