"""
Trend Engine

Entry points for the synchronous aggregation pipeline:

    samples -> DeltaExtractor -> BucketGridBuilder -> BucketMerger -> TrendResult

plus the derived statistics (benchmark, growth, percentile, heatmap). Every
function is pure with respect to its inputs; configuration only supplies
defaults.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, Mapping, Optional, Sequence

from insights_core.models.snapshots import COUNT_METRICS, INTERACTIONS, MetricName, Sample
from insights_core.models.statistics import BenchmarkComparison, BenchmarkProfile, HeatmapResult
from insights_core.models.trend import Bucket, Period, ReportWindow, TrendResult, TrendStatus
from insights_core.services.benchmark import BenchmarkService
from insights_core.services.bucket_grid import BucketGridBuilder
from insights_core.services.bucket_merger import BucketMerger, engagement_rate
from insights_core.services.delta_extractor import DeltaExtractor
from insights_core.services.heatmap import HeatmapBinner, HeatmapPoint
from insights_core.services.metrics_aggregator import MetricsAggregator

logger = logging.getLogger(__name__)

TOTAL_KEYS = [metric.value for metric in MetricName if metric in COUNT_METRICS] + [INTERACTIONS]


def _max_observed(entities: Mapping[str, Sequence[Sample]]) -> Optional[datetime]:
    timestamps = [samples[-1].bucket_ts for samples in entities.values() if samples]
    return max(timestamps) if timestamps else None


def sum_buckets(buckets: Sequence[Bucket]) -> Dict[str, float]:
    """Sum count aggregates over a trend, with the overall engagement rate."""
    totals = {key: 0 for key in TOTAL_KEYS}
    for bucket in buckets:
        for key in TOTAL_KEYS:
            totals[key] += bucket.aggregate.get(key, 0)
    totals[MetricName.ENGAGEMENT_RATE.value] = engagement_rate(
        totals[INTERACTIONS], totals[MetricName.VIEWS.value]
    )
    return totals


def compute_trend(
    entities: Mapping[str, Sequence[Sample]],
    window: ReportWindow,
    timezone: Optional[str] = None,
) -> TrendResult:
    """
    Build the merged trend for a group of entities.

    Args:
        entities: Map of entity id to its sorted, deduplicated sample series.
            Series may start before the window; those points seed the deltas
            and are then dropped by the merger.
        window: Reporting window (its period selects hourly or daily buckets)
        timezone: IANA timezone for bucket labels

    Returns:
        TrendResult with status NO_DATA and no buckets when nothing was
        observed inside the window

    Raises:
        InputOrderingError: If any series is unsorted or has duplicates

    Example:
        window = get_date_range("week")
        trend = compute_trend({"p1": samples_p1, "p2": samples_p2}, window)
        trend.buckets[-1].aggregate["views"]
    """
    granularity = window.granularity
    grid_builder = BucketGridBuilder(timezone=timezone)
    merger = BucketMerger(grid_builder)

    deltas = DeltaExtractor.extract_many(entities)
    slots = grid_builder.build_for_window(window, _max_observed(entities))
    buckets, dropped = merger.merge(slots, deltas, granularity)

    if not buckets:
        logger.info(f"No data for {len(entities)} entities in window starting {window.start.isoformat()}")
        return TrendResult(
            status=TrendStatus.NO_DATA,
            granularity=granularity,
            dropped_points=dropped,
        )

    return TrendResult(
        status=TrendStatus.OK,
        granularity=granularity,
        buckets=buckets,
        grid_bounds=BucketGridBuilder.bounds(slots),
        totals=sum_buckets(buckets),
        dropped_points=dropped,
    )


def compute_benchmark(
    history: Sequence[Sample],
    metric: str,
    min_samples: Optional[int] = None,
) -> Optional[BenchmarkProfile]:
    """Benchmark profile of ``metric`` over all-time history, or None."""
    return BenchmarkService(min_samples=min_samples).compute_profile(history, metric)


def compare_to_benchmark(
    current_value: float,
    profile: Optional[BenchmarkProfile],
    period: Period,
    min_samples: Optional[int] = None,
) -> Optional[BenchmarkComparison]:
    return BenchmarkService(min_samples=min_samples).compare(current_value, profile, period)


def compute_growth(current: float, previous: float) -> float:
    return MetricsAggregator.calculate_growth(current, previous)


def compute_percentile(values: Sequence[float], percentile: float) -> Optional[float]:
    return MetricsAggregator.calculate_percentile(values, percentile)


def compute_heatmap(
    samples: Iterable[HeatmapPoint],
    metric: str = INTERACTIONS,
    timezone: Optional[str] = None,
) -> HeatmapResult:
    return HeatmapBinner(timezone=timezone).compute(samples, metric)

