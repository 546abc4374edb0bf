"""Pydantic models for snapshots, trends and derived statistics."""

from .snapshots import (
    COUNT_METRICS,
    INTERACTION_METRICS,
    INTERACTIONS,
    RATIO_METRICS,
    DeltaPoint,
    MetricName,
    Sample,
    parse_timestamp,
)
from .trend import (
    Bucket,
    BucketContribution,
    Granularity,
    GridBounds,
    GridSlot,
    Period,
    ReportWindow,
    TrendResult,
    TrendStatus,
)
from .statistics import (
    BenchmarkComparison,
    BenchmarkProfile,
    FollowerDay,
    FollowerSummary,
    HeatmapCell,
    HeatmapResult,
    InsightsReport,
    MetricKpi,
)

__all__ = [
    "COUNT_METRICS",
    "INTERACTION_METRICS",
    "INTERACTIONS",
    "RATIO_METRICS",
    "DeltaPoint",
    "MetricName",
    "Sample",
    "parse_timestamp",
    "Bucket",
    "BucketContribution",
    "Granularity",
    "GridBounds",
    "GridSlot",
    "Period",
    "ReportWindow",
    "TrendResult",
    "TrendStatus",
    "BenchmarkComparison",
    "BenchmarkProfile",
    "FollowerDay",
    "FollowerSummary",
    "HeatmapCell",
    "HeatmapResult",
    "InsightsReport",
    "MetricKpi",
]
