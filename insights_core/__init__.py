"""Delta and trend aggregation engine for social media performance metrics."""

from insights_core.services.trend_engine import (
    compare_to_benchmark,
    compute_benchmark,
    compute_growth,
    compute_heatmap,
    compute_percentile,
    compute_trend,
)
from insights_core.services.delta_extractor import extract_deltas

__version__ = "1.0.0"

__all__ = [
    "compare_to_benchmark",
    "compute_benchmark",
    "compute_growth",
    "compute_heatmap",
    "compute_percentile",
    "compute_trend",
    "extract_deltas",
]
