"""Derived statistics models: benchmarks, heatmap cells, KPIs, follower series."""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from insights_core.config import settings

from .trend import TrendResult


class BenchmarkProfile(BaseModel):
    """Long-run average rate of one metric for an entity group."""

    model_config = ConfigDict(frozen=True)

    metric: str
    avg_rate_per_week: float
    avg_rate_per_month: float
    sample_count: int
    elapsed_days: float


class BenchmarkComparison(BaseModel):
    """Current value measured against a benchmark."""

    model_config = ConfigDict(frozen=True)

    current_value: float
    benchmark_value: float
    diff_percent: float

    @property
    def is_above(self) -> bool:
        return self.diff_percent > 0


class HeatmapCell(BaseModel):
    """Activity aggregated by day of week (0 = Sunday) and hour of day."""

    model_config = ConfigDict(frozen=True)

    day_of_week: int = Field(..., ge=0, le=6)
    hour_of_day: int = Field(..., ge=0, le=23)
    count: int = 0
    value_sum: float = 0.0
    intensity: Optional[float] = Field(None, description="None means no data")
    shade: Optional[int] = Field(None, description="0 = darkest shade")

    @property
    def has_data(self) -> bool:
        return self.count > 0


class HeatmapResult(BaseModel):
    """Full 7 x 24 heatmap."""

    model_config = ConfigDict(frozen=True)

    cells: List[HeatmapCell]
    max_value: float = 0.0

    @property
    def has_data(self) -> bool:
        return any(cell.has_data for cell in self.cells)

    def cell(self, day_of_week: int, hour_of_day: int) -> HeatmapCell:
        return self.cells[day_of_week * 24 + hour_of_day]

    def top_slots(self, n: Optional[int] = None) -> List[HeatmapCell]:
        """Best ``n`` cells (default HEATMAP_TOP_SLOTS) by value, ignoring cells without activity."""
        n = settings.HEATMAP_TOP_SLOTS if n is None else n
        active = [c for c in self.cells if c.value_sum > 0]
        active.sort(key=lambda c: (-c.value_sum, c.day_of_week, c.hour_of_day))
        return active[:n]


class MetricKpi(BaseModel):
    """Headline number for one metric in a report."""

    model_config = ConfigDict(frozen=True)

    metric: str
    total: float
    previous_total: float
    growth: float
    benchmark: Optional[BenchmarkComparison] = None


class InsightsReport(BaseModel):
    """Everything a dashboard page needs for one window."""

    model_config = ConfigDict(frozen=True)

    entity_count: int
    trend: TrendResult
    kpis: Dict[str, MetricKpi] = Field(default_factory=dict)
    heatmap: Optional[HeatmapResult] = None
    summaries: Dict[str, Dict[str, Optional[float]]] = Field(default_factory=dict)
    generated_at: datetime


class FollowerDay(BaseModel):
    """Follower count at the end of one local day."""

    model_config = ConfigDict(frozen=True)

    day: date
    label: str
    followers: int
    growth: int


class FollowerSummary(BaseModel):
    """Period-level follower statistics."""

    model_config = ConfigDict(frozen=True)

    current_followers: int
    period_growth: int
    growth_rate: float
    avg_daily_growth: float
    next_milestone: int
    previous_milestone: int
    milestone_progress: float
    days_to_milestone: Optional[int] = None
    daily: List[FollowerDay] = Field(default_factory=list)
