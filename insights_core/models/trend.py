"""Trend models: reporting windows, bucket grid and merged trend output."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .snapshots import MetricName


class Period(str, Enum):
    """Reporting period."""
    WEEK = "week"
    MONTH = "month"


class Granularity(str, Enum):
    """Bucket size."""
    HOUR = "hour"
    DAY = "day"

    @classmethod
    def for_period(cls, period: Period) -> "Granularity":
        """Week reports use hourly buckets, month reports daily buckets."""
        return cls.HOUR if Period(period) == Period.WEEK else cls.DAY


class TrendStatus(str, Enum):
    """Whether a trend has any measured buckets."""
    OK = "ok"
    NO_DATA = "no_data"


BucketKey = Union[Tuple[int, int], Tuple[int]]


class ReportWindow(BaseModel):
    """Calendar-aligned reporting window."""

    model_config = ConfigDict(frozen=True)

    period: Period
    start: datetime = Field(..., description="Window start (Sunday 00:00 or 1st of month)")
    end: datetime = Field(..., description="Last day of the window (inclusive)")
    label: str = ""
    offset: int = 0

    @property
    def granularity(self) -> Granularity:
        return Granularity.for_period(self.period)


class GridBounds(BaseModel):
    """First and last bucket timestamp of a grid."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime


class GridSlot(BaseModel):
    """Empty bucket placeholder produced by the grid builder."""

    model_config = ConfigDict(frozen=True)

    key: BucketKey
    timestamp: datetime
    label: str
    date_label: Optional[str] = None


class BucketContribution(BaseModel):
    """One entity's share of a bucket, for drill-down tooltips."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    metrics: Dict[str, float] = Field(default_factory=dict)
    engagement_rate: float = 0.0

    @property
    def views(self) -> float:
        return self.metrics.get(MetricName.VIEWS.value, 0)


class Bucket(BaseModel):
    """Merged bucket: aggregate across entities plus per-entity detail."""

    model_config = ConfigDict(frozen=True)

    key: BucketKey
    timestamp: datetime
    label: str
    date_label: Optional[str] = None
    contributions: List[BucketContribution] = Field(default_factory=list)
    aggregate: Dict[str, float] = Field(default_factory=dict)

    @property
    def entity_count(self) -> int:
        return len(self.contributions)

    @property
    def top_contributor(self) -> Optional[BucketContribution]:
        return self.contributions[0] if self.contributions else None


class TrendResult(BaseModel):
    """Output of compute_trend.

    ``status`` is NO_DATA when there is nothing to plot; callers render a
    "no data yet" state rather than a zero-filled series.
    """

    model_config = ConfigDict(frozen=True)

    status: TrendStatus
    granularity: Granularity
    buckets: List[Bucket] = Field(default_factory=list)
    grid_bounds: Optional[GridBounds] = None
    totals: Dict[str, float] = Field(default_factory=dict)
    dropped_points: int = 0

    @property
    def has_data(self) -> bool:
        return self.status == TrendStatus.OK
