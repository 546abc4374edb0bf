"""Snapshot and delta models.

A Sample is a cumulative (all-time-to-date) reading for one entity at one
bucket timestamp. A DeltaPoint has the same shape but holds the increment
since the previous reading.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MetricName(str, Enum):
    """Closed set of recognized metric names."""

    VIEWS = "views"
    LIKES = "likes"
    REPLIES = "replies"
    REPOSTS = "reposts"
    QUOTES = "quotes"
    FOLLOWERS_COUNT = "followers_count"
    PROFILE_VIEWS = "profile_views"
    ENGAGEMENT_RATE = "engagement_rate"


# Cumulative counters, converted to increments
COUNT_METRICS = frozenset({
    MetricName.VIEWS,
    MetricName.LIKES,
    MetricName.REPLIES,
    MetricName.REPOSTS,
    MetricName.QUOTES,
    MetricName.FOLLOWERS_COUNT,
    MetricName.PROFILE_VIEWS,
})

# Point-in-time scores, never differenced
RATIO_METRICS = frozenset({MetricName.ENGAGEMENT_RATE})

# Components of the derived "interactions" count
INTERACTION_METRICS = (
    MetricName.LIKES,
    MetricName.REPLIES,
    MetricName.REPOSTS,
    MetricName.QUOTES,
)

INTERACTIONS = "interactions"

MetricValue = Union[int, float]


def ensure_aware(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parse a storage timestamp into an aware datetime.

    Accepts ISO 8601 strings with a "Z" suffix and Postgres-style values
    such as "2026-01-13 09:00:00+00".

    Example:
        parse_timestamp("2026-01-13 09:00:00+00")
        # datetime(2026, 1, 13, 9, 0, tzinfo=timezone.utc)
    """
    if isinstance(value, datetime):
        return ensure_aware(value)

    text = value.strip().replace(" ", "T", 1).replace("Z", "+00:00")
    # "+00" -> "+00:00"
    if len(text) >= 3 and text[-3] in "+-" and text[-2:].isdigit():
        text = text + ":00"
    return ensure_aware(datetime.fromisoformat(text))


class _MetricPoint(BaseModel):
    """Shared shape of samples and deltas."""

    model_config = ConfigDict(frozen=True)

    entity_id: str = Field(..., description="Post or account identifier")
    bucket_ts: datetime = Field(..., description="Bucket timestamp (aware)")
    metrics: Dict[MetricName, MetricValue] = Field(default_factory=dict)

    @field_validator("bucket_ts")
    @classmethod
    def _aware_timestamp(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @field_validator("metrics")
    @classmethod
    def _valid_metric_values(cls, value: Dict[MetricName, MetricValue]) -> Dict[MetricName, MetricValue]:
        for metric, amount in value.items():
            if amount < 0:
                raise ValueError(f"Metric {metric.value} must be non-negative, got {amount}")
            if metric in COUNT_METRICS and int(amount) != amount:
                raise ValueError(f"Count metric {metric.value} must be an integer, got {amount}")
        return {
            metric: (int(amount) if metric in COUNT_METRICS else float(amount))
            for metric, amount in value.items()
        }

    def get(self, metric: MetricName, default: MetricValue = 0) -> MetricValue:
        """Return a metric value, treating a missing metric as ``default``."""
        return self.metrics.get(metric, default)

    @property
    def interactions(self) -> int:
        """likes + replies + reposts + quotes."""
        return sum(self.get(m) for m in INTERACTION_METRICS)


class Sample(_MetricPoint):
    """Cumulative metric snapshot for one entity at ``bucket_ts``."""

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        entity_field: str = "entity_id",
        timestamp_field: str = "bucket_ts",
    ) -> "Sample":
        """
        Build a Sample from a raw storage row.

        Only recognized metric columns are kept; every other column (ids,
        text, tags, ...) is ignored. Null metric values are skipped.

        Example:
            row = {
                "workspace_threads_post_id": "p1",
                "bucket_ts": "2026-01-13 09:00:00+00",
                "views": 120, "likes": 4, "caption": "hello",
            }
            Sample.from_row(row, entity_field="workspace_threads_post_id")
        """
        known = {m.value for m in MetricName}
        metrics = {
            MetricName(key): value
            for key, value in row.items()
            if key in known and value is not None
        }
        return cls(
            entity_id=str(row[entity_field]),
            bucket_ts=parse_timestamp(row[timestamp_field]),
            metrics=metrics,
        )


class DeltaPoint(_MetricPoint):
    """Non-negative increment for one entity, aligned to a sample timestamp."""

    @property
    def ratio(self) -> Optional[float]:
        """Passed-through engagement rate, if the source sample carried one."""
        return self.metrics.get(MetricName.ENGAGEMENT_RATE)
