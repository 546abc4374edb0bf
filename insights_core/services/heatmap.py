"""
Heatmap Binner

Bins samples, delta points or post events into a 7 x 24 grid keyed by local
day of week (0 = Sunday) and hour of day. Each cell keeps a count and a value
sum; intensity is value / max value across cells.

A cell nobody landed in has intensity None ("no data"), which is different
from a cell that was hit but summed to zero (intensity 0.0).
"""

import logging
import math
from typing import Iterable, List, Optional, Union

import pytz

from insights_core.config import settings
from insights_core.models.snapshots import INTERACTIONS, DeltaPoint, MetricName, Sample
from insights_core.models.statistics import HeatmapCell, HeatmapResult

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24
SHADE_LEVELS = 6

HeatmapPoint = Union[Sample, DeltaPoint]


def day_of_week(weekday: int) -> int:
    """Convert Python's Monday=0 weekday to Sunday=0."""
    return (weekday + 1) % DAYS_PER_WEEK


def shade_for(intensity: Optional[float], levels: int = SHADE_LEVELS) -> Optional[int]:
    """
    Map an intensity onto a discrete colour scale.

    Returns:
        0 for the darkest shade (intensity 1.0) up to levels - 1 for the
        lightest; None when there is nothing to colour.

    Example:
        shade_for(1.0)   # 0
        shade_for(0.5)   # 2
        shade_for(None)  # None
    """
    if intensity is None or intensity <= 0:
        return None
    return min(int(math.floor((1 - intensity) * (levels - 1))), levels - 1)


class HeatmapBinner:
    """Builds day x hour heatmaps in the reporting timezone."""

    def __init__(self, timezone: Optional[str] = None):
        self.tz = pytz.timezone(timezone or settings.REPORT_TIMEZONE)

    @staticmethod
    def point_value(point: HeatmapPoint, metric: str) -> float:
        if metric == INTERACTIONS:
            return point.interactions
        return point.get(MetricName(metric))

    def compute(
        self,
        points: Iterable[HeatmapPoint],
        metric: str = INTERACTIONS,
    ) -> HeatmapResult:
        """
        Bin points into the heatmap.

        Args:
            points: Samples or delta points; their bucket_ts is the event time
            metric: Metric summed into value_sum ("interactions" or a
                MetricName value)

        Returns:
            HeatmapResult with all 168 cells ordered by (day, hour)

        Example:
            result = binner.compute(deltas, metric="interactions")
            result.cell(0, 21).value_sum   # Sunday 21:00
            result.top_slots(3)            # best posting slots
        """
        counts = [[0] * HOURS_PER_DAY for _ in range(DAYS_PER_WEEK)]
        sums = [[0.0] * HOURS_PER_DAY for _ in range(DAYS_PER_WEEK)]

        binned = 0
        for point in points:
            local = point.bucket_ts.astimezone(self.tz)
            day = day_of_week(local.weekday())
            counts[day][local.hour] += 1
            sums[day][local.hour] += self.point_value(point, metric)
            binned += 1

        max_value = max(max(row) for row in sums)

        cells: List[HeatmapCell] = []
        for day in range(DAYS_PER_WEEK):
            for hour in range(HOURS_PER_DAY):
                count = counts[day][hour]
                value = sums[day][hour]
                if count == 0:
                    intensity = None
                elif max_value > 0:
                    intensity = value / max_value
                else:
                    intensity = 0.0
                cells.append(
                    HeatmapCell(
                        day_of_week=day,
                        hour_of_day=hour,
                        count=count,
                        value_sum=value,
                        intensity=intensity,
                        shade=shade_for(intensity),
                    )
                )

        logger.debug(f"Binned {binned} points into heatmap (max {metric} {max_value})")
        return HeatmapResult(cells=cells, max_value=max_value)
