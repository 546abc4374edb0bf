"""
Bucket Merger

Assigns every entity's delta points to the shared bucket grid and sums them:
- aggregate[m] += delta[m] for count metrics (plus derived interactions)
- one contribution per entity per bucket, for drill-down tooltips
- contributions ordered by views descending (ties by entity id)
- aggregate engagement rate = interactions / views * 100 over the bucket,
  which is not the mean of the per-entity rates

Points that fall outside every bucket are dropped and counted.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from insights_core.models.snapshots import (
    COUNT_METRICS,
    INTERACTIONS,
    DeltaPoint,
    MetricName,
)
from insights_core.models.trend import Bucket, BucketContribution, BucketKey, Granularity, GridSlot
from insights_core.services.bucket_grid import BucketGridBuilder

logger = logging.getLogger(__name__)

ENGAGEMENT_RATE = MetricName.ENGAGEMENT_RATE.value
VIEWS = MetricName.VIEWS.value


def engagement_rate(interactions: float, views: float) -> float:
    """interactions / views as a percentage, 0 when there are no views."""
    if views > 0:
        return interactions / views * 100
    return 0.0


class BucketMerger:
    """Merges per-entity delta series onto a bucket grid."""

    def __init__(self, grid_builder: Optional[BucketGridBuilder] = None):
        self.grid_builder = grid_builder or BucketGridBuilder()

    @staticmethod
    def point_values(point: DeltaPoint) -> Dict[str, float]:
        """Count-metric deltas of a point keyed by metric name, plus interactions."""
        values = {
            metric.value: amount
            for metric, amount in point.metrics.items()
            if metric in COUNT_METRICS
        }
        values[INTERACTIONS] = point.interactions
        return values

    @staticmethod
    def _contribution(entity_id: str, values: Dict[str, float], ratio) -> BucketContribution:
        if ratio is None:
            ratio = engagement_rate(values.get(INTERACTIONS, 0), values.get(VIEWS, 0))
        return BucketContribution(entity_id=entity_id, metrics=values, engagement_rate=ratio)

    def merge(
        self,
        slots: Sequence[GridSlot],
        deltas_by_entity: Mapping[str, Sequence[DeltaPoint]],
        granularity: Granularity,
    ) -> Tuple[List[Bucket], int]:
        """
        Merge delta series into the grid.

        Args:
            slots: Grid produced by BucketGridBuilder (may be empty)
            deltas_by_entity: Map of entity id to its delta points
            granularity: Granularity the grid was built with

        Returns:
            Tuple of (buckets, dropped_point_count)

        Example:
            buckets, dropped = merger.merge(slots, {"p1": deltas}, Granularity.HOUR)
            buckets[0].aggregate["views"]           # summed across posts
            buckets[0].contributions[0].entity_id   # top post in that hour
        """
        if not slots:
            dropped = sum(len(points) for points in deltas_by_entity.values())
            return [], dropped

        window_start: datetime = slots[0].timestamp
        slot_by_key: Dict[BucketKey, GridSlot] = {slot.key: slot for slot in slots}

        aggregates: Dict[BucketKey, Dict[str, float]] = {
            slot.key: defaultdict(float) for slot in slots
        }
        contributions: Dict[BucketKey, Dict[str, Dict[str, float]]] = defaultdict(dict)
        ratios: Dict[BucketKey, Dict[str, float]] = defaultdict(dict)
        dropped = 0

        for entity_id, points in deltas_by_entity.items():
            for point in points:
                key = self.grid_builder.bucket_key(window_start, granularity, point.bucket_ts)
                if key is None or key not in slot_by_key:
                    dropped += 1
                    continue

                values = self.point_values(point)
                bucket_total = aggregates[key]
                for name, amount in values.items():
                    bucket_total[name] += amount

                # Several points of one entity in the same bucket add up
                entity_values = contributions[key].setdefault(entity_id, {})
                for name, amount in values.items():
                    entity_values[name] = entity_values.get(name, 0) + amount

                if point.ratio is not None:
                    ratios[key][entity_id] = point.ratio

        buckets: List[Bucket] = []
        for slot in slots:
            total = dict(aggregates[slot.key])
            total.setdefault(VIEWS, 0)
            total.setdefault(INTERACTIONS, 0)
            total[ENGAGEMENT_RATE] = engagement_rate(total[INTERACTIONS], total[VIEWS])

            entity_rows = [
                self._contribution(entity_id, values, ratios[slot.key].get(entity_id))
                for entity_id, values in contributions.get(slot.key, {}).items()
            ]
            entity_rows.sort(key=lambda c: (-c.views, c.entity_id))

            buckets.append(
                Bucket(
                    key=slot.key,
                    timestamp=slot.timestamp,
                    label=slot.label,
                    date_label=slot.date_label,
                    contributions=entity_rows,
                    aggregate=total,
                )
            )

        if dropped:
            logger.debug(f"Dropped {dropped} delta point(s) outside the bucket grid")

        return buckets, dropped
