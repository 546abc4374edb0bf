"""
Delta Extractor

Converts an ordered series of cumulative snapshots for one entity into
per-interval increments:
- Count metrics: max(0, current - previous)
- Ratio metrics: passed through from the later snapshot
- First snapshot: its own raw values (cold start, no reading before it)

A downward correction (resync, deleted like) clamps to zero instead of
producing a negative increment, so corrections do not show up in trends.
"""

import logging
from typing import Dict, List, Mapping, Sequence

from insights_core.exceptions import InputOrderingError
from insights_core.models.snapshots import (
    COUNT_METRICS,
    RATIO_METRICS,
    DeltaPoint,
    MetricName,
    Sample,
)

logger = logging.getLogger(__name__)


class DeltaExtractor:
    """Turns cumulative snapshot series into increment series."""

    @staticmethod
    def validate_series(samples: Sequence[Sample]) -> None:
        """
        Check that a series belongs to one entity and is strictly increasing.

        Args:
            samples: Snapshot series for a single entity

        Raises:
            InputOrderingError: On mixed entities, out-of-order or duplicate
                timestamps. The series is never re-sorted here.
        """
        if not samples:
            return

        entity_id = samples[0].entity_id
        for index in range(1, len(samples)):
            current = samples[index]
            previous = samples[index - 1]

            if current.entity_id != entity_id:
                raise InputOrderingError(
                    f"Series for {entity_id} contains a sample for {current.entity_id} at index {index}",
                    entity_id=entity_id,
                    index=index,
                )

            if current.bucket_ts <= previous.bucket_ts:
                kind = "Duplicate" if current.bucket_ts == previous.bucket_ts else "Out-of-order"
                raise InputOrderingError(
                    f"{kind} timestamp {current.bucket_ts.isoformat()} for {entity_id} at index {index}",
                    entity_id=entity_id,
                    index=index,
                )

    @staticmethod
    def diff_metrics(
        current: Mapping[MetricName, float],
        previous: Mapping[MetricName, float],
    ) -> Dict[MetricName, float]:
        """
        Compute clamped increments between two snapshots.

        Args:
            current: Metrics of the later snapshot
            previous: Metrics of the earlier snapshot

        Returns:
            Increments for every count metric present in either snapshot,
            plus ratio metrics copied from ``current``. A missing count
            metric is read as 0.

        Example:
            diff_metrics({VIEWS: 140}, {VIEWS: 150})  # {VIEWS: 0}
        """
        deltas: Dict[MetricName, float] = {}

        for metric in set(current) | set(previous):
            if metric in RATIO_METRICS:
                continue
            if metric in COUNT_METRICS:
                deltas[metric] = max(0, current.get(metric, 0) - previous.get(metric, 0))

        for metric in RATIO_METRICS:
            if metric in current:
                deltas[metric] = current[metric]

        return deltas

    @staticmethod
    def extract(samples: Sequence[Sample]) -> List[DeltaPoint]:
        """
        Convert one entity's snapshot series into delta points.

        Args:
            samples: Chronologically sorted, deduplicated snapshots of a
                single entity

        Returns:
            One DeltaPoint per sample (same length as the input)

        Raises:
            InputOrderingError: If the precondition on ordering is violated

        Example:
            samples = [(t0, views=100), (t1, views=150), (t2, views=140)]
            [p.get(VIEWS) for p in extract(samples)]  # [100, 50, 0]
        """
        DeltaExtractor.validate_series(samples)

        if not samples:
            return []

        first = samples[0]
        points = [
            DeltaPoint(
                entity_id=first.entity_id,
                bucket_ts=first.bucket_ts,
                metrics=dict(first.metrics),
            )
        ]

        clamped = 0
        for previous, current in zip(samples, samples[1:]):
            deltas = DeltaExtractor.diff_metrics(current.metrics, previous.metrics)
            clamped += sum(
                1
                for metric in COUNT_METRICS
                if current.get(metric) < previous.get(metric)
            )
            points.append(
                DeltaPoint(
                    entity_id=current.entity_id,
                    bucket_ts=current.bucket_ts,
                    metrics=deltas,
                )
            )

        if clamped:
            logger.debug(
                f"Clamped {clamped} downward correction(s) to zero for entity {first.entity_id}"
            )

        return points

    @staticmethod
    def extract_many(series_by_entity: Mapping[str, Sequence[Sample]]) -> Dict[str, List[DeltaPoint]]:
        """
        Extract deltas for several entities.

        Args:
            series_by_entity: Map of entity id to its sorted snapshot series

        Returns:
            Map of entity id to its delta series
        """
        return {
            entity_id: DeltaExtractor.extract(samples)
            for entity_id, samples in series_by_entity.items()
        }


def extract_deltas(samples: Sequence[Sample]) -> List[DeltaPoint]:
    """Module-level shortcut for :meth:`DeltaExtractor.extract`."""
    return DeltaExtractor.extract(samples)
