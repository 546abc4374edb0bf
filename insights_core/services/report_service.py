"""
Report Service

Async orchestration around the synchronous trend pipeline:
1. Fetch samples back to the period before the comparison window, and
   all-time history, concurrently
2. Group, sort and deduplicate each entity's series
3. Run delta extraction, bucketing, KPIs and bucket summary statistics
4. Return one InsightsReport

The pipeline itself is CPU-only and runs after all fetches complete. Any
fetch failure propagates; a report is never built from partial data.
"""

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from insights_core.config import Settings, settings as default_settings
from insights_core.interfaces.protocols import ISampleSource
from insights_core.models.snapshots import INTERACTIONS, MetricName, Sample
from insights_core.models.statistics import InsightsReport, MetricKpi
from insights_core.models.trend import Granularity, ReportWindow
from insights_core.services.benchmark import BenchmarkService
from insights_core.services.delta_extractor import DeltaExtractor
from insights_core.services.trend_engine import compute_heatmap, compute_trend
from insights_core.services.metrics_aggregator import MetricsAggregator
from insights_core.utils.periods import end_of_day, previous_window

logger = logging.getLogger(__name__)

KPI_METRICS = [
    MetricName.VIEWS.value,
    MetricName.LIKES.value,
    MetricName.REPLIES.value,
    MetricName.REPOSTS.value,
    MetricName.QUOTES.value,
    INTERACTIONS,
]


def group_series(samples: Sequence[Sample]) -> Dict[str, List[Sample]]:
    """
    Group samples by entity, sort by timestamp and drop duplicate timestamps.

    When two rows share a timestamp the one fetched last wins.

    Example:
        group_series([s("p1", t1), s("p2", t0), s("p1", t0)])
        # {"p1": [t0, t1], "p2": [t0]}
    """
    grouped: Dict[str, List[Sample]] = defaultdict(list)
    for sample in samples:
        grouped[sample.entity_id].append(sample)

    series: Dict[str, List[Sample]] = {}
    for entity_id, rows in grouped.items():
        rows.sort(key=lambda s: s.bucket_ts)
        deduped: List[Sample] = []
        for row in rows:
            if deduped and deduped[-1].bucket_ts == row.bucket_ts:
                logger.warning(
                    f"Duplicate snapshot for {entity_id} at {row.bucket_ts.isoformat()}, keeping the last row"
                )
                deduped[-1] = row
            else:
                deduped.append(row)
        series[entity_id] = deduped
    return series


def _chunks(items: Sequence[str], size: int) -> List[Sequence[str]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def _truncate(series: Dict[str, List[Sample]], until: datetime) -> Dict[str, List[Sample]]:
    return {
        entity_id: [s for s in samples if s.bucket_ts <= until]
        for entity_id, samples in series.items()
    }


class ReportService:
    """Builds insights reports from an ISampleSource."""

    def __init__(self, sample_source: ISampleSource, settings: Optional[Settings] = None):
        """
        Initialize report service.

        Args:
            sample_source: Snapshot source (SnapshotStorage in production)
            settings: Configuration (defaults to the global settings)
        """
        self.sample_source = sample_source
        self.settings = settings or default_settings
        self.benchmarks = BenchmarkService(min_samples=self.settings.BENCHMARK_MIN_SAMPLES)

    async def load_samples(
        self,
        entity_ids: Sequence[str],
        granularity: Granularity,
        since: datetime,
    ) -> Dict[str, List[Sample]]:
        """
        Fetch samples in parallel chunks and return one clean series per entity.

        Args:
            entity_ids: Entities to fetch
            granularity: HOUR or DAY
            since: Lower bound on bucket timestamp

        Returns:
            Map of entity id to its sorted, deduplicated series
        """
        entity_ids = list(entity_ids)
        if not entity_ids:
            return {}

        chunks = _chunks(entity_ids, self.settings.FETCH_CHUNK_SIZE)
        results = await asyncio.gather(
            *(self.sample_source.fetch_samples(chunk, granularity, since) for chunk in chunks)
        )
        samples = [sample for chunk_samples in results for sample in chunk_samples]
        logger.debug(f"Loaded {len(samples)} samples in {len(chunks)} chunk(s)")
        return group_series(samples)

    async def load_history(self, entity_ids: Sequence[str]) -> List[Sample]:
        """All-time daily history of every entity, for benchmarks."""
        results = await asyncio.gather(
            *(self.sample_source.fetch_all_time_samples(entity_id) for entity_id in entity_ids)
        )
        return [sample for entity_samples in results for sample in entity_samples]

    def _kpis(
        self,
        current_totals: Dict[str, float],
        previous_totals: Dict[str, float],
        history: Sequence[Sample],
        window: ReportWindow,
    ) -> Dict[str, MetricKpi]:
        kpis = {}
        for metric in KPI_METRICS:
            total = current_totals.get(metric, 0)
            previous_total = previous_totals.get(metric, 0)
            profile = self.benchmarks.compute_profile(history, metric)
            kpis[metric] = MetricKpi(
                metric=metric,
                total=total,
                previous_total=previous_total,
                growth=MetricsAggregator.calculate_growth(total, previous_total),
                benchmark=self.benchmarks.compare(total, profile, window.period),
            )
        return kpis

    async def build_report(
        self,
        entity_ids: Sequence[str],
        window: ReportWindow,
        now: Optional[datetime] = None,
    ) -> InsightsReport:
        """
        Build a complete report for ``window``.

        Samples are fetched from the start of the period before the
        comparison window. Both the current and the comparison trend then
        measure their first delta against an earlier reading, so a
        long-lived post contributes its weekly increase to each total
        rather than its lifetime count.

        Args:
            entity_ids: Posts in the report
            window: Reporting window
            now: Reference time for the comparison window

        Returns:
            InsightsReport (trend status NO_DATA when nothing was observed)

        Raises:
            Any sample source failure, unchanged
        """
        tz = self.settings.REPORT_TIMEZONE
        comparison = previous_window(window, now=now, timezone=tz)
        baseline = previous_window(comparison, now=now, timezone=tz)

        series, history = await asyncio.gather(
            self.load_samples(entity_ids, window.granularity, baseline.start),
            self.load_history(entity_ids),
        )

        trend = compute_trend(series, window, timezone=tz)
        previous_trend = compute_trend(
            _truncate(series, end_of_day(comparison.end, tz)), comparison, timezone=tz
        )

        window_end = end_of_day(window.end, tz)
        in_window = [
            point
            for points in DeltaExtractor.extract_many(series).values()
            for point in points
            if window.start <= point.bucket_ts <= window_end
        ]
        heatmap = compute_heatmap(in_window, INTERACTIONS, timezone=tz) if in_window else None

        report = InsightsReport(
            entity_count=len(series),
            trend=trend,
            kpis=self._kpis(trend.totals, previous_trend.totals, history, window),
            heatmap=heatmap,
            summaries={
                metric: MetricsAggregator.summarize_series(trend.buckets, metric)
                for metric in KPI_METRICS
            },
            generated_at=now or datetime.now(timezone.utc),
        )
        logger.info(
            f"Built {window.period.value} report for {len(series)} entities "
            f"({len(trend.buckets)} buckets, status {trend.status.value})"
        )
        return report
