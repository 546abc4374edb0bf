"""
Follower Growth

Account-level follower series. Unlike post metrics, follower counts can go
down, so daily growth is the raw net change and is never clamped.
"""

import logging
import math
from datetime import date
from typing import Dict, List, Optional, Sequence

import pytz

from insights_core.config import settings
from insights_core.models.snapshots import MetricName, Sample
from insights_core.models.statistics import FollowerDay, FollowerSummary
from insights_core.models.trend import ReportWindow
from insights_core.services.metrics_aggregator import MetricsAggregator

logger = logging.getLogger(__name__)

MILESTONES = [100, 500, 1000, 2000, 5000, 10000, 20000, 50000, 100000, 200000, 500000, 1000000]
MILLION = 1000000


def next_milestone(current: int) -> int:
    """
    First milestone above ``current``.

    Example:
        next_milestone(730)        # 1000
        next_milestone(1200000)    # 3000000
    """
    for milestone in MILESTONES:
        if milestone > current:
            return milestone
    return math.ceil(current / MILLION) * MILLION + MILLION


def previous_milestone(current: int) -> int:
    """Highest milestone at or below ``current`` (0 before the first one)."""
    for milestone in reversed([0] + MILESTONES):
        if milestone <= current:
            return milestone
    return 0


def _daily_last_values(snapshots: Sequence[Sample], tz) -> Dict[date, int]:
    """Last follower count seen on each local day."""
    by_day: Dict[date, int] = {}
    for sample in sorted(snapshots, key=lambda s: s.bucket_ts):
        if MetricName.FOLLOWERS_COUNT not in sample.metrics:
            continue
        local_day = sample.bucket_ts.astimezone(tz).date()
        by_day[local_day] = sample.get(MetricName.FOLLOWERS_COUNT)
    return by_day


def build_follower_series(
    snapshots: Sequence[Sample],
    window: ReportWindow,
    timezone: Optional[str] = None,
) -> List[FollowerDay]:
    """
    One row per local day of the window that has a follower reading.

    Args:
        snapshots: Account samples carrying followers_count, including any
            readings before the window (used as the growth baseline)
        window: Reporting window
        timezone: IANA timezone for day boundaries

    Returns:
        FollowerDay rows in date order. The first row's growth is measured
        against the last pre-window reading, or 0 when there is none.

    Example:
        # 1/10: 500 (before window), 1/11: 510, 1/12: 505
        [d.growth for d in build_follower_series(...)]  # [10, -5]
    """
    tz = pytz.timezone(timezone or settings.REPORT_TIMEZONE)
    by_day = _daily_last_values(snapshots, tz)
    start_day = window.start.astimezone(tz).date()
    end_day = window.end.astimezone(tz).date()

    baseline: Optional[int] = None
    for day in sorted(by_day):
        if day < start_day:
            baseline = by_day[day]

    rows: List[FollowerDay] = []
    previous = baseline
    for day in sorted(by_day):
        if day < start_day or day > end_day:
            continue
        followers = by_day[day]
        growth = followers - previous if previous is not None else 0
        rows.append(
            FollowerDay(
                day=day,
                label=f"{day.month}/{day.day}",
                followers=followers,
                growth=growth,
            )
        )
        previous = followers

    logger.debug(f"Built {len(rows)} follower days for {window.label or window.period.value}")
    return rows


def _net_change(daily: Sequence[FollowerDay]) -> int:
    if not daily:
        return 0
    return daily[-1].followers - daily[0].followers


def summarize_followers(
    daily: Sequence[FollowerDay],
    previous_daily: Sequence[FollowerDay] = (),
    current_followers: Optional[int] = None,
) -> FollowerSummary:
    """
    Period statistics and milestone progress.

    Args:
        daily: Rows of the current window
        previous_daily: Rows of the comparison window
        current_followers: Latest known count (defaults to the last row)

    Returns:
        FollowerSummary. ``days_to_milestone`` is None when the average
        daily growth is not positive.
    """
    if current_followers is None:
        current_followers = daily[-1].followers if daily else 0

    period_growth = _net_change(daily)
    previous_growth = _net_change(previous_daily)
    avg_daily_growth = period_growth / (len(daily) or 1)

    target = next_milestone(current_followers)
    floor = previous_milestone(current_followers)
    progress = (current_followers - floor) / (target - floor) * 100
    remaining = target - current_followers
    days_to_milestone = math.ceil(remaining / avg_daily_growth) if avg_daily_growth > 0 else None

    return FollowerSummary(
        current_followers=current_followers,
        period_growth=period_growth,
        growth_rate=MetricsAggregator.calculate_growth(period_growth, previous_growth),
        avg_daily_growth=avg_daily_growth,
        next_milestone=target,
        previous_milestone=floor,
        milestone_progress=min(max(progress, 0.0), 100.0),
        days_to_milestone=days_to_milestone,
        daily=list(daily),
    )
