"""
Bucket Grid Builder

Generates the ordered, empty bucket slots for a reporting window:
- Week mode: hourly slots from Sunday 00:00, keyed (day_offset, hour)
- Month mode: one slot per local calendar day, keyed (day_offset,)

The grid stops at the slot containing the latest observed sample, so a
report never shows a flat-zero tail for time that has not been measured yet.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

import pytz

from insights_core.config import settings
from insights_core.models.snapshots import ensure_aware
from insights_core.models.trend import (
    BucketKey,
    Granularity,
    GridBounds,
    GridSlot,
    ReportWindow,
)

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24
WEEK_DAYS = 7

_STEPS = {
    Granularity.HOUR: timedelta(hours=1),
    Granularity.DAY: timedelta(days=1),
}


class BucketGridBuilder:
    """Builds bucket grids in a fixed reporting timezone."""

    def __init__(self, timezone: Optional[str] = None, month_max_days: Optional[int] = None):
        """
        Args:
            timezone: IANA name used for labels (defaults to REPORT_TIMEZONE)
            month_max_days: Cap on day slots in month mode
        """
        self.tz = pytz.timezone(timezone or settings.REPORT_TIMEZONE)
        self.month_max_days = month_max_days or settings.MONTH_MAX_DAYS

    @staticmethod
    def step(granularity: Granularity) -> timedelta:
        try:
            return _STEPS[Granularity(granularity)]
        except (KeyError, ValueError):
            raise ValueError(f"Unknown granularity: {granularity}")

    def max_slots(self, granularity: Granularity, days: Optional[int] = None) -> int:
        """Number of slots the window can hold before the data bound applies."""
        granularity = Granularity(granularity)
        if granularity == Granularity.HOUR:
            days = WEEK_DAYS if days is None else min(days, WEEK_DAYS)
            return days * HOURS_PER_DAY
        days = self.month_max_days if days is None else min(days, self.month_max_days)
        return days

    def _local_date(self, timestamp: datetime) -> date:
        return ensure_aware(timestamp).astimezone(self.tz).date()

    def bucket_key(
        self,
        window_start: datetime,
        granularity: Granularity,
        timestamp: datetime,
    ) -> Optional[BucketKey]:
        """
        Map a timestamp to its bucket key relative to the window start.

        Hourly keys count elapsed hours, so both readings of a repeated
        local hour keep separate buckets. Daily keys count local calendar
        days, so a 23h or 25h day is still one bucket.

        Returns:
            (day_offset, hour) for hourly grids, (day_offset,) for daily
            grids, or None if the timestamp precedes the window.
        """
        granularity = Granularity(granularity)
        timestamp = ensure_aware(timestamp)
        window_start = ensure_aware(window_start)
        if timestamp < window_start:
            return None

        if granularity == Granularity.HOUR:
            index = int((timestamp - window_start) // self.step(granularity))
            return (index // HOURS_PER_DAY, index % HOURS_PER_DAY)
        return ((self._local_date(timestamp) - self._local_date(window_start)).days,)

    def _slot_timestamp(self, window_start: datetime, granularity: Granularity, index: int) -> datetime:
        if granularity == Granularity.HOUR or index == 0:
            return window_start + index * self.step(granularity)
        day = self._local_date(window_start) + timedelta(days=index)
        return self.tz.localize(datetime.combine(day, time()))

    def _slot(self, window_start: datetime, granularity: Granularity, index: int) -> GridSlot:
        timestamp = self._slot_timestamp(window_start, granularity, index)
        local = timestamp.astimezone(self.tz)
        date_str = f"{local.month}/{local.day}"

        if granularity == Granularity.HOUR:
            return GridSlot(
                key=divmod(index, HOURS_PER_DAY),
                timestamp=timestamp,
                label=str(local.hour),
                date_label=date_str if local.hour == 0 else None,
            )

        return GridSlot(key=(index,), timestamp=timestamp, label=date_str)

    def build(
        self,
        window_start: datetime,
        granularity: Granularity,
        max_observed: Optional[datetime],
        days: Optional[int] = None,
    ) -> List[GridSlot]:
        """
        Build the slot list for a window.

        Args:
            window_start: Calendar-aligned window start
            granularity: HOUR (week mode) or DAY (month mode)
            max_observed: Latest sample timestamp across all entities, or
                None when there are no samples
            days: Window length in days (week mode is capped at 7, month
                mode at month_max_days)

        Returns:
            Ordered slots from window_start through the slot containing
            max_observed. Empty when there is no data in the window.

        Example:
            window_start = Sunday 00:00, max_observed = Tuesday 14:00
            build(...)  # 24 + 24 + 15 = 63 hourly slots, last is Tue 14:00
        """
        granularity = Granularity(granularity)
        if max_observed is None:
            return []

        window_start = ensure_aware(window_start)
        max_observed = ensure_aware(max_observed)
        if max_observed < window_start:
            return []

        slots: List[GridSlot] = []
        for index in range(self.max_slots(granularity, days)):
            slot = self._slot(window_start, granularity, index)
            if slot.timestamp > max_observed:
                break
            slots.append(slot)

        logger.debug(
            f"Built {len(slots)} {granularity.value} slots from {window_start.isoformat()} "
            f"(max observed {max_observed.isoformat()})"
        )
        return slots

    def build_for_window(self, window: ReportWindow, max_observed: Optional[datetime]) -> List[GridSlot]:
        """Build the grid for a ReportWindow, honouring its length in days."""
        days = max((self._local_date(window.end) - self._local_date(window.start)).days + 1, 1)
        return self.build(window.start, window.granularity, max_observed, days=days)

    @staticmethod
    def bounds(slots: List[GridSlot]) -> Optional[GridBounds]:
        if not slots:
            return None
        return GridBounds(start=slots[0].timestamp, end=slots[-1].timestamp)
