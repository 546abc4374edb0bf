"""
Reporting period helpers.

Week windows start on Sunday 00:00 local time, month windows on the 1st.
The current period ends today; earlier periods end on their last day.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz

from insights_core.config import settings
from insights_core.models.trend import Period, ReportWindow


def _tz(timezone: Optional[str]):
    return pytz.timezone(timezone or settings.REPORT_TIMEZONE)


def _local_midnight(tz, day: date) -> datetime:
    return tz.localize(datetime.combine(day, time()))


def _short(day: date) -> str:
    return f"{day.month}/{day.day}"


def get_date_range(
    period: Period,
    offset: int = 0,
    now: Optional[datetime] = None,
    timezone: Optional[str] = None,
) -> ReportWindow:
    """
    Calculate a reporting window.

    Args:
        period: "week" or "month"
        offset: 0 for the current period, -1 for the previous one, ...
        now: Reference time (defaults to the current time)
        timezone: IANA timezone (defaults to REPORT_TIMEZONE)

    Returns:
        ReportWindow with local-midnight start and end

    Raises:
        ValueError: For unknown periods or future offsets

    Example:
        # now = Tuesday 2026-01-13
        get_date_range("week")       # Sun 1/11 .. Tue 1/13, "This week"
        get_date_range("week", -1)   # Sun 1/4 .. Sat 1/10, "Last week"
        get_date_range("month", -2)  # 2025/11/1 .. 2025/11/30, "2025/11"
    """
    period = Period(period)
    if offset > 0:
        raise ValueError(f"Offset must not point to a future period, got {offset}")

    tz = _tz(timezone)
    now = now or datetime.now(tz)
    if now.tzinfo is None:
        now = tz.localize(now)
    today = now.astimezone(tz).date()

    if period == Period.WEEK:
        this_sunday = today - timedelta(days=(today.weekday() + 1) % 7)
        start_day = this_sunday + timedelta(days=7 * offset)
        end_day = today if offset == 0 else start_day + timedelta(days=6)

        if offset == 0:
            label = "This week"
        elif offset == -1:
            label = "Last week"
        else:
            label = f"{_short(start_day)} - {_short(end_day)}"
    else:
        month_index = today.year * 12 + (today.month - 1) + offset
        year, month = divmod(month_index, 12)
        month += 1
        start_day = date(year, month, 1)
        end_day = today if offset == 0 else date(year, month, calendar.monthrange(year, month)[1])

        if offset == 0:
            label = "This month"
        elif offset == -1:
            label = "Last month"
        else:
            label = f"{year}/{month}"

    return ReportWindow(
        period=period,
        start=_local_midnight(tz, start_day),
        end=_local_midnight(tz, end_day),
        label=label,
        offset=offset,
    )


def previous_window(
    window: ReportWindow,
    now: Optional[datetime] = None,
    timezone: Optional[str] = None,
) -> ReportWindow:
    """The comparison window immediately before ``window``."""
    return get_date_range(window.period, window.offset - 1, now=now, timezone=timezone)


def end_of_day(moment: datetime, timezone: Optional[str] = None) -> datetime:
    """Last microsecond of the local day containing ``moment``."""
    tz = _tz(timezone)
    if moment.tzinfo is None:
        moment = tz.localize(moment)
    local_day = moment.astimezone(tz).date()
    return tz.localize(datetime.combine(local_day, time.max))
