"""Unit tests for BucketGridBuilder."""
from datetime import datetime, timedelta

import pytest
import pytz

from insights_core.models.trend import Granularity, Period, ReportWindow
from insights_core.services.bucket_grid import BucketGridBuilder

from conftest import SUNDAY, utc


@pytest.fixture
def builder():
    return BucketGridBuilder(timezone="UTC")


class TestWeekMode:
    """Hourly grids."""

    def test_grid_stops_at_latest_observation(self, builder):
        tuesday_14 = utc(2026, 1, 13, 14)

        slots = builder.build(SUNDAY, Granularity.HOUR, tuesday_14)

        assert len(slots) == 24 + 24 + 15
        assert slots[-1].timestamp == tuesday_14
        assert slots[-1].key == (2, 14)
        assert all(slot.timestamp <= tuesday_14 for slot in slots)

    def test_partial_hour_includes_its_bucket(self, builder):
        slots = builder.build(SUNDAY, Granularity.HOUR, utc(2026, 1, 13, 14, 30))

        assert slots[-1].timestamp == utc(2026, 1, 13, 14)

    @pytest.mark.parametrize("hours", [0, 1, 23, 24, 71, 100, 167, 500])
    def test_never_beyond_max_observed(self, builder, hours):
        max_observed = SUNDAY + timedelta(hours=hours, minutes=10)

        slots = builder.build(SUNDAY, Granularity.HOUR, max_observed)

        assert slots
        assert all(slot.timestamp <= max_observed for slot in slots)
        assert len(slots) <= 168

    def test_full_week_is_168_slots(self, builder):
        slots = builder.build(SUNDAY, Granularity.HOUR, utc(2026, 1, 25))

        assert len(slots) == 168
        assert slots[-1].key == (6, 23)

    def test_no_observation_gives_empty_grid(self, builder):
        assert builder.build(SUNDAY, Granularity.HOUR, None) == []

    def test_observation_before_window_gives_empty_grid(self, builder):
        assert builder.build(SUNDAY, Granularity.HOUR, utc(2026, 1, 10, 23)) == []

    def test_labels_and_date_labels(self, builder):
        slots = builder.build(SUNDAY, Granularity.HOUR, utc(2026, 1, 12, 3))

        assert [slot.label for slot in slots[:3]] == ["0", "1", "2"]
        assert slots[0].date_label == "1/11"
        assert slots[1].date_label is None
        assert slots[24].date_label == "1/12"
        assert slots[24].label == "0"

    def test_labels_use_reporting_timezone(self):
        taipei = pytz.timezone("Asia/Taipei")
        start = taipei.localize(datetime(2026, 1, 11))
        builder = BucketGridBuilder(timezone="Asia/Taipei")

        slots = builder.build(start, Granularity.HOUR, start + timedelta(hours=5))

        assert slots[0].timestamp == utc(2026, 1, 10, 16)
        assert slots[0].label == "0"
        assert slots[0].date_label == "1/11"
        assert slots[5].label == "5"


class TestMonthMode:
    """Daily grids."""

    def test_daily_slots(self, builder):
        start = utc(2026, 1, 1)

        slots = builder.build(start, Granularity.DAY, utc(2026, 1, 5, 12))

        assert [slot.label for slot in slots] == ["1/1", "1/2", "1/3", "1/4", "1/5"]
        assert [slot.key for slot in slots] == [(0,), (1,), (2,), (3,), (4,)]
        assert all(slot.date_label is None for slot in slots)

    def test_capped_at_month_max_days(self, builder):
        slots = builder.build(utc(2026, 1, 1), Granularity.DAY, utc(2026, 3, 1))

        assert len(slots) == 31

    def test_capped_at_window_length(self, builder):
        window = ReportWindow(
            period=Period.MONTH,
            start=utc(2026, 2, 1),
            end=utc(2026, 2, 28),
        )

        slots = builder.build_for_window(window, utc(2026, 3, 10))

        assert len(slots) == 28
        assert slots[-1].label == "2/28"

    def test_week_window_capped_at_window_end(self, builder):
        window = ReportWindow(period=Period.WEEK, start=SUNDAY, end=utc(2026, 1, 13))

        slots = builder.build_for_window(window, utc(2026, 1, 20))

        assert len(slots) == 72


class TestBucketKey:

    def test_hour_key(self, builder):
        key = builder.bucket_key(SUNDAY, Granularity.HOUR, utc(2026, 1, 13, 14, 30))

        assert key == (2, 14)

    def test_day_key(self, builder):
        key = builder.bucket_key(SUNDAY, Granularity.DAY, utc(2026, 1, 14, 23))

        assert key == (3,)

    def test_before_window_has_no_key(self, builder):
        assert builder.bucket_key(SUNDAY, Granularity.HOUR, utc(2026, 1, 10, 23)) is None

    def test_unknown_granularity_raises(self):
        with pytest.raises(ValueError):
            BucketGridBuilder.step("minute")


class TestDaylightSavingChange:
    """New York falls back on 2026-11-01, so that local day lasts 25 hours."""

    @pytest.fixture
    def new_york(self):
        return pytz.timezone("America/New_York")

    @pytest.fixture
    def ny_builder(self):
        return BucketGridBuilder(timezone="America/New_York")

    def test_daily_slots_follow_local_midnight(self, new_york, ny_builder):
        start = new_york.localize(datetime(2026, 11, 1))

        slots = ny_builder.build(start, Granularity.DAY, new_york.localize(datetime(2026, 11, 5, 12)))

        assert [slot.label for slot in slots] == ["11/1", "11/2", "11/3", "11/4", "11/5"]
        assert [slot.key for slot in slots] == [(0,), (1,), (2,), (3,), (4,)]
        assert slots[1].timestamp == utc(2026, 11, 2, 5)

    def test_day_key_uses_local_date(self, new_york, ny_builder):
        start = new_york.localize(datetime(2026, 11, 1))
        late_monday = new_york.localize(datetime(2026, 11, 2, 23, 30))

        assert ny_builder.bucket_key(start, Granularity.DAY, late_monday) == (1,)

    def test_date_label_on_local_midnight(self, new_york, ny_builder):
        start = new_york.localize(datetime(2026, 11, 1))

        slots = ny_builder.build(start, Granularity.HOUR, start + timedelta(hours=30))

        assert slots[0].date_label == "11/1"
        assert slots[24].label == "23"
        assert slots[24].date_label is None
        assert slots[25].label == "0"
        assert slots[25].date_label == "11/2"


def test_bounds(builder):
    slots = builder.build(SUNDAY, Granularity.HOUR, utc(2026, 1, 11, 5))

    bounds = BucketGridBuilder.bounds(slots)

    assert bounds.start == SUNDAY
    assert bounds.end == utc(2026, 1, 11, 5)
    assert BucketGridBuilder.bounds([]) is None
