"""Unit tests for follower growth series and milestones."""
from datetime import date

import pytest

from insights_core.models.statistics import FollowerDay
from insights_core.models.trend import Period, ReportWindow
from insights_core.services.follower_growth import (
    build_follower_series,
    next_milestone,
    previous_milestone,
    summarize_followers,
)

from conftest import SUNDAY, utc


@pytest.fixture
def window():
    return ReportWindow(period=Period.WEEK, start=SUNDAY, end=utc(2026, 1, 17), label="This week")


def day_row(day, followers, growth=0):
    return FollowerDay(day=day, label=f"{day.month}/{day.day}", followers=followers, growth=growth)


class TestMilestones:

    @pytest.mark.parametrize("current,expected", [
        (0, 100),
        (730, 1000),
        (1000, 2000),
        (999999, 1000000),
        (1200000, 3000000),
    ])
    def test_next_milestone(self, current, expected):
        assert next_milestone(current) == expected

    @pytest.mark.parametrize("current,expected", [
        (50, 0),
        (730, 500),
        (1000, 1000),
    ])
    def test_previous_milestone(self, current, expected):
        assert previous_milestone(current) == expected


class TestFollowerSeries:

    def test_last_value_per_day_with_baseline(self, make_sample, window):
        snapshots = [
            make_sample("acct", utc(2026, 1, 10, 12), followers_count=500),
            make_sample("acct", utc(2026, 1, 11, 20), followers_count=510),
            make_sample("acct", utc(2026, 1, 11, 8), followers_count=505),
            make_sample("acct", utc(2026, 1, 12, 10), followers_count=505),
            make_sample("acct", utc(2026, 1, 18, 1), followers_count=600),
        ]

        rows = build_follower_series(snapshots, window, timezone="UTC")

        assert [r.day for r in rows] == [date(2026, 1, 11), date(2026, 1, 12)]
        assert [r.followers for r in rows] == [510, 505]
        assert [r.growth for r in rows] == [10, -5]
        assert rows[0].label == "1/11"

    def test_first_day_without_baseline(self, make_sample, window):
        snapshots = [
            make_sample("acct", utc(2026, 1, 12), followers_count=300),
            make_sample("acct", utc(2026, 1, 13), followers_count=320),
        ]

        rows = build_follower_series(snapshots, window, timezone="UTC")

        assert [r.growth for r in rows] == [0, 20]

    def test_samples_without_followers_skipped(self, make_sample, window):
        snapshots = [make_sample("acct", utc(2026, 1, 12), profile_views=9)]

        assert build_follower_series(snapshots, window, timezone="UTC") == []


class TestSummary:

    def test_summary_with_positive_growth(self):
        daily = [day_row(date(2026, 1, 11), 900), day_row(date(2026, 1, 12), 950, 50)]
        previous = [day_row(date(2026, 1, 4), 875), day_row(date(2026, 1, 5), 900, 25)]

        summary = summarize_followers(daily, previous)

        assert summary.current_followers == 950
        assert summary.period_growth == 50
        assert summary.growth_rate == pytest.approx(100)
        assert summary.avg_daily_growth == pytest.approx(25)
        assert summary.next_milestone == 1000
        assert summary.previous_milestone == 500
        assert summary.milestone_progress == pytest.approx(90)
        assert summary.days_to_milestone == 2

    def test_no_eta_when_shrinking(self):
        daily = [day_row(date(2026, 1, 11), 510), day_row(date(2026, 1, 12), 505, -5)]

        summary = summarize_followers(daily)

        assert summary.period_growth == -5
        assert summary.days_to_milestone is None
        assert summary.milestone_progress == pytest.approx(1)

    def test_empty_period(self):
        summary = summarize_followers([], current_followers=42)

        assert summary.period_growth == 0
        assert summary.growth_rate == 0
        assert summary.next_milestone == 100
        assert summary.days_to_milestone is None
