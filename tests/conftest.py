"""Pytest configuration for insights_core tests."""
import os
from datetime import datetime, timezone

import pytest

# Set test environment variables BEFORE importing package modules
os.environ.setdefault("REPORT_TIMEZONE", "UTC")
os.environ.setdefault("LOGGING_HOST", "")

from insights_core.models.snapshots import DeltaPoint, Sample  # noqa: E402


def utc(year, month, day, hour=0, minute=0):
    """Aware UTC datetime shortcut."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


# 2026-01-11 is a Sunday
SUNDAY = utc(2026, 1, 11)


@pytest.fixture
def make_sample():
    """Factory for Sample instances: make_sample("p1", ts, views=10, likes=2)."""
    def _make(entity_id, bucket_ts, **metrics):
        return Sample(entity_id=entity_id, bucket_ts=bucket_ts, metrics=metrics)
    return _make


@pytest.fixture
def make_delta():
    """Factory for DeltaPoint instances."""
    def _make(entity_id, bucket_ts, **metrics):
        return DeltaPoint(entity_id=entity_id, bucket_ts=bucket_ts, metrics=metrics)
    return _make
