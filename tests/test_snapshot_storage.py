"""Unit tests for the DynamoDB snapshot source."""
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from insights_core.exceptions import SampleSourceError
from insights_core.models.snapshots import MetricName
from insights_core.models.trend import Granularity
from insights_core.services.snapshot_storage import SnapshotStorage

from conftest import utc


@pytest.fixture
def storage():
    """Create SnapshotStorage instance with mocked session."""
    with patch('insights_core.services.snapshot_storage.aioboto3.Session'):
        storage = SnapshotStorage(table_name="test_snapshots")
        return storage


def item(entity_id, sk, granularity="hour", **data):
    return {"PK": f"{granularity}#{entity_id}", "SK": sk, "data": data}


@pytest.mark.asyncio
async def test_fetch_samples(storage):
    """Items become Samples with Decimals converted."""
    mock_table = AsyncMock()
    mock_table.query.return_value = {
        "Items": [
            item("p1", "2026-01-12T09:00:00.000Z", current_views=Decimal("120"), likes=Decimal("4")),
        ]
    }

    with patch.object(storage.session, 'resource') as mock_resource:
        mock_resource.return_value.__aenter__.return_value.Table = AsyncMock(return_value=mock_table)

        samples = await storage.fetch_samples(["p1"], Granularity.HOUR, utc(2026, 1, 11))

    assert len(samples) == 1
    assert samples[0].entity_id == "p1"
    assert samples[0].bucket_ts == utc(2026, 1, 12, 9)
    assert samples[0].get(MetricName.VIEWS) == 120
    assert samples[0].get(MetricName.LIKES) == 4


@pytest.mark.asyncio
async def test_query_uses_partition_and_since(storage):
    """Query targets {granularity}#{entity_id} and bounds the sort key."""
    mock_table = AsyncMock()
    mock_table.query.return_value = {"Items": []}

    with patch.object(storage.session, 'resource') as mock_resource:
        mock_resource.return_value.__aenter__.return_value.Table = AsyncMock(return_value=mock_table)

        await storage.fetch_samples(["p1"], Granularity.DAY, utc(2026, 1, 11))

    call_args = mock_table.query.call_args
    values = call_args.kwargs['ExpressionAttributeValues']
    assert values[':pk'] == "day#p1"
    assert values[':since'] == "2026-01-11T00:00:00.000Z"
    assert "#sk >= :since" in call_args.kwargs['KeyConditionExpression']


@pytest.mark.asyncio
async def test_entities_queried_separately_and_sorted(storage):
    """One query per entity; results sorted by (entity_id, bucket_ts)."""
    responses = {
        "hour#p2": [item("p2", "2026-01-12T10:00:00.000Z", views=Decimal("5"))],
        "hour#p1": [
            item("p1", "2026-01-12T11:00:00.000Z", views=Decimal("9")),
            item("p1", "2026-01-12T10:00:00.000Z", views=Decimal("3")),
        ],
    }

    async def query(**kwargs):
        return {"Items": responses[kwargs['ExpressionAttributeValues'][':pk']]}

    mock_table = AsyncMock()
    mock_table.query.side_effect = query

    with patch.object(storage.session, 'resource') as mock_resource:
        mock_resource.return_value.__aenter__.return_value.Table = AsyncMock(return_value=mock_table)

        samples = await storage.fetch_samples(["p2", "p1"], Granularity.HOUR, utc(2026, 1, 11))

    assert mock_table.query.await_count == 2
    assert [(s.entity_id, s.get(MetricName.VIEWS)) for s in samples] == [("p1", 3), ("p1", 9), ("p2", 5)]


@pytest.mark.asyncio
async def test_pagination(storage):
    """LastEvaluatedKey is followed until exhausted."""
    mock_table = AsyncMock()
    mock_table.query.side_effect = [
        {"Items": [item("p1", "2026-01-12T09:00:00.000Z", views=Decimal("1"))], "LastEvaluatedKey": {"SK": "x"}},
        {"Items": [item("p1", "2026-01-12T10:00:00.000Z", views=Decimal("2"))]},
    ]

    with patch.object(storage.session, 'resource') as mock_resource:
        mock_resource.return_value.__aenter__.return_value.Table = AsyncMock(return_value=mock_table)

        samples = await storage.fetch_samples(["p1"], Granularity.HOUR, utc(2026, 1, 11))

    assert len(samples) == 2
    assert mock_table.query.call_args_list[1].kwargs['ExclusiveStartKey'] == {"SK": "x"}


@pytest.mark.asyncio
async def test_invalid_items_skipped(storage):
    """Items without a timestamp or with bad values are skipped."""
    mock_table = AsyncMock()
    mock_table.query.return_value = {
        "Items": [
            {"PK": "hour#p1", "data": {"views": Decimal("1")}},
            item("p1", "2026-01-12T09:00:00.000Z", views=Decimal("-4")),
            item("p1", "2026-01-12T10:00:00.000Z", views=Decimal("7")),
        ]
    }

    with patch.object(storage.session, 'resource') as mock_resource:
        mock_resource.return_value.__aenter__.return_value.Table = AsyncMock(return_value=mock_table)

        samples = await storage.fetch_samples(["p1"], Granularity.HOUR, utc(2026, 1, 11))

    assert [s.get(MetricName.VIEWS) for s in samples] == [7]


@pytest.mark.asyncio
async def test_query_failure_raises(storage):
    """Storage errors propagate as SampleSourceError."""
    mock_table = AsyncMock()
    mock_table.query.side_effect = Exception("ResourceNotFoundException")

    with patch.object(storage.session, 'resource') as mock_resource:
        mock_resource.return_value.__aenter__.return_value.Table = AsyncMock(return_value=mock_table)

        with pytest.raises(SampleSourceError):
            await storage.fetch_samples(["p1"], Granularity.HOUR, utc(2026, 1, 11))


@pytest.mark.asyncio
async def test_fetch_all_time_samples(storage):
    """All-time history reads the daily partition without a lower bound."""
    mock_table = AsyncMock()
    mock_table.query.return_value = {
        "Items": [item("p1", "2025-12-01T00:00:00.000Z", granularity="day", views=Decimal("50"))]
    }

    with patch.object(storage.session, 'resource') as mock_resource:
        mock_resource.return_value.__aenter__.return_value.Table = AsyncMock(return_value=mock_table)

        samples = await storage.fetch_all_time_samples("p1")

    call_args = mock_table.query.call_args
    assert call_args.kwargs['ExpressionAttributeValues'] == {':pk': "day#p1"}
    assert len(samples) == 1


def test_sort_key_format(storage):
    assert storage._get_sort_key(utc(2026, 1, 13, 9, 5)) == "2026-01-13T09:05:00.000Z"
