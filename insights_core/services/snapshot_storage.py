"""
SnapshotStorage Service

Reads post/account metric snapshots from DynamoDB. One partition per entity
and granularity, sorted by bucket timestamp:

    PK = {granularity}#{entity_id}     e.g. hour#post-123
    SK = 2026-01-13T09:00:00.000Z

Entities are queried in parallel. Read failures propagate so a report is
never built from a partial dataset.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import aioboto3
from pydantic import ValidationError

from insights_core.config import settings
from insights_core.exceptions import SampleSourceError
from insights_core.models.snapshots import Sample, ensure_aware
from insights_core.models.trend import Granularity
from insights_core.utils.metrics_transformer import MetricsTransformer

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ["entity_id", "bucket_ts"]


class SnapshotStorage:
    """DynamoDB-backed sample source (implements ISampleSource)."""

    def __init__(self, table_name: Optional[str] = None):
        self.session = aioboto3.Session()
        self.table_name = table_name or settings.SNAPSHOT_TABLE_NAME

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        pass

    async def _get_dynamodb_client(self):
        """Get DynamoDB resource with configured credentials."""
        return self.session.resource(
            "dynamodb",
            region_name=settings.DYNAMODB_REGION,
            endpoint_url=settings.DYNAMODB_ENDPOINT,
            aws_access_key_id=settings.DYNAMODB_ACCESS_KEY,
            aws_secret_access_key=settings.DYNAMODB_SECRET_KEY,
        )

    def _get_partition_key(self, granularity: Granularity, entity_id: str) -> str:
        """
        Generate partition key for an entity's snapshot series.

        Example:
            hour#post-123
        """
        return f"{Granularity(granularity).value}#{entity_id}"

    def _get_sort_key(self, timestamp: datetime) -> str:
        """
        Generate sort key from timestamp (UTC, millisecond precision).

        Example:
            2026-01-13T09:00:00.000Z
        """
        utc = ensure_aware(timestamp).astimezone(timezone.utc)
        return utc.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    def _items_to_samples(self, items: List[dict], entity_id: str) -> List[Sample]:
        """Convert raw items to Samples, skipping rows that cannot be parsed."""
        samples = []
        for item in items:
            row = MetricsTransformer.item_to_row({"entity_id": entity_id, **item})
            if not MetricsTransformer.validate_row_structure(row, REQUIRED_FIELDS):
                logger.warning(f"Skipping snapshot without entity/timestamp: {item.get('SK')}")
                continue
            try:
                samples.append(Sample.from_row(row))
            except (ValidationError, ValueError) as e:
                logger.warning(f"Skipping invalid snapshot {entity_id}@{row.get('bucket_ts')}: {e}")
        return samples

    async def _query_partition(self, partition_key: str, since: Optional[datetime] = None) -> List[dict]:
        """
        Query one partition, following pagination.

        Args:
            partition_key: The partition key to query
            since: Optional lower bound on the sort key

        Returns:
            List of raw items
        """
        try:
            async with await self._get_dynamodb_client() as dynamodb:
                table = await dynamodb.Table(self.table_name)

                query = {
                    "ExpressionAttributeNames": {"#pk": "PK"},
                    "ExpressionAttributeValues": {":pk": partition_key},
                    "KeyConditionExpression": "#pk = :pk",
                }
                if since is not None:
                    query["KeyConditionExpression"] = "#pk = :pk AND #sk >= :since"
                    query["ExpressionAttributeNames"]["#sk"] = "SK"
                    query["ExpressionAttributeValues"][":since"] = self._get_sort_key(since)

                items: List[dict] = []
                while True:
                    response = await table.query(**query)
                    items.extend(response.get("Items", []))
                    last_key = response.get("LastEvaluatedKey")
                    if not last_key:
                        break
                    query["ExclusiveStartKey"] = last_key

                return items

        except Exception as e:
            logger.error(f"Failed to query partition {partition_key}: {e}", exc_info=True)
            raise SampleSourceError(f"Failed to query {partition_key}") from e

    async def fetch_samples(
        self,
        entity_ids: Sequence[str],
        granularity: Granularity,
        since: datetime,
    ) -> List[Sample]:
        """
        Query snapshots for several entities in parallel.

        Args:
            entity_ids: Posts or accounts to fetch
            granularity: HOUR or DAY series
            since: Lower bound on bucket timestamp

        Returns:
            Samples of all entities, sorted by (entity_id, bucket_ts)

        Example:
            samples = await storage.fetch_samples(
                ["post-1", "post-2"], Granularity.HOUR, window.start
            )
        """
        tasks = [
            self._query_partition(self._get_partition_key(granularity, entity_id), since)
            for entity_id in entity_ids
        ]
        results = await asyncio.gather(*tasks)

        samples: List[Sample] = []
        for entity_id, items in zip(entity_ids, results):
            samples.extend(self._items_to_samples(items, entity_id))

        samples.sort(key=lambda s: (s.entity_id, s.bucket_ts))
        logger.debug(
            f"Fetched {len(samples)} {Granularity(granularity).value} samples "
            f"for {len(entity_ids)} entities"
        )
        return samples

    async def fetch_all_time_samples(self, entity_id: str) -> List[Sample]:
        """
        Fetch the complete daily history of one entity.

        Returns:
            Samples sorted by bucket_ts
        """
        items = await self._query_partition(self._get_partition_key(Granularity.DAY, entity_id))
        samples = self._items_to_samples(items, entity_id)
        samples.sort(key=lambda s: s.bucket_ts)
        return samples
