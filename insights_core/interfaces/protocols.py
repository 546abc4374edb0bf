"""
Interface Protocols for Dependency Inversion Principle

Defines the data-source interfaces the report service depends on, so the
aggregation core never knows which store the snapshots come from:
- High-level modules (ReportService) depend on these abstractions
- Low-level modules (SnapshotStorage, test doubles) implement them
"""

from datetime import datetime
from typing import List, Protocol, Sequence

from insights_core.models.snapshots import Sample
from insights_core.models.trend import Granularity


class ISampleSource(Protocol):
    """
    Interface for snapshot history.

    Implementations:
    - SnapshotStorage (DynamoDB via aioboto3)
    - AsyncMock / in-memory doubles (for testing)
    """

    async def fetch_samples(
        self,
        entity_ids: Sequence[str],
        granularity: Granularity,
        since: datetime,
    ) -> List[Sample]:
        """
        Fetch snapshots for several entities at one granularity.

        Returns samples with bucket_ts >= since, in any order.
        """
        ...

    async def fetch_all_time_samples(self, entity_id: str) -> List[Sample]:
        """Fetch the complete daily history of one entity (for benchmarks)."""
        ...
