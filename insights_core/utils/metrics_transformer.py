"""
Metrics Transformer Utility

Normalizes raw snapshot rows before they become Sample models.
Keeps storage-format quirks (DynamoDB Decimals, prefixed column names)
out of the aggregation services.
"""

from decimal import Decimal
from typing import Any, Dict, Mapping


class MetricsTransformer:
    """
    Utility class for transforming snapshot rows.

    Responsibilities:
    - Convert DynamoDB Decimal values to int/float
    - Map storage column names onto metric names
    - Check rows carry the fields a Sample needs
    """

    @staticmethod
    def convert_decimal_to_number(obj: Any) -> Any:
        """
        Recursively convert Decimal values to int (when integral) or float.

        Example:
            >>> MetricsTransformer.convert_decimal_to_number({"views": Decimal("120"), "rate": Decimal("4.5")})
            {'views': 120, 'rate': 4.5}
        """
        if isinstance(obj, Decimal):
            return int(obj) if obj == obj.to_integral_value() else float(obj)
        elif isinstance(obj, dict):
            return {key: MetricsTransformer.convert_decimal_to_number(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [MetricsTransformer.convert_decimal_to_number(item) for item in obj]
        else:
            return obj

    @staticmethod
    def sanitize_metric_name(name: str) -> str:
        """
        Map a storage column name onto a metric name.

        Example:
            >>> MetricsTransformer.sanitize_metric_name("current_views")
            'views'
            >>> MetricsTransformer.sanitize_metric_name("Followers-Count")
            'followers_count'
        """
        name = name.replace("-", "_").replace(".", "_").lower()
        if name.startswith("current_"):
            name = name[len("current_"):]
        return name

    @staticmethod
    def validate_row_structure(row: Mapping[str, Any], required_fields: list) -> bool:
        """
        Validate that a row contains all required fields.

        Example:
            >>> MetricsTransformer.validate_row_structure({"entity_id": "p1", "bucket_ts": "..."}, ["entity_id", "bucket_ts"])
            True
        """
        return all(row.get(field) is not None for field in required_fields)

    @staticmethod
    def item_to_row(item: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Flatten a snapshot item into a Sample row.

        Items store metric values under a nested "data" attribute; the
        entity id and timestamp live at the top level.

        Example:
            >>> MetricsTransformer.item_to_row({
            ...     "entity_id": "p1", "SK": "2026-01-13T09:00:00Z",
            ...     "data": {"current_views": Decimal("10")},
            ... })
            {'entity_id': 'p1', 'bucket_ts': '2026-01-13T09:00:00Z', 'views': 10}
        """
        item = MetricsTransformer.convert_decimal_to_number(dict(item))
        row: Dict[str, Any] = {
            "entity_id": item.get("entity_id"),
            "bucket_ts": item.get("bucket_ts") or item.get("SK"),
        }
        for key, value in (item.get("data") or {}).items():
            row[MetricsTransformer.sanitize_metric_name(key)] = value
        return row
