"""Stable, type-aware sorting of in-memory records."""

from datetime import datetime
from typing import Any

from schema_db.adapters.types import SortBy
from schema_db.schema.types import FieldType


def sort_key(field_type: FieldType, value: Any) -> Any:
    """Comparable key for a non-null value of *field_type*."""
    if field_type is FieldType.STRING:
        return str(value)
    if field_type is FieldType.NUMBER:
        return value
    if field_type is FieldType.BOOLEAN:
        return bool(value)  # False before True
    if field_type is FieldType.DATE:
        if isinstance(value, datetime):
            return value.timestamp()
        return value
    raise TypeError(f"Unhandled field type: {field_type!r}")


def sort_records(records: list[dict], sort: SortBy, field_type: FieldType) -> list[dict]:
    """Sort by one field; ties keep their current (insertion) order.

    ``None`` sorts first ascending and last descending.
    """
    present = [r for r in records if r.get(sort.field) is not None]
    missing = [r for r in records if r.get(sort.field) is None]

    reverse = sort.direction == "desc"
    # sorted() is stable for reverse=True too: equal keys keep input order
    present = sorted(
        present,
        key=lambda r: sort_key(field_type, r[sort.field]),
        reverse=reverse,
    )
    return present + missing if reverse else missing + present
