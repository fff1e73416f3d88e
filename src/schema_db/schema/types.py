"""Field types and referential actions.

``FieldType`` is a closed set; ``coerce_value`` is its single validator and
must handle every member.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    """Declared type of a model field."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


class OnDelete(str, Enum):
    """Action applied to referencing records when the referenced one is deleted."""

    CASCADE = "cascade"
    SET_NULL = "set null"
    RESTRICT = "restrict"
    NO_ACTION = "no action"

    @classmethod
    def _missing_(cls, value: object) -> "OnDelete | None":
        # Accept setNull / set_null / SET NULL / noAction ...
        if isinstance(value, str):
            normalized = value.replace("_", "").replace(" ", "").lower()
            for member in cls:
                if member.value.replace(" ", "") == normalized:
                    return member
        return None


def coerce_value(field_type: FieldType, value: Any) -> Any:
    """Validate *value* against *field_type* and return the stored form.

    ``None`` is returned unchanged; callers decide whether it is allowed.

    Raises:
        TypeError: If the value does not fit the type.
    """
    if value is None:
        return None

    if field_type is FieldType.STRING:
        if isinstance(value, str):
            return value
    elif field_type is FieldType.NUMBER:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
    elif field_type is FieldType.BOOLEAN:
        if isinstance(value, bool):
            return value
    elif field_type is FieldType.DATE:
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                pass
    else:
        raise TypeError(f"Unhandled field type: {field_type!r}")

    raise TypeError(
        f"Expected {field_type.value}, got {type(value).__name__} ({value!r})"
    )
