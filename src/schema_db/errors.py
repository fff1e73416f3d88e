"""Exception taxonomy shared by the schema layer and every adapter.

All adapter failures for foreseeable conditions are raised as one of these
types, synchronously from the failing operation.

Usage:
    from schema_db.errors import UniqueConstraintViolation

    try:
        await adapter.create("author", {"email": "jane@example.com"})
    except UniqueConstraintViolation as e:
        print(e.field, e.value)
"""

from typing import Any


class SchemaDbError(Exception):
    """Base class for all schema-db errors."""

    pass


class SchemaError(SchemaDbError):
    """Raised when a schema definition is invalid or cannot be composed."""

    pass


class ValidationError(SchemaDbError, ValueError):
    """Raised when record data or query options do not fit the schema."""

    pass


class UniqueConstraintViolation(SchemaDbError):
    """Raised when a write would duplicate a value on a ``unique`` field."""

    def __init__(self, model: str, field: str, value: Any) -> None:
        self.model = model
        self.field = field
        self.value = value
        super().__init__(
            f"Unique constraint violated on {model}.{field}: {value!r} already exists"
        )


class ReferentialIntegrityError(SchemaDbError):
    """Raised when a ``restrict`` reference blocks a delete."""

    def __init__(
        self, model: str, child_model: str | None = None, field: str | None = None
    ) -> None:
        self.model = model
        self.child_model = child_model
        self.field = field
        if child_model is None:
            message = f"Cannot delete from '{model}': blocked by a restricting reference"
        else:
            message = (
                f"Cannot delete from '{model}': referenced by {child_model}.{field} "
                f"(onDelete=restrict)"
            )
        super().__init__(message)


class NotFoundError(SchemaDbError, LookupError):
    """Raised by operations that require an existing target record."""

    pass
