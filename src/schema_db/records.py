"""Record normalization shared by all adapters.

Applies defaults, validates types and required fields, and rejects unknown
fields.  Validation always completes before an adapter touches storage.
"""

from collections.abc import Callable, Mapping
from typing import Any

from schema_db.errors import ValidationError
from schema_db.schema.models import ID_FIELD, ModelDefinition
from schema_db.schema.types import coerce_value


def _check_known_fields(model: str, definition: ModelDefinition, data: Mapping) -> None:
    unknown = [name for name in data if not definition.has_field(name)]
    if unknown:
        raise ValidationError(
            f"Unknown field(s) for model '{model}': {', '.join(sorted(unknown))}"
        )


def _coerce(model: str, definition: ModelDefinition, name: str, value: Any) -> Any:
    field = definition.fields[name]
    try:
        value = coerce_value(field.type, value)
    except TypeError as e:
        raise ValidationError(f"{model}.{name}: {e}") from None
    if value is None and field.required:
        raise ValidationError(f"{model}.{name} is required")
    return value


def prepare_create(
    model: str,
    definition: ModelDefinition,
    data: Mapping[str, Any],
    generate_id: Callable[[], Any],
) -> dict[str, Any]:
    """Build a complete record for insertion.

    Fields are emitted in declaration order after ``id``.  Absent fields take
    their default (callables are invoked now) or ``None``.  An identifier is
    generated when ``data`` has none.

    Raises:
        ValidationError: Unknown field, wrong type, or missing required field.
    """
    _check_known_fields(model, definition, data)

    record: dict[str, Any] = {}
    supplied_id = data.get(ID_FIELD)
    record[ID_FIELD] = supplied_id if supplied_id is not None else generate_id()

    for name, field in definition.fields.items():
        if name in data:
            value = data[name]
        elif callable(field.default_value):
            value = field.default_value()
        else:
            value = field.default_value
        record[name] = _coerce(model, definition, name, value)

    return record


def prepare_update(
    model: str,
    definition: ModelDefinition,
    update: Mapping[str, Any],
) -> dict[str, Any]:
    """Validate a partial update and return the coerced changes.

    Raises:
        ValidationError: Unknown field, attempt to change ``id``, wrong type,
            or a required field set to ``None``.
    """
    _check_known_fields(model, definition, update)
    if ID_FIELD in update:
        raise ValidationError(f"{model}.{ID_FIELD} cannot be updated")
    return {
        name: _coerce(model, definition, name, value) for name, value in update.items()
    }


def project(record: Mapping[str, Any], select: list[str] | None) -> dict[str, Any]:
    """Copy of *record*, restricted to *select* when given."""
    if not select:
        return dict(record)
    return {name: record.get(name) for name in select}
