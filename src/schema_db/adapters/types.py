"""Query option and adapter configuration models.

Adapters accept these models or plain dicts/values in the same shape; the
``parse_*`` helpers normalize and validate caller input against a model
definition before any storage access.

Usage:
    from schema_db.adapters.types import Where, SortBy

    rows = await adapter.find_many(
        "book",
        where=[
            Where(field="authorId", value=author_id),
            {"field": "title", "operator": "starts_with", "value": "The"},
        ],
        sort_by=SortBy(field="publishedAt", direction="desc"),
        limit=10,
    )
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from schema_db.errors import SchemaError, ValidationError
from schema_db.schema.models import ID_FIELD, ModelDefinition
from schema_db.schema.relations import ModelRelations, Relation
from schema_db.schema.types import FieldType, coerce_value


# ============================================================================
# Where / Sort / Join
# ============================================================================


class WhereOperator(str, Enum):
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"


class Connector(str, Enum):
    AND = "AND"
    OR = "OR"


class Where(BaseModel):
    """One predicate of a where clause."""

    model_config = ConfigDict(frozen=True)

    field: str
    value: Any = None
    operator: WhereOperator = WhereOperator.EQ
    connector: Connector = Connector.AND


class SortBy(BaseModel):
    """Single-field sort."""

    model_config = ConfigDict(frozen=True)

    field: str
    direction: Literal["asc", "desc"] = "asc"


class JoinOption(BaseModel):
    """Per-relation join settings."""

    model_config = ConfigDict(frozen=True)

    limit: int | None = Field(default=None, ge=0)


# ============================================================================
# Adapter Options
# ============================================================================


class ExperimentalOptions(BaseModel):
    """Opt-in features."""

    joins: bool = False  # in-process joins instead of one query per relation


class AdapterOptions(BaseModel):
    """Backend-independent adapter configuration."""

    experimental: ExperimentalOptions = Field(default_factory=ExperimentalOptions)
    use_number_id: bool = False  # sequential integer ids instead of uuid hex
    debug_logs: bool = False


def parse_options(options: "AdapterOptions | Mapping[str, Any] | None") -> AdapterOptions:
    """Normalize adapter options given as a model, dict, or ``None``."""
    if options is None:
        return AdapterOptions()
    if isinstance(options, AdapterOptions):
        return options
    return AdapterOptions.model_validate(options)


# ============================================================================
# Parsing Helpers
# ============================================================================


def _field_type(definition: ModelDefinition, field: str, use_number_id: bool) -> FieldType:
    if field == ID_FIELD:
        return FieldType.NUMBER if use_number_id else FieldType.STRING
    return definition.fields[field].type


def _check_field(model: str, definition: ModelDefinition, field: str) -> None:
    if not definition.has_field(field):
        raise ValidationError(f"Unknown field '{field}' on model '{model}'")


def parse_where(
    model: str,
    definition: ModelDefinition,
    where: Iterable["Where | Mapping[str, Any]"] | None,
    use_number_id: bool = False,
) -> list[Where]:
    """Validate a where clause and coerce date operands.

    Raises:
        ValidationError: Malformed predicate, unknown field, non-list operand
            for ``in``/``not_in``, or an operand that does not fit a date field.
    """
    if not where:
        return []

    parsed: list[Where] = []
    for item in where:
        try:
            clause = item if isinstance(item, Where) else Where.model_validate(item)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid where clause {item!r}: {e}") from e
        _check_field(model, definition, clause.field)

        value = clause.value
        if clause.operator in (WhereOperator.IN, WhereOperator.NOT_IN):
            if not isinstance(value, (list, tuple, set, frozenset)):
                raise ValidationError(
                    f"Operator '{clause.operator.value}' requires a list value"
                )
            value = list(value)

        if _field_type(definition, clause.field, use_number_id) is FieldType.DATE:
            try:
                if isinstance(value, list):
                    value = [coerce_value(FieldType.DATE, v) for v in value]
                else:
                    value = coerce_value(FieldType.DATE, value)
            except TypeError as e:
                raise ValidationError(f"{model}.{clause.field}: {e}") from None

        if value is not clause.value:
            clause = clause.model_copy(update={"value": value})
        parsed.append(clause)
    return parsed


def parse_sort(
    model: str,
    definition: ModelDefinition,
    sort_by: "SortBy | Mapping[str, Any] | None",
) -> SortBy | None:
    """Validate a sort option."""
    if sort_by is None:
        return None
    try:
        sort = sort_by if isinstance(sort_by, SortBy) else SortBy.model_validate(sort_by)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid sortBy {sort_by!r}: {e}") from e
    _check_field(model, definition, sort.field)
    return sort


def parse_select(
    model: str, definition: ModelDefinition, select: list[str] | None
) -> list[str] | None:
    """Validate a field projection."""
    if select:
        for field in select:
            _check_field(model, definition, field)
    return select or None


def parse_join(
    relations: ModelRelations,
    join: Mapping[str, "bool | JoinOption | Mapping[str, Any]"] | None,
) -> list[tuple[Relation, JoinOption]]:
    """Resolve requested join names to relations.

    ``False`` entries are skipped; ``True`` means no limit.

    Raises:
        ValidationError: Unknown relation name or malformed join option.
    """
    if not join:
        return []

    resolved: list[tuple[Relation, JoinOption]] = []
    for name, option in join.items():
        if option is False or option is None:
            continue
        try:
            relation = relations.by_name(name)
        except SchemaError as e:
            raise ValidationError(str(e)) from None
        if option is True:
            option = JoinOption()
        elif not isinstance(option, JoinOption):
            try:
                option = JoinOption.model_validate(option)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid join option for '{name}': {e}") from e
        resolved.append((relation, option))
    return resolved
