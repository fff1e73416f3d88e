"""Pydantic models describing models, fields and relationships.

Schema fragments may use the Python names (``default_value``, ``on_delete``,
``model_name``, ``field_name``) or the camelCase spellings (``defaultValue``,
``onDelete``, ``modelName``, ``fieldName``).

Usage:
    from schema_db.schema.models import FieldDefinition, ModelDefinition

    book = ModelDefinition(fields={
        "title": FieldDefinition(type="string", required=True),
        "authorId": FieldDefinition(
            type="string",
            references={"model": "author", "field": "id", "onDelete": "cascade"},
        ),
    })
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from schema_db.errors import SchemaError
from schema_db.schema.types import FieldType, OnDelete, coerce_value

ID_FIELD = "id"


# ============================================================================
# Field / Model Definitions
# ============================================================================


class FieldReference(BaseModel):
    """Foreign key metadata on a field."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    model: str                      # target model key or model name
    field: str = ID_FIELD           # target field
    on_delete: OnDelete = Field(default=OnDelete.CASCADE, alias="onDelete")

    @field_validator("on_delete", mode="before")
    @classmethod
    def _normalize_on_delete(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return OnDelete(value)
            except ValueError:
                raise ValueError(
                    f"Unknown onDelete policy {value!r}; expected one of "
                    f"{[m.value for m in OnDelete]}"
                ) from None
        return value


class FieldDefinition(BaseModel):
    """Definition of one model field."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: FieldType
    required: bool = False
    unique: bool = False
    default_value: Any = Field(default=None, alias="defaultValue")  # value or zero-arg callable
    references: FieldReference | None = None
    field_name: str | None = Field(default=None, alias="fieldName")  # physical column name

    @model_validator(mode="after")
    def _check_default(self) -> "FieldDefinition":
        if self.default_value is not None and not callable(self.default_value):
            try:
                coerce_value(self.type, self.default_value)
            except TypeError as e:
                raise ValueError(f"Invalid default value: {e}") from None
        if (
            self.required
            and self.references is not None
            and self.references.on_delete is OnDelete.SET_NULL
        ):
            raise ValueError("A required reference cannot use onDelete 'set null'")
        return self

    @property
    def has_default(self) -> bool:
        return self.default_value is not None


class ModelDefinition(BaseModel):
    """A named entity type and its ordered fields.

    ``model_name`` is the physical table name; when empty it is filled with
    the model key as the model is placed into a ``SchemaDefinition``.
    """

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, protected_namespaces=()
    )

    model_name: str = Field(default="", alias="modelName")
    fields: dict[str, FieldDefinition] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_fields(self) -> "ModelDefinition":
        if ID_FIELD in self.fields:
            raise ValueError(f"Field '{ID_FIELD}' is implicit and cannot be declared")

        seen: dict[str, str] = {}
        for name, field in self.fields.items():
            column = field.field_name or name
            if column in seen:
                raise ValueError(
                    f"Fields '{seen[column]}' and '{name}' both map to column '{column}'"
                )
            seen[column] = name
        return self

    def column_name(self, field: str) -> str:
        """Physical column name for *field*."""
        if field == ID_FIELD:
            return ID_FIELD
        return self.fields[field].field_name or field

    def has_field(self, field: str) -> bool:
        return field == ID_FIELD or field in self.fields


# ============================================================================
# Finalized Schema
# ============================================================================


class SchemaDefinition(Mapping):
    """Finalized, read-only mapping of model key to ``ModelDefinition``.

    Construction validates cross-model invariants: every reference points at
    a defined model and field, and no two models share a table name.  The
    instance never changes afterwards: each model is copied with its
    ``fields`` behind a read-only proxy.  Derived data (relations) is cached
    on it and therefore shared by every adapter reading the same snapshot.
    """

    def __init__(self, models: Mapping[str, ModelDefinition | dict]) -> None:
        finalized: dict[str, ModelDefinition] = {}
        for key, definition in models.items():
            if isinstance(definition, dict):
                definition = ModelDefinition.model_validate(definition)
            finalized[key] = definition.model_copy(update={
                "model_name": definition.model_name or key,
                "fields": MappingProxyType(dict(definition.fields)),
            })

        self._models = MappingProxyType(finalized)
        self._relations: dict[str, Any] = {}
        self._validate()

    def _validate(self) -> None:
        table_names: dict[str, str] = {}
        for key, definition in self._models.items():
            other = table_names.get(definition.model_name)
            if other is not None:
                raise SchemaError(
                    f"Models '{other}' and '{key}' share model name "
                    f"'{definition.model_name}'"
                )
            table_names[definition.model_name] = key

        for key, definition in self._models.items():
            for name, field in definition.fields.items():
                ref = field.references
                if ref is None:
                    continue
                target_key = self._find_key(ref.model)
                if target_key is None:
                    raise SchemaError(
                        f"{key}.{name} references unknown model '{ref.model}'"
                    )
                if not self._models[target_key].has_field(ref.field):
                    raise SchemaError(
                        f"{key}.{name} references unknown field "
                        f"'{target_key}.{ref.field}'"
                    )

    def _find_key(self, name: str) -> str | None:
        if name in self._models:
            return name
        for key, definition in self._models.items():
            if definition.model_name == name:
                return key
        return None

    # Mapping protocol

    def __getitem__(self, key: str) -> ModelDefinition:
        return self._models[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def __repr__(self) -> str:
        return f"SchemaDefinition({list(self._models)})"

    def resolve_key(self, name: str) -> str:
        """Resolve a model key or model name to the model key.

        Raises:
            SchemaError: If no model matches.
        """
        key = self._find_key(name)
        if key is None:
            raise SchemaError(
                f"Unknown model '{name}'. Available: {', '.join(self._models)}"
            )
        return key

    def get_model(self, name: str) -> ModelDefinition:
        """Look up a model by key or model name."""
        return self._models[self.resolve_key(name)]

    def target_key(self, reference: FieldReference) -> str:
        """Model key a reference points at."""
        return self.resolve_key(reference.model)


# ============================================================================
# Validation Result Models
# ============================================================================


class ColumnDiff(BaseModel):
    """A missing column detected during validation."""

    table: str
    column: str
    message: str = ""


class SchemaValidationResult(BaseModel):
    """Result of comparing a live database with a schema.

    Example:
        >>> result = SchemaValidationResult(valid=True)
        >>> result.error_count
        0
        >>> result.format_report()
        'Schema valid'
    """

    valid: bool
    missing_tables: list[str] = Field(default_factory=list)
    missing_columns: list[ColumnDiff] = Field(default_factory=list)
    extra_tables: list[str] = Field(default_factory=list)  # Warning only

    @property
    def error_count(self) -> int:
        return len(self.missing_tables) + len(self.missing_columns)

    def format_report(self) -> str:
        """Format validation result as human-readable report."""
        if self.valid and not self.extra_tables:
            return "Schema valid"

        lines = ["Schema valid" if self.valid else "Schema validation failed:"]

        if self.missing_tables:
            lines.append(f"\n  Missing tables ({len(self.missing_tables)}):")
            lines.extend(f"    - {table}" for table in self.missing_tables)

        if self.missing_columns:
            lines.append(f"\n  Missing columns ({len(self.missing_columns)}):")
            lines.extend(
                f"    - {diff.table}.{diff.column}" for diff in self.missing_columns
            )

        if self.extra_tables:
            lines.append(f"\n  Extra tables (warning): {', '.join(self.extra_tables)}")

        return "\n".join(lines)


class ConnectionResult(BaseModel):
    """Result of connect_and_validate()."""

    success: bool
    profile_name: str | None = None
    provider: str | None = None
    schema_valid: bool | None = None  # None when not validated
    schema_report: SchemaValidationResult | None = None
    error: str | None = None
