"""Structured exclusion of reserved models before code generation.

Generators emit text for every model in a schema.  Models owned by another
system (for example authentication tables that already exist) are removed
from the schema itself rather than cut out of the generated text.

Usage:
    from schema_db.schema.filter import DEFAULT_AUTH_MODELS, exclude_models

    app_schema = exclude_models(schema, DEFAULT_AUTH_MODELS)
"""

from collections.abc import Iterable

from schema_db.schema.models import ModelDefinition, SchemaDefinition

DEFAULT_AUTH_MODELS: tuple[str, ...] = (
    "user",
    "session",
    "account",
    "verification",
    "rateLimit",
)


def exclude_models(schema: SchemaDefinition, names: Iterable[str]) -> SchemaDefinition:
    """Return a new schema without the named models.

    Names match model keys or model names, case-insensitively.  Fields of the
    remaining models that referenced a removed model are kept as plain
    fields without ``references``.
    """
    excluded = {name.lower() for name in names}
    removed = {
        key
        for key, definition in schema.items()
        if key.lower() in excluded or definition.model_name.lower() in excluded
    }
    if not removed:
        return schema

    kept: dict[str, ModelDefinition] = {}
    for key, definition in schema.items():
        if key in removed:
            continue
        fields = {}
        for name, field in definition.fields.items():
            if field.references and schema.target_key(field.references) in removed:
                field = field.model_copy(update={"references": None})
            fields[name] = field
        kept[key] = definition.model_copy(update={"fields": fields})

    return SchemaDefinition(kept)
