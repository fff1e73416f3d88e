"""Schema builder and plugin composer.

``define_db`` starts a ``DatabaseDefinition`` from an initial fragment;
``use`` merges plugin fragments into a new definition; ``get_schema``
finalizes the result once into a read-only ``SchemaDefinition``.

Usage:
    from schema_db import define_db, create_db_plugin

    comments = create_db_plugin("comments", {
        "comment": {"fields": {"body": {"type": "string", "required": True}}},
    })

    db = define_db({
        "post": {"fields": {"title": {"type": "string", "required": True}}},
    }).use(comments)

    schema = db.get_schema()
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from schema_db.errors import SchemaError
from schema_db.schema.models import ModelDefinition, SchemaDefinition


@dataclass(frozen=True)
class DbPlugin:
    """A named schema fragment."""

    name: str
    schema: Mapping[str, ModelDefinition]

    def __post_init__(self) -> None:
        object.__setattr__(self, "schema", _parse_fragment(self.schema, source=self.name))


def create_db_plugin(name: str, schema: Mapping[str, Any]) -> DbPlugin:
    """Create a plugin from a schema fragment.

    Raises:
        SchemaError: If any model in the fragment is invalid.
    """
    return DbPlugin(name, schema)


def _parse_fragment(
    fragment: Mapping[str, Any], source: str
) -> dict[str, ModelDefinition]:
    """Validate every model of a fragment, keeping key order."""
    models: dict[str, ModelDefinition] = {}
    for key, definition in fragment.items():
        if isinstance(definition, ModelDefinition):
            models[key] = definition
            continue
        try:
            models[key] = ModelDefinition.model_validate(definition)
        except PydanticValidationError as e:
            raise SchemaError(f"Invalid model '{key}' in {source}: {e}") from e
    return models


class DatabaseDefinition:
    """Accumulated schema fragments.

    Instances are never mutated: ``use`` returns a new definition.
    """

    def __init__(
        self,
        models: dict[str, ModelDefinition],
        plugins: tuple[str, ...] = (),
    ) -> None:
        self._models = dict(models)
        self._plugins = plugins
        self._schema: SchemaDefinition | None = None

    @property
    def plugins(self) -> tuple[str, ...]:
        """Names of applied plugins, in order."""
        return self._plugins

    def use(self, plugin: DbPlugin) -> "DatabaseDefinition":
        """Merge a plugin's models into a new definition.

        Raises:
            SchemaError: If the plugin was already applied or one of its model
                keys is already defined.
        """
        if plugin.name in self._plugins:
            raise SchemaError(f"Plugin '{plugin.name}' is already applied")

        collisions = sorted(set(plugin.schema) & set(self._models))
        if collisions:
            raise SchemaError(
                f"Plugin '{plugin.name}' redefines existing model(s): "
                f"{', '.join(collisions)}"
            )

        return DatabaseDefinition(
            {**self._models, **plugin.schema},
            plugins=(*self._plugins, plugin.name),
        )

    def get_schema(self) -> SchemaDefinition:
        """Finalize and return the schema snapshot (same object on every call).

        Raises:
            SchemaError: If a reference points at an unknown model or field.
        """
        if self._schema is None:
            self._schema = SchemaDefinition(self._models)
        return self._schema


def define_db(fragment: Mapping[str, Any]) -> DatabaseDefinition:
    """Start a database definition from an initial schema fragment."""
    return DatabaseDefinition(_parse_fragment(fragment, source="define_db()"))


def as_schema(db: "DatabaseDefinition | SchemaDefinition") -> SchemaDefinition:
    """Return the finalized schema of a definition, or the schema itself."""
    if isinstance(db, SchemaDefinition):
        return db
    if isinstance(db, DatabaseDefinition):
        return db.get_schema()
    raise TypeError(
        f"Expected DatabaseDefinition or SchemaDefinition, got {type(db).__name__}"
    )
