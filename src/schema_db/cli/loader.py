"""Locate a schema for the CLI.

A target is one of:

- ``package.module:attribute``
- ``path/to/file.py`` or ``path/to/file.py:attribute``
- ``package.module``

Without an attribute the module is searched for ``db_schema``, then ``db``,
then any module-level object with a ``get_schema`` method.
"""

import importlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from schema_db.errors import SchemaDbError
from schema_db.schema.builder import as_schema
from schema_db.schema.models import SchemaDefinition

_DEFAULT_ATTRIBUTES = ("db_schema", "db")


class SchemaLoadError(Exception):
    """Raised when a schema target cannot be imported or is not a schema."""

    pass


def _load_file(path: Path) -> ModuleType:
    if not path.exists():
        raise SchemaLoadError(f"Schema file not found: {path}")

    module_name = f"_schema_db_target_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, str(path))
    if spec is None or spec.loader is None:
        raise SchemaLoadError(f"Could not create module spec for {path}")

    module = importlib.util.module_from_spec(spec)
    # Register in sys.modules so dataclasses and pydantic can resolve __module__
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise SchemaLoadError(f"Failed to execute {path}: {e}") from e
    return module


def _load_module(name: str) -> ModuleType:
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    try:
        return importlib.import_module(name)
    except ImportError as e:
        raise SchemaLoadError(f"Could not import module '{name}': {e}") from e


def _find_default(module: ModuleType) -> Any:
    for attribute in _DEFAULT_ATTRIBUTES:
        if hasattr(module, attribute):
            return getattr(module, attribute)
    for value in vars(module).values():
        if not isinstance(value, type) and callable(getattr(value, "get_schema", None)):
            return value
    raise SchemaLoadError(
        f"No schema found in '{module.__name__}'. Define 'db_schema' or 'db', "
        f"or pass module:attribute"
    )


def load_schema(target: str) -> SchemaDefinition:
    """Import *target* and return its finalized schema.

    Raises:
        SchemaLoadError: If the target cannot be imported, the attribute is
            missing, or the object is not a schema definition.
    """
    location, _, attribute = target.partition(":")
    if not location:
        raise SchemaLoadError(f"Invalid schema target: '{target}'")

    if location.endswith(".py"):
        module = _load_file(Path(location))
    else:
        module = _load_module(location)

    if attribute:
        if not hasattr(module, attribute):
            raise SchemaLoadError(f"'{location}' has no attribute '{attribute}'")
        obj = getattr(module, attribute)
    else:
        obj = _find_default(module)

    try:
        if not isinstance(obj, SchemaDefinition) and hasattr(obj, "get_schema"):
            obj = obj.get_schema()
        return as_schema(obj)
    except (SchemaDbError, TypeError) as e:
        raise SchemaLoadError(f"Invalid schema in '{target}': {e}") from e
