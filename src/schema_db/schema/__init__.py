"""Schema definition, composition and derived metadata.

Provides the field/model definitions, the builder and plugin composer,
relation resolution, structural model filtering, DDL generation and schema
comparison.

Usage:
    from schema_db.schema import define_db, get_relations, generate_ddl
"""

from schema_db.schema.builder import (
    DatabaseDefinition,
    DbPlugin,
    as_schema,
    create_db_plugin,
    define_db,
)
from schema_db.schema.comparator import expected_columns, validate_schema
from schema_db.schema.ddl import build_metadata, generate_ddl
from schema_db.schema.filter import DEFAULT_AUTH_MODELS, exclude_models
from schema_db.schema.models import (
    ColumnDiff,
    ConnectionResult,
    FieldDefinition,
    FieldReference,
    ModelDefinition,
    SchemaDefinition,
    SchemaValidationResult,
)
from schema_db.schema.relations import (
    ModelRelations,
    Relation,
    dependency_order,
    get_relations,
)
from schema_db.schema.types import FieldType, OnDelete

__all__ = [
    "DatabaseDefinition",
    "DbPlugin",
    "as_schema",
    "create_db_plugin",
    "define_db",
    "expected_columns",
    "validate_schema",
    "build_metadata",
    "generate_ddl",
    "DEFAULT_AUTH_MODELS",
    "exclude_models",
    "ColumnDiff",
    "ConnectionResult",
    "FieldDefinition",
    "FieldReference",
    "ModelDefinition",
    "SchemaDefinition",
    "SchemaValidationResult",
    "ModelRelations",
    "Relation",
    "dependency_order",
    "get_relations",
    "FieldType",
    "OnDelete",
]
