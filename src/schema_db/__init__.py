"""schema-db: schema-driven storage with swappable async adapters.

Define models once, compose them with plugins, and read and write records
through one async adapter contract, in memory or on PostgreSQL/SQLite.

Usage:
    from schema_db import define_db, create_adapter

    db = define_db({
        "author": {"fields": {"name": {"type": "string", "required": True}}},
        "book": {"fields": {
            "title": {"type": "string", "required": True},
            "authorId": {"type": "string", "references": {"model": "author"}},
        }},
    })
    adapter = create_adapter(db, {"experimental": {"joins": True}})
"""

__version__ = "0.1.0"

# Adapters
from schema_db.adapters import (
    Adapter,
    AdapterOptions,
    AsyncSqlAdapter,
    JoinOption,
    MemoryAdapter,
    SortBy,
    Where,
)

# Errors
from schema_db.errors import (
    NotFoundError,
    ReferentialIntegrityError,
    SchemaDbError,
    SchemaError,
    UniqueConstraintViolation,
    ValidationError,
)

# Config
from schema_db.config import DatabaseConfig, DatabaseProfile, load_db_config

# Factory
from schema_db.factory import (
    ProfileNotFoundError,
    connect_and_validate,
    create_adapter,
    get_adapter,
    memory_adapter,
    resolve_url,
)

# Schema
from schema_db.schema import (
    DEFAULT_AUTH_MODELS,
    DatabaseDefinition,
    DbPlugin,
    FieldDefinition,
    FieldType,
    ModelDefinition,
    OnDelete,
    Relation,
    SchemaDefinition,
    create_db_plugin,
    define_db,
    exclude_models,
    generate_ddl,
    get_relations,
    validate_schema,
)

# Memory store
from schema_db.memory.store import MemoryStore

__all__ = [
    # Adapters
    "Adapter",
    "AdapterOptions",
    "AsyncSqlAdapter",
    "JoinOption",
    "MemoryAdapter",
    "MemoryStore",
    "SortBy",
    "Where",
    # Errors
    "NotFoundError",
    "ReferentialIntegrityError",
    "SchemaDbError",
    "SchemaError",
    "UniqueConstraintViolation",
    "ValidationError",
    # Config
    "DatabaseConfig",
    "DatabaseProfile",
    "load_db_config",
    # Factory
    "ProfileNotFoundError",
    "connect_and_validate",
    "create_adapter",
    "get_adapter",
    "memory_adapter",
    "resolve_url",
    # Schema
    "DEFAULT_AUTH_MODELS",
    "DatabaseDefinition",
    "DbPlugin",
    "FieldDefinition",
    "FieldType",
    "ModelDefinition",
    "OnDelete",
    "Relation",
    "SchemaDefinition",
    "create_db_plugin",
    "define_db",
    "exclude_models",
    "generate_ddl",
    "get_relations",
    "validate_schema",
]
