"""Database adapters package.

Provides the ``Adapter`` Protocol, the query option models, and the two
backends: ``MemoryAdapter`` (in-process reference engine) and
``AsyncSqlAdapter`` (PostgreSQL/SQLite over SQLAlchemy).

Usage:
    from schema_db.adapters import Adapter, MemoryAdapter, AsyncSqlAdapter
"""

from schema_db.adapters.base import Adapter
from schema_db.adapters.types import (
    AdapterOptions,
    Connector,
    ExperimentalOptions,
    JoinOption,
    SortBy,
    Where,
    WhereOperator,
)
from schema_db.adapters.memory import MemoryAdapter
from schema_db.adapters.sql import AsyncSqlAdapter

__all__ = [
    "Adapter",
    "AdapterOptions",
    "Connector",
    "ExperimentalOptions",
    "JoinOption",
    "SortBy",
    "Where",
    "WhereOperator",
    "MemoryAdapter",
    "AsyncSqlAdapter",
]
