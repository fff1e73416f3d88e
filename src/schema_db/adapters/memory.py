"""In-memory reference adapter.

Implements the ``Adapter`` protocol over a ``MemoryStore``: where-clause
evaluation, stable typed sorting, pagination, joins, unique constraints and
referential actions on delete, all driven by the schema.

Every operation runs synchronously under the store lock, so an operation
never interleaves with another one even though the methods are coroutines.
Foreign-key values are not checked on write; they are only interpreted by
joins and deletes.

Usage:
    from schema_db import define_db
    from schema_db.adapters.memory import MemoryAdapter

    adapter = MemoryAdapter(db, {"experimental": {"joins": True}})
    author = await adapter.create("author", {"name": "Jane"})
    found = await adapter.find_one(
        "author", [{"field": "id", "value": author["id"]}], join={"book": True}
    )
"""

import logging
from collections.abc import Mapping
from typing import Any

from schema_db.adapters.joins import assemble, fan_out_relation, resolve_relation
from schema_db.adapters.types import (
    AdapterOptions,
    JoinOption,
    SortBy,
    Where,
    parse_join,
    parse_options,
    parse_select,
    parse_sort,
    parse_where,
)
from schema_db.errors import NotFoundError, UniqueConstraintViolation
from schema_db.memory.cascade import apply_plan, plan_delete
from schema_db.memory.sort import sort_records
from schema_db.memory.store import MemoryStore
from schema_db.memory.where import filter_records
from schema_db.records import prepare_create, prepare_update
from schema_db.schema.builder import DatabaseDefinition, as_schema
from schema_db.schema.models import ID_FIELD, ModelDefinition, SchemaDefinition
from schema_db.schema.relations import Relation, get_relations
from schema_db.schema.types import FieldType

logger = logging.getLogger(__name__)


class MemoryAdapter:
    """In-memory implementation of the ``Adapter`` protocol.

    Args:
        db: Finalized schema, or a ``DatabaseDefinition`` to finalize.
        options: ``AdapterOptions`` or an equivalent dict.
        store: Store to operate on.  A new empty store is created when
            omitted; pass a shared store to let adapters see the same data.
    """

    def __init__(
        self,
        db: DatabaseDefinition | SchemaDefinition,
        options: AdapterOptions | Mapping[str, Any] | None = None,
        store: MemoryStore | None = None,
    ) -> None:
        self._schema = as_schema(db)
        self._options = parse_options(options)
        self._store = store if store is not None else MemoryStore()
        self._store.ensure_tables(self._schema)

    @property
    def schema(self) -> SchemaDefinition:
        return self._schema

    @property
    def options(self) -> AdapterOptions:
        return self._options

    @property
    def store(self) -> MemoryStore:
        return self._store

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    def _resolve(self, model: str) -> tuple[str, ModelDefinition]:
        key = self._schema.resolve_key(model)
        return key, self._schema[key]

    def _debug(self, operation: str, model: str, **details: Any) -> None:
        if self._options.debug_logs:
            logger.debug(f"[memory] {operation} {model} {details}")

    def _field_type(self, definition: ModelDefinition, field: str) -> FieldType:
        if field == ID_FIELD:
            return FieldType.NUMBER if self._options.use_number_id else FieldType.STRING
        return definition.fields[field].type

    def _query(
        self,
        key: str,
        definition: ModelDefinition,
        where: list[Where],
        sort: SortBy | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict]:
        """Matching stored rows (not copies), sorted and paginated."""
        rows = filter_records(self._store.tables[key], where)
        if sort is not None:
            rows = sort_records(rows, sort, self._field_type(definition, sort.field))
        if offset:
            rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]
        return rows

    def _check_unique(
        self,
        key: str,
        definition: ModelDefinition,
        candidates: list[dict],
        replacing: set[Any],
    ) -> None:
        """Raise if *candidates* collide with each other or with stored rows.

        Rows whose id is in *replacing* are the ones being rewritten and are
        not compared against.  ``None`` never collides.
        """
        unique_fields = [ID_FIELD] + [
            name for name, field in definition.fields.items() if field.unique
        ]
        table = self._store.tables[key]
        for name in unique_fields:
            seen = {
                row.get(name)
                for row in table
                if row[ID_FIELD] not in replacing and row.get(name) is not None
            }
            for candidate in candidates:
                value = candidate.get(name)
                if value is None:
                    continue
                if value in seen:
                    raise UniqueConstraintViolation(key, name, value)
                seen.add(value)

    # ------------------------------------------------------------------
    # CRUD Methods
    # ------------------------------------------------------------------

    async def create(self, model: str, data: Mapping[str, Any]) -> dict:
        """Validate, apply defaults, enforce unique fields, and append."""
        key, definition = self._resolve(model)
        with self._store.lock:
            record = prepare_create(
                key,
                definition,
                data,
                lambda: self._store.next_id(key, self._options.use_number_id),
            )
            self._check_unique(key, definition, [record], replacing=set())
            self._store.tables[key].append(record)
            self._store.observe_id(key, record[ID_FIELD])
            self._debug("create", key, id=record[ID_FIELD])
            return dict(record)

    async def find_one(
        self,
        model: str,
        where: list[Where | Mapping[str, Any]],
        join: Mapping[str, Any] | None = None,
        select: list[str] | None = None,
    ) -> dict | None:
        """First matching record in table order, or ``None``."""
        rows = await self.find_many(model, where=where, limit=1, join=join, select=select)
        return rows[0] if rows else None

    async def find_many(
        self,
        model: str,
        where: list[Where | Mapping[str, Any]] | None = None,
        sort_by: SortBy | Mapping[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
        join: Mapping[str, Any] | None = None,
        select: list[str] | None = None,
    ) -> list[dict]:
        """Filter, sort, paginate, then attach requested relations."""
        key, definition = self._resolve(model)
        use_number_id = self._options.use_number_id
        clauses = parse_where(key, definition, where, use_number_id)
        sort = parse_sort(key, definition, sort_by)
        fields = parse_select(key, definition, select)
        joins: list[tuple[Relation, JoinOption]] = parse_join(
            get_relations(self._schema, key), join
        )

        with self._store.lock:
            rows = self._query(key, definition, clauses, sort, limit, offset)
            self._debug("find_many", key, matched=len(rows))
            if not joins or self._options.experimental.joins:
                attachments = {
                    relation.name: resolve_relation(
                        rows, relation, option, self._store.tables[relation.related_model]
                    )
                    for relation, option in joins
                }
                return assemble(rows, fields, attachments)
            rows = [dict(row) for row in rows]

        # One query per base record and relation
        attachments = {}
        for relation, option in joins:
            attachments[relation.name] = await fan_out_relation(self, rows, relation, option)
        return assemble(rows, fields, attachments)

    async def update(
        self,
        model: str,
        where: list[Where | Mapping[str, Any]],
        update: Mapping[str, Any],
    ) -> dict:
        """Update the first matching record.

        Raises:
            NotFoundError: If nothing matches.
        """
        key, definition = self._resolve(model)
        clauses = parse_where(key, definition, where, self._options.use_number_id)
        changes = prepare_update(key, definition, update)
        with self._store.lock:
            rows = self._query(key, definition, clauses, limit=1)
            if not rows:
                raise NotFoundError(f"No '{key}' record matches {where!r}")
            return self._apply_update(key, definition, rows, changes)[0]

    async def update_many(
        self,
        model: str,
        where: list[Where | Mapping[str, Any]],
        update: Mapping[str, Any],
    ) -> list[dict]:
        """Update every matching record; an empty list when nothing matches."""
        key, definition = self._resolve(model)
        clauses = parse_where(key, definition, where, self._options.use_number_id)
        changes = prepare_update(key, definition, update)
        with self._store.lock:
            rows = self._query(key, definition, clauses)
            return self._apply_update(key, definition, rows, changes)

    def _apply_update(
        self,
        key: str,
        definition: ModelDefinition,
        rows: list[dict],
        changes: dict[str, Any],
    ) -> list[dict]:
        candidates = [{**row, **changes} for row in rows]
        self._check_unique(
            key, definition, candidates, replacing={row[ID_FIELD] for row in rows}
        )
        for row in rows:
            row.update(changes)
        self._debug("update", key, updated=len(rows))
        return [dict(row) for row in rows]

    async def delete(self, model: str, where: list[Where | Mapping[str, Any]]) -> None:
        """Delete the first matching record (no-op when nothing matches)."""
        key, definition = self._resolve(model)
        clauses = parse_where(key, definition, where, self._options.use_number_id)
        with self._store.lock:
            self._delete_rows(key, self._query(key, definition, clauses, limit=1))

    async def delete_many(self, model: str, where: list[Where | Mapping[str, Any]]) -> int:
        """Delete all matching records as one unit; returns how many matched."""
        key, definition = self._resolve(model)
        clauses = parse_where(key, definition, where, self._options.use_number_id)
        with self._store.lock:
            rows = self._query(key, definition, clauses)
            self._delete_rows(key, rows)
            return len(rows)

    def _delete_rows(self, key: str, rows: list[dict]) -> None:
        if not rows:
            return
        plan = plan_delete(self._schema, self._store.tables, key, rows)
        apply_plan(self._store.tables, plan)
        self._debug("delete", key, matched=len(rows), removed=plan.deleted_count)

    async def count(
        self, model: str, where: list[Where | Mapping[str, Any]] | None = None
    ) -> int:
        key, definition = self._resolve(model)
        clauses = parse_where(key, definition, where, self._options.use_number_id)
        with self._store.lock:
            return len(filter_records(self._store.tables[key], clauses))

    async def close(self) -> None:
        """Nothing to release; the store lives as long as its owner keeps it."""
        return None
