"""Referential actions for in-memory deletes.

``plan_delete`` walks reverse relations from the records being deleted and
computes everything the delete implies without touching the tables; only
``apply_plan`` mutates.  A ``restrict`` violation anywhere in the plan
therefore leaves the store unchanged, which keeps ``delete_many`` batches
all-or-nothing.

Rules per reverse relation of a deleted record:

- ``cascade``: referencing records are deleted too, recursively.
- ``set null``: the foreign key of referencing records is set to ``None``
  (skipped for records that are themselves being deleted).
- ``restrict``: the whole delete fails if a referencing record survives it.
- ``no action``: referencing records are left as they are.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from schema_db.errors import ReferentialIntegrityError
from schema_db.schema.models import ID_FIELD, SchemaDefinition
from schema_db.schema.relations import Relation, get_relations
from schema_db.schema.types import OnDelete

logger = logging.getLogger(__name__)


@dataclass
class DeletePlan:
    """Record ids to remove and foreign keys to clear, per model key."""

    deletions: dict[str, dict[Any, None]] = field(default_factory=dict)  # ordered id sets
    set_null: list[tuple[str, Any, str]] = field(default_factory=list)  # (model, id, field)

    def schedules(self, model: str, record_id: Any) -> bool:
        return record_id in self.deletions.get(model, {})

    def schedule(self, model: str, record_id: Any) -> None:
        self.deletions.setdefault(model, {})[record_id] = None

    @property
    def deleted_count(self) -> int:
        return sum(len(ids) for ids in self.deletions.values())


def _children(tables: dict[str, list[dict]], relation: Relation, record: dict) -> list[dict]:
    key_value = record.get(relation.target_field)
    if key_value is None:
        return []
    return [
        child
        for child in tables.get(relation.model, [])
        if child.get(relation.field) == key_value
    ]


def plan_delete(
    schema: SchemaDefinition,
    tables: dict[str, list[dict]],
    model: str,
    records: list[dict],
) -> DeletePlan:
    """Compute the full effect of deleting *records* from *model*.

    Raises:
        ReferentialIntegrityError: A ``restrict`` relation has a referencing
            record that is not deleted by the same plan.
    """
    plan = DeletePlan()
    restricted: list[tuple[str, Relation, list[dict]]] = []
    nulled: list[tuple[Relation, list[dict]]] = []

    stack: list[tuple[str, dict]] = [(model, record) for record in reversed(records)]
    while stack:
        current_model, record = stack.pop()
        if plan.schedules(current_model, record[ID_FIELD]):
            continue  # visited (also breaks cycles)
        plan.schedule(current_model, record[ID_FIELD])

        for relation in get_relations(schema, current_model).reverse:
            children = _children(tables, relation, record)
            if not children:
                continue
            if relation.on_delete is OnDelete.CASCADE:
                stack.extend((relation.model, child) for child in reversed(children))
            elif relation.on_delete is OnDelete.SET_NULL:
                nulled.append((relation, children))
            elif relation.on_delete is OnDelete.RESTRICT:
                restricted.append((current_model, relation, children))

    for parent_model, relation, children in restricted:
        if any(not plan.schedules(relation.model, c[ID_FIELD]) for c in children):
            raise ReferentialIntegrityError(parent_model, relation.model, relation.field)

    for relation, children in nulled:
        for child in children:
            if not plan.schedules(relation.model, child[ID_FIELD]):
                plan.set_null.append((relation.model, child[ID_FIELD], relation.field))

    return plan


def apply_plan(tables: dict[str, list[dict]], plan: DeletePlan) -> None:
    """Apply a plan produced by ``plan_delete``.  Tables are edited in place."""
    for model, record_id, field_name in plan.set_null:
        for row in tables[model]:
            if row[ID_FIELD] == record_id:
                row[field_name] = None
        logger.debug(f"Set {model}.{field_name}=NULL on {record_id}")

    for model, ids in plan.deletions.items():
        table = tables[model]
        table[:] = [row for row in table if row[ID_FIELD] not in ids]
        logger.debug(f"Deleted {len(ids)} record(s) from {model}")
