"""Relationship resolution derived from field-level references.

Relationships are never declared directly: every field with ``references``
yields one forward relation (on the referencing model) and one reverse
relation (on the referenced model).  A ``unique`` referencing field makes the
pair one-to-one, otherwise it is one-to-many.

Usage:
    from schema_db.schema.relations import get_relations

    relations = get_relations(schema, "author")
    for rel in relations.reverse:
        print(rel.name, rel.kind, rel.model, rel.field)
"""

from collections import defaultdict
from typing import Literal

from pydantic import BaseModel, ConfigDict

from schema_db.errors import SchemaError
from schema_db.schema.models import SchemaDefinition
from schema_db.schema.types import OnDelete

RelationKind = Literal["one-to-one", "one-to-many"]
RelationDirection = Literal["forward", "reverse"]


class Relation(BaseModel):
    """One side of a relationship.

    ``model``/``field`` is always the referencing side (the foreign key) and
    ``target_model``/``target_field`` the referenced side, whichever model
    the relation is viewed from.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    name: str                       # attribute name used by joins
    kind: RelationKind
    direction: RelationDirection
    model: str
    field: str
    target_model: str
    target_field: str
    on_delete: OnDelete

    @property
    def is_list(self) -> bool:
        """True when a join attaches a list rather than a single record."""
        return self.direction == "reverse" and self.kind == "one-to-many"

    @property
    def base_key_field(self) -> str:
        """Field of the base record used to match related records."""
        return self.field if self.direction == "forward" else self.target_field

    @property
    def related_model(self) -> str:
        """Model whose records are attached by a join."""
        return self.target_model if self.direction == "forward" else self.model

    @property
    def related_key_field(self) -> str:
        """Field of the related records compared with ``base_key_field``."""
        return self.target_field if self.direction == "forward" else self.field


class ModelRelations(BaseModel):
    """Forward and reverse relations of one model."""

    model_config = ConfigDict(frozen=True)

    forward: tuple[Relation, ...] = ()
    reverse: tuple[Relation, ...] = ()

    @property
    def all(self) -> tuple[Relation, ...]:
        return self.forward + self.reverse

    def by_name(self, name: str) -> Relation:
        """Return the relation joined under *name*.

        Raises:
            SchemaError: If the model has no such relation.
        """
        for relation in self.all:
            if relation.name == name:
                return relation
        available = ", ".join(r.name for r in self.all) or "none"
        raise SchemaError(f"Unknown relation '{name}'. Available: {available}")


def _build_relations(schema: SchemaDefinition) -> dict[str, ModelRelations]:
    """Compute relations for every model of the schema."""
    forward: dict[str, list[Relation]] = defaultdict(list)
    reverse: dict[str, list[Relation]] = defaultdict(list)

    for key, definition in schema.items():
        for field_name, field in definition.fields.items():
            if field.references is None:
                continue
            target = schema.target_key(field.references)
            common = {
                "kind": "one-to-one" if field.unique else "one-to-many",
                "model": key,
                "field": field_name,
                "target_model": target,
                "target_field": field.references.field,
                "on_delete": field.references.on_delete,
            }
            forward[key].append(Relation(name=target, direction="forward", **common))
            reverse[target].append(Relation(name=key, direction="reverse", **common))

    result: dict[str, ModelRelations] = {}
    for key in schema:
        rels = _dedupe_names(forward[key] + reverse[key])
        result[key] = ModelRelations(
            forward=tuple(r for r in rels if r.direction == "forward"),
            reverse=tuple(r for r in rels if r.direction == "reverse"),
        )
    return result


def _dedupe_names(relations: list[Relation]) -> list[Relation]:
    """Rename relations whose default names collide within one model."""
    counts: dict[str, int] = defaultdict(int)
    for relation in relations:
        counts[relation.name] += 1

    renamed: list[Relation] = []
    for relation in relations:
        if counts[relation.name] > 1:
            if relation.direction == "forward":
                name = relation.field
            else:
                name = f"{relation.model}_{relation.field}"
            relation = relation.model_copy(update={"name": name})
        renamed.append(relation)
    return renamed


def get_relations(schema: SchemaDefinition, model: str) -> ModelRelations:
    """Relations of *model* (key or model name), cached on the schema.

    Raises:
        SchemaError: If the model is unknown.
    """
    key = schema.resolve_key(model)
    cache = schema._relations
    if not cache:
        cache.update(_build_relations(schema))
    return cache[key]


def dependency_order(schema: SchemaDefinition) -> list[str]:
    """Model keys ordered so referenced models come before referencing ones.

    Self references are ignored.  Cycles are broken by falling back to schema
    order for the remaining models.
    """
    deps: dict[str, set[str]] = {key: set() for key in schema}
    for key in schema:
        for relation in get_relations(schema, key).forward:
            if relation.target_model != key:
                deps[key].add(relation.target_model)

    ordered: list[str] = []
    remaining = list(schema)
    while remaining:
        ready = [k for k in remaining if deps[k] <= set(ordered)]
        if not ready:
            # Cycle: take the first remaining model in schema order
            ready = [remaining[0]]
        for key in ready:
            ordered.append(key)
            remaining.remove(key)
    return ordered
