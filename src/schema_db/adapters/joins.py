"""Join assembly shared by all adapters.

Two strategies produce the same attachments:

- ``resolve_relation``: in-process join.  Related records are fetched once
  for the whole base set, grouped by key, and attached per base record.
- ``fan_out_relation``: one ``find_one``/``find_many`` call per base record,
  used when ``experimental.joins`` is disabled.

Forward relations and reverse one-to-one relations attach a single record or
``None``; reverse one-to-many relations attach a list in the order the
related records were returned, truncated to ``JoinOption.limit``.
"""

from collections import defaultdict
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from schema_db.adapters.types import JoinOption, Where
from schema_db.records import project
from schema_db.schema.relations import Relation

if TYPE_CHECKING:
    from schema_db.adapters.base import Adapter


def _empty(relation: Relation) -> Any:
    return [] if relation.is_list else None


def join_keys(base_rows: Iterable[dict], relation: Relation) -> list[Any]:
    """Distinct non-null key values of the base records, in order."""
    keys: dict[Any, None] = {}
    for row in base_rows:
        value = row.get(relation.base_key_field)
        if value is not None:
            keys[value] = None
    return list(keys)


def resolve_relation(
    base_rows: list[dict],
    relation: Relation,
    option: JoinOption,
    related_rows: Iterable[dict],
) -> list[Any]:
    """Attachment for each base record, given all candidate related records.

    Returns a list parallel to *base_rows*.  Attached records are copies.
    """
    groups: dict[Any, list[dict]] = defaultdict(list)
    for row in related_rows:
        groups[row.get(relation.related_key_field)].append(row)

    attachments: list[Any] = []
    for base in base_rows:
        key = base.get(relation.base_key_field)
        matches = groups.get(key, []) if key is not None else []
        if relation.is_list:
            if option.limit is not None:
                matches = matches[: option.limit]
            attachments.append([dict(m) for m in matches])
        else:
            attachments.append(dict(matches[0]) if matches else None)
    return attachments


async def fan_out_relation(
    adapter: "Adapter",
    base_rows: list[dict],
    relation: Relation,
    option: JoinOption,
) -> list[Any]:
    """Attachment for each base record using one query per record."""
    attachments: list[Any] = []
    for base in base_rows:
        key = base.get(relation.base_key_field)
        if key is None:
            attachments.append(_empty(relation))
            continue
        where = [Where(field=relation.related_key_field, value=key)]
        if relation.is_list:
            attachments.append(
                await adapter.find_many(relation.related_model, where=where, limit=option.limit)
            )
        else:
            attachments.append(await adapter.find_one(relation.related_model, where=where))
    return attachments


def assemble(
    rows: list[dict],
    select: list[str] | None,
    attachments: dict[str, list[Any]],
) -> list[dict]:
    """Project each row and add its attachments under the relation names."""
    result = [project(row, select) for row in rows]
    for name, values in attachments.items():
        for record, value in zip(result, values):
            record[name] = value
    return result
