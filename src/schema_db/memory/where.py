"""Where-clause evaluation over in-memory records.

Predicates fold left to right: the first predicate seeds the result, each
following one combines with ``and`` (connector ``AND``) or ``or``
(connector ``OR``).  There is no grouping.
"""

import operator
from collections.abc import Callable, Iterable
from typing import Any

from schema_db.adapters.types import Connector, Where, WhereOperator

_ORDERING: dict[WhereOperator, Callable[[Any, Any], bool]] = {
    WhereOperator.LT: operator.lt,
    WhereOperator.LTE: operator.le,
    WhereOperator.GT: operator.gt,
    WhereOperator.GTE: operator.ge,
}


def evaluate_predicate(actual: Any, op: WhereOperator, expected: Any) -> bool:
    """Evaluate one operator against a record value."""
    if op is WhereOperator.EQ:
        return actual == expected
    if op is WhereOperator.NE:
        return actual != expected
    if op in _ORDERING:
        if actual is None or expected is None:
            return False
        try:
            return _ORDERING[op](actual, expected)
        except TypeError:
            return False
    if op is WhereOperator.IN:
        return actual in expected
    if op is WhereOperator.NOT_IN:
        return actual not in expected
    if not (isinstance(actual, str) and isinstance(expected, str)):
        return False
    if op is WhereOperator.CONTAINS:
        return expected in actual
    if op is WhereOperator.STARTS_WITH:
        return actual.startswith(expected)
    if op is WhereOperator.ENDS_WITH:
        return actual.endswith(expected)
    raise ValueError(f"Unhandled operator: {op!r}")


def matches(record: dict, where: list[Where]) -> bool:
    """True if *record* satisfies the folded clause (empty clause matches)."""
    if not where:
        return True

    result = evaluate_predicate(record.get(where[0].field), where[0].operator, where[0].value)
    for clause in where[1:]:
        current = evaluate_predicate(record.get(clause.field), clause.operator, clause.value)
        if clause.connector is Connector.OR:
            result = result or current
        else:
            result = result and current
    return result


def filter_records(records: Iterable[dict], where: list[Where]) -> list[dict]:
    """Matching records in table order."""
    return [record for record in records if matches(record, where)]
