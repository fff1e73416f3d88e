"""Schema comparison using set operations.

Compares the columns a schema expects against the columns a live database
has.  Pure logic: no I/O and no database connections.

Usage:
    from schema_db.schema.comparator import expected_columns, validate_schema

    actual = await adapter.get_column_names()
    result = validate_schema(actual, expected_columns(schema))
    if not result.valid:
        print(result.format_report())
"""

import logging

from schema_db.schema.models import (
    ColumnDiff,
    SchemaDefinition,
    SchemaValidationResult,
)

logger = logging.getLogger(__name__)


def expected_columns(schema: SchemaDefinition) -> dict[str, set[str]]:
    """Table name to column names, as ``build_metadata`` would create them.

    Example:
        >>> expected_columns(schema)["book"]
        {'id', 'title', 'authorId'}
    """
    return {
        definition.model_name: {
            definition.column_name(name) for name in ("id", *definition.fields)
        }
        for definition in schema.values()
    }


def validate_schema(
    actual_columns: dict[str, set[str]],
    expected_columns: dict[str, set[str]],
) -> SchemaValidationResult:
    """Validate actual database columns against expected columns.

    - Missing tables: in *expected_columns* but not in *actual_columns*
    - Missing columns: expected in a table that exists
    - Extra tables: in *actual_columns* only (warning, does not affect
      ``valid``)

    Examples:
        >>> validate_schema({"users": {"id", "name"}}, {"users": {"id", "name"}}).valid
        True
        >>> result = validate_schema({"users": {"id"}}, {"users": {"id", "name"}})
        >>> result.missing_columns[0].column
        'name'
        >>> validate_schema({"users": {"id"}}, {}).valid
        True
    """
    actual_tables = set(actual_columns)
    expected_tables = set(expected_columns)

    missing_tables = sorted(expected_tables - actual_tables)
    extra_tables = sorted(actual_tables - expected_tables)

    missing_columns: list[ColumnDiff] = []
    for table_name in sorted(expected_tables & actual_tables):
        for col_name in sorted(expected_columns[table_name] - actual_columns[table_name]):
            missing_columns.append(
                ColumnDiff(
                    table=table_name,
                    column=col_name,
                    message=f"Column '{col_name}' missing from table '{table_name}'",
                )
            )

    if extra_tables:
        logger.warning(f"Extra tables not in schema: {', '.join(extra_tables)}")

    return SchemaValidationResult(
        valid=not missing_tables and not missing_columns,
        missing_tables=missing_tables,
        missing_columns=missing_columns,
        extra_tables=extra_tables,
    )
