"""SQLAlchemy table metadata and DDL text generated from a schema.

``build_metadata`` is what the SQL adapter queries through; ``generate_ddl``
renders the same tables as ``CREATE TABLE`` statements for a dialect.

Usage:
    from schema_db.schema.ddl import generate_ddl
    from schema_db.schema.filter import DEFAULT_AUTH_MODELS

    sql = generate_ddl(schema, dialect="postgresql", exclude=DEFAULT_AUTH_MODELS)
"""

from collections.abc import Iterable

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    Table,
    Text,
)
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.engine import Dialect
from sqlalchemy.schema import CreateTable
from sqlalchemy.types import TypeEngine

from schema_db.schema.filter import exclude_models
from schema_db.schema.models import ID_FIELD, FieldDefinition, SchemaDefinition
from schema_db.schema.relations import dependency_order
from schema_db.schema.types import FieldType, OnDelete

DIALECTS: dict[str, type[Dialect]] = {
    "postgresql": postgresql.dialect,
    "sqlite": sqlite.dialect,
    "mysql": mysql.dialect,
}


def column_type(field_type: FieldType) -> TypeEngine:
    """SQL column type for a field type."""
    if field_type is FieldType.STRING:
        return Text()
    if field_type is FieldType.NUMBER:
        return Float()
    if field_type is FieldType.BOOLEAN:
        return Boolean()
    if field_type is FieldType.DATE:
        return DateTime()
    raise TypeError(f"Unhandled field type: {field_type!r}")


def _id_column(use_number_id: bool) -> Column:
    if use_number_id:
        return Column(ID_FIELD, Integer, primary_key=True, autoincrement=True)
    return Column(ID_FIELD, Text, primary_key=True)


def _field_column(
    schema: SchemaDefinition,
    model: str,
    name: str,
    field: FieldDefinition,
    use_number_id: bool,
) -> Column:
    definition = schema[model]
    sql_type = column_type(field.type)
    args = []

    ref = field.references
    if ref is not None:
        if ref.field == ID_FIELD:
            sql_type = Integer() if use_number_id else Text()
        # "no action" references are not enforced by the memory engine either
        if ref.on_delete is not OnDelete.NO_ACTION:
            target = schema[schema.target_key(ref)]
            args.append(
                ForeignKey(
                    f"{target.model_name}.{target.column_name(ref.field)}",
                    ondelete=ref.on_delete.value.upper(),
                )
            )

    return Column(
        definition.column_name(name),
        sql_type,
        *args,
        key=name,
        nullable=not field.required,
        unique=field.unique or None,
    )


def build_metadata(schema: SchemaDefinition, use_number_id: bool = False) -> MetaData:
    """Build one ``Table`` per model.

    Table names are model names and column names honour ``field_name``;
    ``table.c`` is keyed by logical field name.
    """
    metadata = MetaData()
    for key in dependency_order(schema):
        definition = schema[key]
        columns = [_id_column(use_number_id)]
        for name, field in definition.fields.items():
            columns.append(_field_column(schema, key, name, field, use_number_id))
        Table(definition.model_name, metadata, *columns)
    return metadata


def generate_ddl(
    schema: SchemaDefinition,
    dialect: str = "postgresql",
    exclude: Iterable[str] = (),
    use_number_id: bool = False,
) -> str:
    """Render ``CREATE TABLE`` statements for every non-excluded model.

    Raises:
        ValueError: If the dialect is not supported.
    """
    if dialect not in DIALECTS:
        raise ValueError(
            f"Unsupported dialect '{dialect}'. Supported: {', '.join(DIALECTS)}"
        )
    sql_dialect = DIALECTS[dialect]()

    schema = exclude_models(schema, exclude)
    metadata = build_metadata(schema, use_number_id=use_number_id)

    statements = [
        str(CreateTable(table).compile(dialect=sql_dialect)).strip() + ";"
        for table in metadata.sorted_tables
    ]
    return "\n\n".join(statements) + "\n"
