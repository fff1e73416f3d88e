"""Tests for table metadata, DDL generation and model exclusion."""

import pytest

from schema_db import define_db
from schema_db.schema.ddl import DIALECTS, build_metadata, generate_ddl
from schema_db.schema.filter import DEFAULT_AUTH_MODELS, exclude_models

from conftest import library_fragment


@pytest.fixture
def auth_schema():
    return define_db({
        "user": {"fields": {"email": {"type": "string", "unique": True}}},
        "session": {"fields": {
            "userId": {"type": "string", "references": {"model": "user"}},
        }},
        "post": {"modelName": "posts", "fields": {
            "body": {"type": "string", "fieldName": "post_body"},
            "userId": {"type": "string", "references": {"model": "user"}},
        }},
    }).get_schema()


class TestBuildMetadata:
    """SQLAlchemy tables derived from the schema."""

    def test_tables_named_by_model_name(self, auth_schema) -> None:
        metadata = build_metadata(auth_schema)
        assert set(metadata.tables) == {"user", "session", "posts"}

    def test_columns_keyed_by_field(self, auth_schema) -> None:
        table = build_metadata(auth_schema).tables["posts"]
        assert table.c["body"].name == "post_body"
        assert table.c["id"].primary_key

    def test_foreign_key_action(self, library_db) -> None:
        table = build_metadata(library_db.get_schema()).tables["book"]
        (fk,) = table.c["authorId"].foreign_keys
        assert fk.target_fullname == "author.id"
        assert fk.ondelete == "CASCADE"

    def test_set_null_action(self) -> None:
        schema = define_db(library_fragment("setNull")).get_schema()
        (fk,) = build_metadata(schema).tables["book"].c["authorId"].foreign_keys
        assert fk.ondelete == "SET NULL"

    def test_no_action_has_no_constraint(self) -> None:
        schema = define_db(library_fragment("noAction")).get_schema()
        table = build_metadata(schema).tables["book"]
        assert not table.c["authorId"].foreign_keys

    def test_required_and_unique(self, library_db) -> None:
        author = build_metadata(library_db.get_schema()).tables["author"]
        assert author.c["name"].nullable is False
        assert author.c["email"].nullable is True
        assert author.c["email"].unique is True

    def test_number_ids(self, library_db) -> None:
        tables = build_metadata(library_db.get_schema(), use_number_id=True).tables
        assert tables["author"].c["id"].autoincrement is True
        assert tables["author"].c["id"].type.python_type is int
        assert tables["book"].c["authorId"].type.python_type is int


class TestGenerateDdl:
    """CREATE TABLE text per dialect."""

    @pytest.mark.parametrize("dialect", list(DIALECTS))
    def test_every_dialect(self, library_db, dialect: str) -> None:
        sql = generate_ddl(library_db.get_schema(), dialect=dialect)
        assert sql.count("CREATE TABLE") == 3
        assert sql.index("CREATE TABLE author") < sql.index("CREATE TABLE book")
        assert "ON DELETE CASCADE" in sql

    def test_unsupported_dialect(self, library_db) -> None:
        with pytest.raises(ValueError, match="Unsupported dialect 'oracle'"):
            generate_ddl(library_db.get_schema(), dialect="oracle")

    def test_statements_terminated(self, library_db) -> None:
        sql = generate_ddl(library_db.get_schema(), dialect="sqlite")
        statements = [s for s in sql.split("\n\n") if s.strip()]
        assert all(s.rstrip().endswith(";") for s in statements)

    def test_field_name_column(self, auth_schema) -> None:
        sql = generate_ddl(auth_schema, dialect="sqlite")
        assert "post_body" in sql
        assert "CREATE TABLE posts" in sql

    def test_exclude_auth_models(self, auth_schema) -> None:
        sql = generate_ddl(auth_schema, dialect="postgresql", exclude=DEFAULT_AUTH_MODELS)
        assert "CREATE TABLE posts" in sql
        assert "CREATE TABLE session" not in sql
        assert "REFERENCES" not in sql

    def test_serial_ids(self, library_db) -> None:
        sql = generate_ddl(library_db.get_schema(), dialect="postgresql", use_number_id=True)
        assert "SERIAL" in sql


class TestExcludeModels:
    """Structural model removal."""

    def test_case_insensitive_by_key_or_name(self, auth_schema) -> None:
        remaining = exclude_models(auth_schema, ["USER", "Posts"])
        assert list(remaining) == ["session"]

    def test_dangling_reference_dropped(self, auth_schema) -> None:
        remaining = exclude_models(auth_schema, ["user"])
        assert remaining["post"].fields["userId"].references is None
        assert remaining["post"].fields["body"].field_name == "post_body"

    def test_nothing_excluded_returns_same_schema(self, auth_schema) -> None:
        assert exclude_models(auth_schema, ["comment"]) is auth_schema

    def test_input_schema_untouched(self, auth_schema) -> None:
        exclude_models(auth_schema, ["user"])
        assert auth_schema["post"].fields["userId"].references is not None
