"""Tests for relation resolution derived from field references."""

import pytest

from schema_db import DatabaseDefinition, SchemaError, define_db, get_relations
from schema_db.schema.relations import dependency_order


class TestGetRelations:
    """Forward/reverse relations, kinds and names."""

    def test_forward_relation(self, library_db: DatabaseDefinition) -> None:
        relations = get_relations(library_db.get_schema(), "book")
        (author,) = relations.forward

        assert author.name == "author"
        assert author.direction == "forward"
        assert author.kind == "one-to-many"
        assert (author.model, author.field) == ("book", "authorId")
        assert (author.target_model, author.target_field) == ("author", "id")
        assert not author.is_list

    def test_reverse_relations(self, library_db: DatabaseDefinition) -> None:
        relations = get_relations(library_db.get_schema(), "author")
        assert relations.forward == ()

        by_name = {r.name: r for r in relations.reverse}
        assert set(by_name) == {"profile", "book"}
        assert by_name["profile"].kind == "one-to-one"
        assert not by_name["profile"].is_list
        assert by_name["book"].kind == "one-to-many"
        assert by_name["book"].is_list

    def test_join_keys(self, library_db: DatabaseDefinition) -> None:
        book = get_relations(library_db.get_schema(), "author").by_name("book")
        assert book.base_key_field == "id"
        assert book.related_model == "book"
        assert book.related_key_field == "authorId"

    def test_cached_on_schema(self, library_db: DatabaseDefinition) -> None:
        schema = library_db.get_schema()
        assert get_relations(schema, "author") is get_relations(schema, "author")

    def test_lookup_by_model_name(self) -> None:
        schema = define_db({
            "author": {"modelName": "authors", "fields": {}},
            "book": {"fields": {"authorId": {"type": "string", "references": {"model": "authors"}}}},
        }).get_schema()
        assert get_relations(schema, "authors").reverse[0].model == "book"
        assert get_relations(schema, "book").forward[0].target_model == "author"

    def test_unknown_relation_name(self, library_db: DatabaseDefinition) -> None:
        with pytest.raises(SchemaError, match="Unknown relation 'reviews'"):
            get_relations(library_db.get_schema(), "author").by_name("reviews")

    def test_unknown_model(self, library_db: DatabaseDefinition) -> None:
        with pytest.raises(SchemaError):
            get_relations(library_db.get_schema(), "publisher")


class TestRelationNames:
    """Colliding default names are disambiguated."""

    def test_two_references_to_same_model(self) -> None:
        schema = define_db({
            "user": {"fields": {}},
            "message": {"fields": {
                "senderId": {"type": "string", "references": {"model": "user"}},
                "recipientId": {"type": "string", "references": {"model": "user"}},
            }},
        }).get_schema()

        forward = [r.name for r in get_relations(schema, "message").forward]
        reverse = [r.name for r in get_relations(schema, "user").reverse]
        assert forward == ["senderId", "recipientId"]
        assert reverse == ["message_senderId", "message_recipientId"]

    def test_self_reference(self) -> None:
        schema = define_db({
            "category": {"fields": {
                "parentId": {"type": "string", "references": {"model": "category"}},
            }},
        }).get_schema()

        relations = get_relations(schema, "category")
        assert [r.name for r in relations.forward] == ["parentId"]
        assert [r.name for r in relations.reverse] == ["category_parentId"]


class TestDependencyOrder:
    """Referenced models come first."""

    def test_referenced_first(self) -> None:
        schema = define_db({
            "book": {"fields": {"authorId": {"type": "string", "references": {"model": "author"}}}},
            "author": {"fields": {}},
        }).get_schema()
        assert dependency_order(schema) == ["author", "book"]

    def test_library(self, library_db: DatabaseDefinition) -> None:
        order = dependency_order(library_db.get_schema())
        assert order.index("author") < order.index("profile")
        assert order.index("author") < order.index("book")
