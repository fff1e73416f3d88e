"""Relation joins on every backend, with in-process joins on and off."""

import pytest

from schema_db import JoinOption, ValidationError

from conftest import seed_author


class TestReverseJoins:
    """author -> profile (one-to-one) and author -> book (one-to-many)."""

    @pytest.mark.asyncio
    async def test_one_to_one_missing_is_none(self, adapter) -> None:
        author = await seed_author(adapter)
        found = await adapter.find_one(
            "author", [{"field": "id", "value": author["id"]}], join={"profile": True}
        )
        assert "profile" in found
        assert found["profile"] is None

    @pytest.mark.asyncio
    async def test_one_to_one_present(self, adapter) -> None:
        author = await seed_author(adapter, profile=True)
        found = await adapter.find_one(
            "author", [{"field": "id", "value": author["id"]}], join={"profile": True}
        )
        assert found["profile"]["bio"] == "About Jane"
        assert found["profile"]["authorId"] == author["id"]

    @pytest.mark.asyncio
    async def test_one_to_many_limit(self, adapter) -> None:
        author = await seed_author(adapter, books=10)
        found = await adapter.find_one(
            "author", [{"field": "id", "value": author["id"]}], join={"book": {"limit": 3}}
        )
        assert [b["title"] for b in found["book"]] == [
            "Jane book 0", "Jane book 1", "Jane book 2",
        ]

    @pytest.mark.asyncio
    async def test_one_to_many_all(self, adapter) -> None:
        author = await seed_author(adapter, books=10)
        found = await adapter.find_one(
            "author", [{"field": "id", "value": author["id"]}], join={"book": True}
        )
        assert len(found["book"]) == 10
        assert found["book"][0]["title"] == "Jane book 0"

    @pytest.mark.asyncio
    async def test_one_to_many_empty(self, adapter) -> None:
        author = await seed_author(adapter)
        found = await adapter.find_one(
            "author", [{"field": "id", "value": author["id"]}], join={"book": JoinOption()}
        )
        assert found["book"] == []

    @pytest.mark.asyncio
    async def test_find_many_groups_per_author(self, adapter) -> None:
        await seed_author(adapter, name="A", books=2, profile=True)
        await seed_author(adapter, name="B", books=3)

        authors = await adapter.find_many(
            "author", sort_by={"field": "name"}, join={"book": True, "profile": True}
        )
        assert [len(a["book"]) for a in authors] == [2, 3]
        assert all(b["title"].startswith("B ") for b in authors[1]["book"])
        assert authors[0]["profile"]["bio"] == "About A"
        assert authors[1]["profile"] is None


class TestForwardJoins:
    """book -> author."""

    @pytest.mark.asyncio
    async def test_forward(self, adapter) -> None:
        author = await seed_author(adapter, books=1)
        book = await adapter.find_one(
            "book", [{"field": "authorId", "value": author["id"]}], join={"author": True}
        )
        assert book["author"]["id"] == author["id"]
        assert book["author"]["name"] == "Jane"

    @pytest.mark.asyncio
    async def test_forward_null_key(self, adapter) -> None:
        await adapter.create("book", {"title": "Orphan"})
        book = await adapter.find_one("book", [{"field": "title", "value": "Orphan"}], join={"author": True})
        assert book["author"] is None


class TestJoinOptions:
    """Join option handling."""

    @pytest.mark.asyncio
    async def test_false_is_skipped(self, adapter) -> None:
        author = await seed_author(adapter, books=1)
        found = await adapter.find_one(
            "author", [{"field": "id", "value": author["id"]}], join={"book": False}
        )
        assert "book" not in found

    @pytest.mark.asyncio
    async def test_unknown_relation(self, adapter) -> None:
        with pytest.raises(ValidationError, match="reviews"):
            await adapter.find_many("author", join={"reviews": True})

    @pytest.mark.asyncio
    async def test_negative_limit(self, adapter) -> None:
        with pytest.raises(ValidationError, match="Invalid join option"):
            await adapter.find_many("author", join={"book": {"limit": -1}})

    @pytest.mark.asyncio
    async def test_join_with_select(self, adapter) -> None:
        author = await seed_author(adapter, books=2)
        found = await adapter.find_one(
            "author",
            [{"field": "id", "value": author["id"]}],
            join={"book": True},
            select=["name"],
        )
        assert set(found) == {"name", "book"}
        assert len(found["book"]) == 2

    @pytest.mark.asyncio
    async def test_attached_records_are_copies(self, memory) -> None:
        author = await seed_author(memory, books=1)
        found = await memory.find_one(
            "author", [{"field": "id", "value": author["id"]}], join={"book": True}
        )
        found["book"][0]["title"] = "Changed"
        book = await memory.find_one("book", [{"field": "authorId", "value": author["id"]}])
        assert book["title"] == "Jane book 0"
