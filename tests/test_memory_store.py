"""Tests for the process-local memory store."""

import pytest

from schema_db import MemoryAdapter, MemoryStore


class TestMemoryStore:
    """Explicit, shareable stores."""

    @pytest.mark.asyncio
    async def test_existing_tables_used_as_is(self, library_db) -> None:
        tables = {"author": [{"id": "a1", "name": "Seeded", "email": None}]}
        adapter = MemoryAdapter(library_db, store=MemoryStore(tables))

        found = await adapter.find_one("author", [{"field": "id", "value": "a1"}])
        assert found["name"] == "Seeded"
        await adapter.create("author", {"name": "New"})
        assert len(tables["author"]) == 2
        assert tables["book"] == []

    def test_ensure_tables_keeps_rows(self, library_db) -> None:
        store = MemoryStore({"author": [{"id": "a1"}]})
        store.ensure_tables(library_db.get_schema())
        assert store.tables["author"] == [{"id": "a1"}]
        assert store.tables["profile"] == []


class TestNextId:
    """Identifier generation."""

    @pytest.mark.asyncio
    async def test_number_ids_continue_after_existing(self, library_db) -> None:
        tables = {"author": [{"id": 7, "name": "Seeded", "email": None}]}
        adapter = MemoryAdapter(library_db, {"use_number_id": True}, store=MemoryStore(tables))

        author = await adapter.create("author", {"name": "Next"})
        assert author["id"] == 8

    def test_uuid_ids_unique(self) -> None:
        store = MemoryStore()
        ids = {store.next_id("author", use_number_id=False) for _ in range(100)}
        assert len(ids) == 100

    def test_observed_id_advances_sequence(self) -> None:
        store = MemoryStore()
        assert store.next_id("tag", use_number_id=True) == 1
        store.observe_id("tag", 5)
        store.observe_id("tag", 3)
        assert store.next_id("tag", use_number_id=True) == 6

    def test_non_integer_ids_ignored(self) -> None:
        store = MemoryStore({"tag": [{"id": 4}]})
        store.observe_id("tag", "custom")
        store.observe_id("tag", True)
        assert store.next_id("tag", use_number_id=True) == 5
