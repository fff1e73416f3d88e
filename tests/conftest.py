"""Shared fixtures: a small library schema and adapters for every backend.

Backends:
    - memory / memory-joins: ``MemoryAdapter`` with fan-out or in-process joins
    - sql / sql-joins: ``AsyncSqlAdapter`` on a temporary SQLite file
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from schema_db import AsyncSqlAdapter, MemoryAdapter, define_db

BACKENDS = ["memory", "memory-joins", "sql", "sql-joins"]
MEMORY_BACKENDS = ["memory", "memory-joins"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def library_fragment(on_delete: str = "cascade") -> dict:
    """author <- profile (one-to-one), author <- book (one-to-many)."""
    reference = {"model": "author", "field": "id", "onDelete": on_delete}
    return {
        "author": {
            "fields": {
                "name": {"type": "string", "required": True},
                "email": {"type": "string", "unique": True},
            },
        },
        "profile": {
            "fields": {
                "bio": {"type": "string"},
                "authorId": {"type": "string", "unique": True, "references": reference},
            },
        },
        "book": {
            "fields": {
                "title": {"type": "string", "required": True},
                "pages": {"type": "number"},
                "published": {"type": "boolean", "defaultValue": False},
                "publishedAt": {"type": "date"},
                "createdAt": {"type": "date", "defaultValue": _now},
                "authorId": {"type": "string", "references": reference},
            },
        },
    }


@pytest.fixture
def library_db():
    return define_db(library_fragment())


@pytest.fixture
async def make_adapter(tmp_path: Path):
    """Build adapters for a backend name; closes them after the test."""
    created = []

    async def _make(db, backend: str, **options):
        options = {"experimental": {"joins": backend.endswith("-joins")}, **options}
        if backend.startswith("sql"):
            url = f"sqlite:///{tmp_path / f'db{len(created)}.sqlite'}"
            adapter = AsyncSqlAdapter(db, url, options)
            await adapter.create_tables()
        else:
            adapter = MemoryAdapter(db, options)
        created.append(adapter)
        return adapter

    yield _make

    for adapter in created:
        await adapter.close()


@pytest.fixture(params=BACKENDS)
async def adapter(request, make_adapter, library_db):
    """Library-schema adapter, once per backend."""
    return await make_adapter(library_db, request.param)


@pytest.fixture(params=MEMORY_BACKENDS)
async def memory(request, make_adapter, library_db):
    """Library-schema memory adapter, with and without in-process joins."""
    return await make_adapter(library_db, request.param)


async def seed_author(adapter, name: str = "Jane", books: int = 0, profile: bool = False):
    """Create an author with *books* books (created in title order)."""
    author = await adapter.create("author", {"name": name})
    for i in range(books):
        await adapter.create(
            "book", {"title": f"{name} book {i}", "pages": 100 + i, "authorId": author["id"]}
        )
    if profile:
        await adapter.create("profile", {"bio": f"About {name}", "authorId": author["id"]})
    return author
