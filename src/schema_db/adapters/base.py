"""Adapter protocol definition.

Defines the ``Adapter`` Protocol that every backend implements.  All methods
are ``async def``; records are plain dicts keyed by field name and always
include ``id``.

Usage:
    from schema_db.adapters.base import Adapter

    async def publish(adapter: Adapter, author_id: str) -> None:
        author = await adapter.find_one(
            "author",
            where=[{"field": "id", "value": author_id}],
            join={"book": {"limit": 5}},
        )
        await adapter.update_many(
            "book",
            where=[{"field": "authorId", "value": author_id}],
            update={"published": True},
        )
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from schema_db.adapters.types import JoinOption, SortBy, Where

WhereInput = Sequence[Where | Mapping[str, Any]]
JoinInput = Mapping[str, bool | JoinOption | Mapping[str, Any]]


class Adapter(Protocol):
    """Uniform data-access interface implemented by every backend.

    Errors for foreseeable conditions are raised as ``schema_db.errors``
    types: ``ValidationError``, ``UniqueConstraintViolation``,
    ``ReferentialIntegrityError`` and ``NotFoundError``.
    """

    async def create(self, model: str, data: Mapping[str, Any]) -> dict:
        """Insert a record and return it.

        Defaults are applied (callables invoked now) and an identifier is
        generated unless ``data`` contains ``id``.

        Raises:
            ValidationError: Unknown field, wrong type, or missing required field.
            UniqueConstraintViolation: Duplicate value on a unique field.

        Example:
            author = await adapter.create("author", {"name": "Jane"})
        """
        ...

    async def find_one(
        self,
        model: str,
        where: WhereInput,
        join: JoinInput | None = None,
        select: list[str] | None = None,
    ) -> dict | None:
        """Return the first matching record, or ``None``.

        Example:
            author = await adapter.find_one(
                "author",
                [{"field": "id", "value": author_id}],
                join={"profile": True},
            )
        """
        ...

    async def find_many(
        self,
        model: str,
        where: WhereInput | None = None,
        sort_by: SortBy | Mapping[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
        join: JoinInput | None = None,
        select: list[str] | None = None,
    ) -> list[dict]:
        """Return matching records, sorted and paginated.

        Without ``sort_by`` records come back in insertion order.

        Example:
            books = await adapter.find_many(
                "book",
                sort_by={"field": "publishedAt", "direction": "desc"},
                limit=10,
                offset=20,
            )
        """
        ...

    async def update(
        self, model: str, where: WhereInput, update: Mapping[str, Any]
    ) -> dict:
        """Update the first matching record and return it.

        Raises:
            NotFoundError: If no record matches.
            ValidationError: Invalid field or value.
            UniqueConstraintViolation: Duplicate value on a unique field.
        """
        ...

    async def update_many(
        self, model: str, where: WhereInput, update: Mapping[str, Any]
    ) -> list[dict]:
        """Update every matching record and return the updated records."""
        ...

    async def delete(self, model: str, where: WhereInput) -> None:
        """Delete the first matching record, applying referential actions.

        Raises:
            ReferentialIntegrityError: A ``restrict`` reference blocks the delete.
        """
        ...

    async def delete_many(self, model: str, where: WhereInput) -> int:
        """Delete every matching record as one unit and return how many matched.

        Raises:
            ReferentialIntegrityError: A ``restrict`` reference blocks any of
                the deletes; nothing is removed.
        """
        ...

    async def count(self, model: str, where: WhereInput | None = None) -> int:
        """Number of matching records."""
        ...

    async def close(self) -> None:
        """Release resources held by the adapter."""
        ...
