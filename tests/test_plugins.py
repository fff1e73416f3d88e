"""Tests for the built-in plugins."""

from datetime import datetime

import pytest

from schema_db import MemoryAdapter, ValidationError, define_db
from schema_db.plugins import todo_plugin


class TestTodoPlugin:
    """todo_plugin added to an application schema."""

    @pytest.fixture
    def adapter(self):
        db = define_db({"user": {"fields": {"name": {"type": "string"}}}}).use(todo_plugin)
        return MemoryAdapter(db)

    def test_model_added(self) -> None:
        schema = define_db({}).use(todo_plugin).get_schema()
        assert list(schema) == ["todo"]
        assert set(schema["todo"].fields) == {
            "title", "description", "completed", "userId", "createdAt",
        }

    @pytest.mark.asyncio
    async def test_defaults(self, adapter) -> None:
        todo = await adapter.create("todo", {"title": "Write tests", "userId": "u1"})
        assert todo["completed"] is False
        assert isinstance(todo["createdAt"], datetime)
        assert todo["description"] is None

    @pytest.mark.asyncio
    async def test_required_user(self, adapter) -> None:
        with pytest.raises(ValidationError, match="todo.userId is required"):
            await adapter.create("todo", {"title": "Orphan"})

    @pytest.mark.asyncio
    async def test_complete(self, adapter) -> None:
        todo = await adapter.create("todo", {"title": "Ship", "userId": "u1"})
        updated = await adapter.update(
            "todo", [{"field": "id", "value": todo["id"]}], {"completed": True}
        )
        assert updated["completed"] is True
        assert await adapter.count("todo", [{"field": "completed", "value": False}]) == 0
