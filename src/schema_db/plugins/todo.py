"""Todo plugin: adds a ``todo`` model to any schema.

Usage:
    from schema_db import define_db
    from schema_db.plugins import todo_plugin

    db = define_db({
        "post": {"fields": {"title": {"type": "string", "required": True}}},
    }).use(todo_plugin)
"""

from datetime import datetime, timezone

from schema_db.schema.builder import create_db_plugin


def _now() -> datetime:
    return datetime.now(timezone.utc)


todo_plugin = create_db_plugin("todo", {
    "todo": {
        "model_name": "todo",
        "fields": {
            "title": {"type": "string", "required": True},
            "description": {"type": "string"},
            "completed": {"type": "boolean", "default_value": False},
            "userId": {"type": "string", "required": True},
            "createdAt": {"type": "date", "default_value": _now},
        },
    },
})
