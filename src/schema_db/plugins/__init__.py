"""Built-in schema plugins.

Usage:
    from schema_db.plugins import todo_plugin
"""

from schema_db.plugins.todo import todo_plugin

__all__ = ["todo_plugin"]
