"""Process-local record tables.

A ``MemoryStore`` is created explicitly and handed to adapters; there is no
module-level store.  Passing the same store (or the same backing dict) to
several adapters makes them share data.

Usage:
    from schema_db.memory.store import MemoryStore

    store = MemoryStore()
    store.ensure_tables(schema)
    with store.lock:
        store.tables["author"].append({"id": "a1", "name": "Jane"})
"""

import threading
from collections import defaultdict
from uuid import uuid4

from schema_db.schema.models import SchemaDefinition


class MemoryStore:
    """Per-model tables plus the lock that makes each operation atomic.

    Args:
        tables: Optional existing backing dict of model key to record list.
            It is used as-is (not copied).
    """

    def __init__(self, tables: dict[str, list[dict]] | None = None) -> None:
        self.tables: dict[str, list[dict]] = tables if tables is not None else {}
        self.lock = threading.RLock()
        self._counters: dict[str, int] = defaultdict(int)

    def ensure_tables(self, schema: SchemaDefinition) -> None:
        """Create an empty table for every model that has none."""
        with self.lock:
            for key in schema:
                self.tables.setdefault(key, [])

    def next_id(self, model: str, use_number_id: bool) -> str | int:
        """Generate an identifier for a new record of *model*.

        Sequential ids continue after the highest integer id already present.
        """
        if not use_number_id:
            return uuid4().hex
        self._seed_counter(model)
        self._counters[model] += 1
        return self._counters[model]

    def observe_id(self, model: str, record_id: object) -> None:
        """Advance the sequence of *model* past a caller-supplied integer id."""
        if not isinstance(record_id, int) or isinstance(record_id, bool):
            return
        self._seed_counter(model)
        self._counters[model] = max(self._counters[model], record_id)

    def _seed_counter(self, model: str) -> None:
        if self._counters[model] == 0:
            existing = [
                row["id"] for row in self.tables.get(model, [])
                if isinstance(row.get("id"), int)
            ]
            self._counters[model] = max(existing, default=0)
