"""In-memory store engine: tables, where evaluation, sorting, delete plans.

``schema_db.adapters.memory.MemoryAdapter`` is the adapter built on these.
"""
