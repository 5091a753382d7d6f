from .kv_store import InMemoryKeyValueStore, SqliteKeyValueStore

__all__ = ["InMemoryKeyValueStore", "SqliteKeyValueStore"]
