"""Storage backends for flipdeck.

Only the key-value backends and their protocol are exported.
"""

from .kv_store import DuckDBKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = ["DuckDBKeyValueStore", "KeyValueStore", "MemoryKeyValueStore"]
