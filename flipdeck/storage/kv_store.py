"""
Key-value storage backends for the durable app record.

The persistence layer only needs three operations on a string-keyed slot:
get, set and remove. Backends raise flipdeck.exceptions.StorageError
subclasses; containing those failures is the PersistenceAdapter's job.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, Union, runtime_checkable

import duckdb

from ..exceptions import StorageReadError, StorageWriteError
from .connection import ConnectionHandler

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal string key-value storage contract."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """Process-local backend; contents vanish with the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._items


class DuckDBKeyValueStore:
    """
    Durable backend storing each key as one row of a DuckDB table.

    Intended for use as a context manager; the table is created lazily on
    first access to a writable database.
    """

    _CREATE_TABLE_SQL = """
        CREATE TABLE IF NOT EXISTS kv_store (
            key VARCHAR PRIMARY KEY,
            value VARCHAR NOT NULL
        );
        """
    _SELECT_SQL = "SELECT value FROM kv_store WHERE key = $1;"
    _UPSERT_SQL = """
        INSERT INTO kv_store (key, value) VALUES ($1, $2)
        ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value;
        """
    _DELETE_SQL = "DELETE FROM kv_store WHERE key = $1;"

    def __init__(self, db_path: Union[str, Path], read_only: bool = False):
        self._handler = ConnectionHandler(db_path=db_path, read_only=read_only)
        self._schema_ready = False

    @property
    def db_path_resolved(self) -> Path:
        return self._handler.db_path_resolved

    def _connection(self) -> duckdb.DuckDBPyConnection:
        conn = self._handler.get_connection()
        if not self._schema_ready and not self._handler.read_only:
            try:
                conn.execute(self._CREATE_TABLE_SQL)
            except duckdb.Error as e:
                raise StorageWriteError(
                    f"Failed to initialize storage table: {e}",
                    original_exception=e,
                ) from e
            self._schema_ready = True
        return conn

    def get_item(self, key: str) -> Optional[str]:
        """
        Return the stored value for key, or None when the key is absent.

        Raises:
            StorageReadError: If the query fails.
        """
        conn = self._connection()
        try:
            row = conn.execute(self._SELECT_SQL, [key]).fetchone()
        except duckdb.Error as e:
            raise StorageReadError(
                f"Failed to read key '{key}': {e}", original_exception=e
            ) from e
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """
        Insert or overwrite the value stored under key.

        Raises:
            StorageWriteError: If the write fails (read-only database, disk
                full, closed connection).
        """
        conn = self._connection()
        try:
            conn.execute(self._UPSERT_SQL, [key, value])
        except duckdb.Error as e:
            raise StorageWriteError(
                f"Failed to write key '{key}': {e}", original_exception=e
            ) from e
        logger.debug(f"Wrote {len(value)} characters under '{key}'.")

    def remove_item(self, key: str) -> None:
        """Delete key if present. Raises StorageWriteError on failure."""
        conn = self._connection()
        try:
            conn.execute(self._DELETE_SQL, [key])
        except duckdb.Error as e:
            raise StorageWriteError(
                f"Failed to remove key '{key}': {e}", original_exception=e
            ) from e

    def close(self) -> None:
        self._handler.close_connection()
        self._schema_ready = False

    def __enter__(self) -> "DuckDBKeyValueStore":
        self._connection()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
