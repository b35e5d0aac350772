import duckdb
import logging
from pathlib import Path
from typing import Optional, Union

from ..exceptions import StorageConnectionError

logger = logging.getLogger(__name__)


class ConnectionHandler:
    """Manages the lifecycle of the DuckDB connection behind durable storage."""

    def __init__(self, db_path: Union[str, Path], read_only: bool = False):
        """
        Initialize the handler with a database path and optional read-only mode.

        Parameters:
            db_path (Union[str, Path]): Path to the DuckDB file, or ":memory:"
                (case-insensitive) for a transient in-memory database. File
                paths are resolved to an absolute Path.
            read_only (bool): Open the connection in read-only mode.
        """
        if isinstance(db_path, str) and db_path.lower() == ":memory:":
            self.db_path_resolved = Path(":memory:")
            logger.info("Using in-memory DuckDB storage.")
        else:
            self.db_path_resolved = Path(db_path).resolve()
            logger.info(
                f"ConnectionHandler initialized for storage at: {self.db_path_resolved}"  # noqa: E501
            )

        self.read_only: bool = read_only
        self._connection: Optional[duckdb.DuckDBPyConnection] = None

    @property
    def is_memory(self) -> bool:
        return str(self.db_path_resolved) == ":memory:"

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        """
        Provide an active DuckDB connection, opening one if none exists.

        Creates the parent directory of a file-based database when writable.

        Raises:
            StorageConnectionError: If DuckDB fails to open the database.
        """
        if self._connection is None:
            try:
                if not self.is_memory and not self.read_only:
                    self.db_path_resolved.parent.mkdir(
                        parents=True, exist_ok=True
                    )
                self._connection = duckdb.connect(
                    database=str(self.db_path_resolved),
                    read_only=self.read_only,
                )
                logger.info("Successfully connected to the storage database.")
            except (duckdb.Error, OSError) as e:
                raise StorageConnectionError(
                    f"Failed to connect to storage: {e}", original_exception=e
                ) from e
        return self._connection

    def close_connection(self) -> None:
        """Closes the connection if open, allowing a later reconnect."""
        if self._connection:
            try:
                self._connection.close()
                logger.info(
                    f"Storage connection to {self.db_path_resolved} closed."
                )
            except duckdb.Error as e:
                logger.error(f"Error closing the storage connection: {e}")
            finally:
                self._connection = None
