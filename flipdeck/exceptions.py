from typing import Optional


class StorageError(Exception):
    """Base exception for durable storage errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class StorageConnectionError(StorageError):
    """Raised for errors opening the storage backend."""

    pass


class StorageReadError(StorageError):
    """Raised when a value cannot be read from the storage backend."""

    pass


class StorageWriteError(StorageError):
    """Raised when a value cannot be written to or removed from the backend
    (quota exceeded, read-only file, closed connection)."""

    pass
