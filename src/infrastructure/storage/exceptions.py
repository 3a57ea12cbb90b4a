"""Exceptions for file storage backends."""


class StorageError(Exception):
    """Base exception for file storage errors."""

    def __init__(self, message: str, *, provider: str = "unknown") -> None:
        self.provider = provider
        super().__init__(message)


class StorageKeyError(StorageError):
    """Raised when a storage key is empty or resolves outside the store root."""
