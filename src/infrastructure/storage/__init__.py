"""File storage infrastructure.

Uploaded document bytes live here, independent of the metadata database
and the vector store.
"""

from src.infrastructure.storage.exceptions import StorageError, StorageKeyError
from src.infrastructure.storage.local import LocalFileStore
from src.infrastructure.storage.protocol import FileStore

__all__ = [
    "FileStore",
    "LocalFileStore",
    "StorageError",
    "StorageKeyError",
]
