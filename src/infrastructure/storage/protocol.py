"""Protocol definition for file storage backends."""

from pathlib import Path
from typing import Protocol


class FileStore(Protocol):
    """Durable blob storage keyed by path.

    Implementations must be safe to call from concurrent requests as long as
    the keys differ.
    """

    async def put(self, data: bytes, key: str) -> Path:
        """Store bytes under a new key. Existing files are never overwritten.

        Args:
            data: Raw file content.
            key: Storage key, a single path component.

        Returns:
            The path the content was written to.

        Raises:
            StorageError: If the key is taken or the write fails.
        """
        ...

    async def delete(self, path: Path) -> None:
        """Delete a stored file.

        Raises:
            StorageError: If the file exists but cannot be removed.
        """
        ...

    async def exists(self, path: Path) -> bool:
        """Return whether a stored file exists at the path."""
        ...
