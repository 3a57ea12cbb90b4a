"""Local filesystem file store."""

from pathlib import Path

import structlog

from src.infrastructure.observability import get_tracer
from src.infrastructure.storage.exceptions import StorageError, StorageKeyError

logger = structlog.get_logger()
tracer = get_tracer(__name__)


class LocalFileStore:
    """File store backed by a directory on the local filesystem."""

    PROVIDER_NAME = "local"

    def __init__(self, root: str | Path) -> None:
        """Initialize the store, creating the root directory if needed.

        Args:
            root: Directory that holds all stored files.

        Raises:
            StorageError: If the root directory cannot be created.
        """
        self._root = Path(root).resolve()
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Failed to create storage directory {self._root}: {e}",
                provider=self.PROVIDER_NAME,
            ) from e

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, key: str) -> Path:
        if not key or key in (".", ".."):
            raise StorageKeyError(
                f"Invalid storage key: {key!r}", provider=self.PROVIDER_NAME
            )
        path = (self._root / key).resolve()
        if path.parent != self._root:
            raise StorageKeyError(
                f"Storage key escapes the store root: {key!r}",
                provider=self.PROVIDER_NAME,
            )
        return path

    async def put(self, data: bytes, key: str) -> Path:
        """Write bytes to a new file <root>/<key>.

        Raises:
            StorageKeyError: If the key is not a single path component.
            StorageError: If a file with that key already exists or the
                write fails.
        """
        path = self._resolve(key)

        with tracer.start_as_current_span("storage.put") as span:
            span.set_attribute("storage.provider", self.PROVIDER_NAME)
            span.set_attribute("storage.size_bytes", len(data))
            try:
                with path.open("xb") as f:
                    f.write(data)
            except OSError as e:
                span.record_exception(e)
                logger.error(
                    "storage_put_failed",
                    provider=self.PROVIDER_NAME,
                    path=str(path),
                    error=str(e),
                )
                raise StorageError(
                    f"Failed to write {path}: {e}", provider=self.PROVIDER_NAME
                ) from e

        logger.debug("storage_file_written", path=str(path), size_bytes=len(data))
        return path

    async def delete(self, path: Path) -> None:
        """Remove a stored file. A missing file is not an error.

        Raises:
            StorageError: If the file exists but cannot be removed.
        """
        with tracer.start_as_current_span("storage.delete") as span:
            span.set_attribute("storage.provider", self.PROVIDER_NAME)
            try:
                Path(path).unlink(missing_ok=True)
            except OSError as e:
                span.record_exception(e)
                logger.error(
                    "storage_delete_failed",
                    provider=self.PROVIDER_NAME,
                    path=str(path),
                    error=str(e),
                )
                raise StorageError(
                    f"Failed to delete {path}: {e}", provider=self.PROVIDER_NAME
                ) from e

        logger.debug("storage_file_deleted", path=str(path))

    async def exists(self, path: Path) -> bool:
        return Path(path).is_file()
