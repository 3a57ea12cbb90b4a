"""Upload pipeline: persist the file and record, then index on a best-effort basis."""

import time
from pathlib import Path
from uuid import UUID, uuid4

import structlog

from src.infrastructure.observability import traced
from src.infrastructure.storage import FileStore, StorageError
from src.infrastructure.vectordb.protocol import DOCUMENT_ID_KEY
from src.modules.documents.exceptions import (
    DocumentStorageError,
    DocumentValidationError,
)
from src.modules.documents.models import Document
from src.modules.documents.repository import DocumentRepository
from src.modules.rag.chunker import ChunkingConfig, split_segments
from src.modules.rag.index import FILENAME_KEY, DocumentIndex
from src.modules.rag.loader import extract_text
from src.modules.rag.schemas import IndexingResult

logger = structlog.get_logger()

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Maximum upload size in bytes (10 MB)
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

# Characters replaced in storage keys
FORBIDDEN_FILENAME_CHARS = {"/", "\\", "\x00", "\n", "\r"}


def sanitize_filename(filename: str) -> str:
    """Reduce a client-supplied filename to a safe base name.

    Directory parts are dropped (both separators) and control characters
    replaced. Returns an empty string when nothing usable remains.
    """
    name = filename.replace("\\", "/").rsplit("/", 1)[-1].strip()
    name = "".join("_" if ch in FORBIDDEN_FILENAME_CHARS else ch for ch in name)
    if name in (".", ".."):
        return ""
    return name


def build_storage_key(filename: str) -> str:
    """Storage key: <epoch milliseconds>_<random suffix>_<sanitized basename>.

    The suffix keeps keys unique for uploads of the same name within one
    millisecond.
    """
    return f"{int(time.time() * 1000)}_{uuid4().hex[:8]}_{sanitize_filename(filename)}"


class IngestionOrchestrator:
    """Stores uploaded documents and makes them searchable.

    Storing the file and the metadata record is mandatory; indexing is not.
    A document whose indexing failed is still kept, with is_indexed False.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        file_store: FileStore,
        document_index: DocumentIndex,
        *,
        chunking_config: ChunkingConfig | None = None,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self._repo = repository
        self._files = file_store
        self._index = document_index
        self._chunking_config = chunking_config or ChunkingConfig()
        self._max_upload_bytes = max_upload_bytes

    @traced("documents.store")
    async def store(
        self,
        file_content: bytes,
        filename: str | None,
        content_type: str | None,
        size: int | None = None,
    ) -> Document:
        """Persist an upload and index it inline.

        Steps:
        1. Validate content and filename
        2. Write the bytes to the file store
        3. Create the metadata record (not indexed)
        4. Extract, chunk and index the text (failures are logged only)
        5. Mark the record indexed if step 4 succeeded

        Args:
            file_content: Raw uploaded bytes.
            filename: Original filename as sent by the client.
            content_type: MIME type as sent by the client.
            size: Reported size. Defaults to len(file_content).

        Returns:
            The stored Document. is_indexed is True only if the content is
            searchable.

        Raises:
            DocumentValidationError: Empty content, missing filename or
                oversized upload. Nothing is stored.
            DocumentStorageError: The file or the record could not be
                written. No record exists and the file is removed again.
        """
        if not file_content:
            raise DocumentValidationError("File is empty")

        safe_filename = sanitize_filename(filename or "")
        if not safe_filename:
            raise DocumentValidationError("Filename is required")

        if len(file_content) > self._max_upload_bytes:
            max_mb = self._max_upload_bytes / (1024 * 1024)
            raise DocumentValidationError(
                f"File too large. Maximum size: {max_mb:.0f} MB"
            )

        content_type = content_type or DEFAULT_CONTENT_TYPE
        size_bytes = size if size is not None else len(file_content)
        key = build_storage_key(safe_filename)

        try:
            file_path = await self._files.put(file_content, key)
        except StorageError as e:
            logger.error(
                "document_file_store_failed",
                filename=safe_filename,
                key=key,
                error=str(e),
            )
            raise DocumentStorageError(safe_filename, str(e)) from e

        try:
            doc = await self._repo.create(
                filename=safe_filename,
                content_type=content_type,
                size_bytes=size_bytes,
                file_path=file_path,
            )
        except Exception as e:
            logger.error(
                "document_record_create_failed",
                filename=safe_filename,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self._discard_file(file_path)
            raise DocumentStorageError(safe_filename, f"Failed to save record: {e}") from e

        result = await self._index_document(doc)
        if result.success:
            doc.is_indexed = True
            logger.info(
                "document_stored",
                doc_id=str(doc.id),
                filename=safe_filename,
                size_bytes=size_bytes,
                chunks_created=result.chunks_created,
            )
        else:
            # Best effort: the upload stands, it is just not searchable
            logger.warning(
                "document_indexing_failed",
                doc_id=result.document_id,
                filename=result.filename,
                error=result.error_message,
                error_type=result.error_type,
            )

        return doc

    async def _discard_file(self, file_path: Path) -> None:
        try:
            await self._files.delete(file_path)
        except StorageError as e:
            logger.warning(
                "document_orphan_file_left",
                path=str(file_path),
                error=str(e),
            )

    async def _index_document(self, doc: Document) -> IndexingResult:
        """Extract, chunk and index a stored document, then mark it indexed.

        Never raises; the outcome is reported in the returned IndexingResult.
        """
        doc_id = str(doc.id)
        try:
            chunks_created = await self._add_to_index(
                doc.id, doc.filename, doc.file_path, doc.content_type
            )
            if chunks_created > 0:
                await self._repo.mark_indexed(doc.id)
        except Exception as e:
            return IndexingResult(
                document_id=doc_id,
                filename=doc.filename,
                chunks_created=0,
                success=False,
                error_message=str(e),
                error_type=type(e).__name__,
            )

        if chunks_created == 0:
            return IndexingResult(
                document_id=doc_id,
                filename=doc.filename,
                chunks_created=0,
                success=False,
                error_message="No text could be extracted from the document",
            )

        return IndexingResult(
            document_id=doc_id,
            filename=doc.filename,
            chunks_created=chunks_created,
            success=True,
        )

    async def _add_to_index(
        self,
        doc_id: UUID,
        filename: str,
        file_path: Path,
        content_type: str,
    ) -> int:
        segments = extract_text(file_path, content_type)
        chunks = split_segments(segments, self._chunking_config)
        if not chunks:
            return 0

        for chunk in chunks:
            chunk.metadata[DOCUMENT_ID_KEY] = str(doc_id)
            chunk.metadata[FILENAME_KEY] = filename

        logger.debug(
            "document_indexing",
            doc_id=str(doc_id),
            segments=len(segments),
            chunk_count=len(chunks),
        )
        return await self._index.add(chunks)
