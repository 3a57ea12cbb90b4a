"""Removal of a document from the index, the file store and the metadata store."""

from uuid import UUID

import structlog

from src.infrastructure.observability import traced
from src.infrastructure.storage import FileStore, StorageError
from src.modules.documents.exceptions import DocumentNotFoundError, DocumentStorageError
from src.modules.documents.repository import DocumentRepository
from src.modules.rag.index import DocumentIndex

logger = structlog.get_logger()


class DeletionOrchestrator:
    """Deletes a document from every store it lives in.

    Order: vector entries, file, metadata record. Leftover vector entries
    are tolerated, including when no index is configured; a file that
    cannot be removed aborts the deletion with the record still in place.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        file_store: FileStore,
        document_index: DocumentIndex | None,
    ) -> None:
        self._repo = repository
        self._files = file_store
        self._index = document_index

    @traced("documents.delete")
    async def delete(self, doc_id: UUID) -> None:
        """Delete a document.

        Args:
            doc_id: UUID of the document to delete.

        Raises:
            DocumentNotFoundError: Document doesn't exist. Nothing is changed.
            DocumentStorageError: The stored file exists but could not be
                removed. The metadata record is kept.
        """
        doc = await self._repo.get_by_id(doc_id)
        if doc is None:
            raise DocumentNotFoundError(str(doc_id))

        if doc.is_indexed:
            await self._remove_from_index(doc.id)

        try:
            if await self._files.exists(doc.file_path):
                await self._files.delete(doc.file_path)
            else:
                logger.debug(
                    "document_file_already_absent",
                    doc_id=str(doc.id),
                    path=str(doc.file_path),
                )
        except StorageError as e:
            logger.error(
                "document_file_removal_failed",
                doc_id=str(doc.id),
                path=str(doc.file_path),
                error=str(e),
            )
            raise DocumentStorageError(doc.filename, str(e)) from e

        await self._repo.delete(doc.id)

        logger.info(
            "document_deleted",
            doc_id=str(doc.id),
            filename=doc.filename,
            was_indexed=doc.is_indexed,
        )

    async def _remove_from_index(self, doc_id: UUID) -> None:
        # Orphaned vector entries are tolerated
        if self._index is None:
            logger.warning("document_index_unavailable", doc_id=str(doc_id))
            return

        try:
            await self._index.delete_by_document_ids([str(doc_id)])
        except Exception as e:
            logger.warning(
                "document_index_removal_failed",
                doc_id=str(doc_id),
                error=str(e),
                error_type=type(e).__name__,
            )
