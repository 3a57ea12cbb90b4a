"""Document service for business logic."""

from uuid import UUID

import structlog

from src.modules.documents.deletion import DeletionOrchestrator
from src.modules.documents.exceptions import DocumentError, DocumentNotFoundError
from src.modules.documents.ingestion import IngestionOrchestrator
from src.modules.documents.models import Document
from src.modules.documents.repository import DocumentRepository

logger = structlog.get_logger()


class DocumentService:
    """Service for document management business logic.

    Entry point for the API layer. Uploads and deletions are delegated to
    their orchestrators; reads go straight to the repository. Without an
    ingestion orchestrator (no document index configured) documents can
    still be listed, read and deleted but not uploaded.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        ingestion: IngestionOrchestrator | None,
        deletion: DeletionOrchestrator,
    ) -> None:
        """Initialize the document service.

        Args:
            repository: Document repository for database operations.
            ingestion: Orchestrator for storing and indexing uploads, or None
                when uploads are not possible.
            deletion: Orchestrator for removing documents.
        """
        self._repo = repository
        self._ingestion = ingestion
        self._deletion = deletion

    @property
    def accepts_uploads(self) -> bool:
        return self._ingestion is not None

    async def upload_document(
        self,
        file_content: bytes,
        filename: str | None,
        content_type: str | None = None,
    ) -> Document:
        """Store and index an uploaded document.

        Raises:
            DocumentValidationError: Invalid upload.
            DocumentStorageError: The file could not be stored.
            DocumentError: Uploads are not configured.
        """
        if self._ingestion is None:
            raise DocumentError("Document indexing is not configured")

        return await self._ingestion.store(
            file_content,
            filename,
            content_type,
            size=len(file_content),
        )

    async def delete_document(self, doc_id: UUID) -> None:
        """Delete a document from all stores.

        Raises:
            DocumentNotFoundError: Document doesn't exist.
            DocumentStorageError: The file could not be removed.
        """
        await self._deletion.delete(doc_id)

    async def list_documents(self) -> list[Document]:
        """List all uploaded documents.

        Returns:
            List of documents ordered by creation date (newest first).
        """
        return await self._repo.list_all()

    async def get_document(self, doc_id: UUID) -> Document:
        """Get a document by ID.

        Raises:
            DocumentNotFoundError: Document doesn't exist.
        """
        doc = await self._repo.get_by_id(doc_id)
        if doc is None:
            raise DocumentNotFoundError(str(doc_id))
        return doc
