"""Document repository for database operations."""

from datetime import UTC, datetime
from pathlib import Path
from uuid import UUID, uuid4

import structlog

from src.infrastructure.database import Database
from src.modules.documents.exceptions import DocumentNotFoundError
from src.modules.documents.models import Document

logger = structlog.get_logger()


class DocumentRepository:
    """Repository for document metadata records.

    File bytes and vector entries live elsewhere; this class only touches
    the documents table.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create(
        self,
        filename: str,
        content_type: str,
        size_bytes: int,
        file_path: Path,
    ) -> Document:
        """Insert a new, not yet indexed document record.

        Args:
            filename: Original filename.
            content_type: MIME type reported by the client.
            size_bytes: Size of the stored file.
            file_path: Path where the file is stored.

        Returns:
            The persisted Document.
        """
        doc = Document(
            id=uuid4(),
            filename=filename,
            content_type=content_type,
            size_bytes=size_bytes,
            file_path=file_path,
            created_at=datetime.now(UTC),
            is_indexed=False,
        )

        await self._db.execute(
            """
            INSERT INTO documents (
                id, filename, content_type, size_bytes, file_path,
                is_indexed, created_at
            )
            VALUES (?, ?, ?, ?, ?, 0, ?)
            """,
            (
                str(doc.id),
                doc.filename,
                doc.content_type,
                doc.size_bytes,
                str(doc.file_path),
                doc.created_at.isoformat(),
            ),
        )

        logger.info(
            "document_record_created",
            doc_id=str(doc.id),
            filename=filename,
            content_type=content_type,
        )
        return doc

    async def get_by_id(self, doc_id: UUID) -> Document | None:
        """Get a document by its ID, or None."""
        row = await self._db.fetch_one(
            "SELECT * FROM documents WHERE id = ?",
            (str(doc_id),),
        )
        return Document.from_row(dict(row)) if row else None

    async def list_all(self) -> list[Document]:
        """List all documents, newest first."""
        rows = await self._db.fetch_all(
            "SELECT * FROM documents ORDER BY created_at DESC, rowid DESC"
        )
        return [Document.from_row(dict(row)) for row in rows]

    async def mark_indexed(self, doc_id: UUID) -> None:
        """Set is_indexed on a record. The flag is never cleared.

        Raises:
            DocumentNotFoundError: If the document doesn't exist.
        """
        cursor = await self._db.execute(
            "UPDATE documents SET is_indexed = 1 WHERE id = ?",
            (str(doc_id),),
        )
        if cursor.rowcount == 0:
            raise DocumentNotFoundError(str(doc_id))

        logger.debug("document_marked_indexed", doc_id=str(doc_id))

    async def delete(self, doc_id: UUID) -> None:
        """Delete a document record.

        Raises:
            DocumentNotFoundError: If the document doesn't exist.
        """
        cursor = await self._db.execute(
            "DELETE FROM documents WHERE id = ?",
            (str(doc_id),),
        )
        if cursor.rowcount == 0:
            raise DocumentNotFoundError(str(doc_id))

        logger.info("document_record_deleted", doc_id=str(doc_id))

    async def count(self) -> int:
        row = await self._db.fetch_one("SELECT COUNT(*) as count FROM documents")
        return int(row["count"]) if row else 0
