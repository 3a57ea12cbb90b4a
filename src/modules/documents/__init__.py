"""Document management module.

Provides functionality for uploading, listing and deleting documents, and
keeps the file store, metadata store and vector index in step.
"""

from src.modules.documents.deletion import DeletionOrchestrator
from src.modules.documents.exceptions import (
    DocumentError,
    DocumentNotFoundError,
    DocumentStorageError,
    DocumentValidationError,
)
from src.modules.documents.ingestion import IngestionOrchestrator, sanitize_filename
from src.modules.documents.models import Document
from src.modules.documents.repository import DocumentRepository
from src.modules.documents.schemas import (
    DocumentDeleteResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentUploadResponse,
    ErrorResponse,
)
from src.modules.documents.service import DocumentService

__all__ = [
    "DeletionOrchestrator",
    "Document",
    "DocumentDeleteResponse",
    "DocumentError",
    "DocumentListResponse",
    "DocumentNotFoundError",
    "DocumentRepository",
    "DocumentResponse",
    "DocumentService",
    "DocumentStorageError",
    "DocumentUploadResponse",
    "DocumentValidationError",
    "ErrorResponse",
    "IngestionOrchestrator",
    "sanitize_filename",
]
