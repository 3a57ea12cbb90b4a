"""Document Pydantic schemas for API responses."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.modules.documents.models import Document


class DocumentResponse(BaseModel):
    """Response schema for a single document."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    filename: str
    content_type: str
    size_bytes: int
    is_indexed: bool
    created_at: datetime

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentResponse":
        return cls.model_validate(doc)


class DocumentListResponse(BaseModel):
    """Response schema for document list."""

    documents: list[DocumentResponse]
    total_count: int


class DocumentUploadResponse(BaseModel):
    document: DocumentResponse


class DocumentDeleteResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str

