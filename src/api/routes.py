"""JSON API routes for documents and questions."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.dependencies import get_document_service, get_rag_service
from src.api.rate_limit import get_rate_limit_string, limiter
from src.config import Settings, get_settings
from src.modules.documents import (
    DocumentDeleteResponse,
    DocumentListResponse,
    DocumentNotFoundError,
    DocumentResponse,
    DocumentService,
    DocumentStorageError,
    DocumentUploadResponse,
    DocumentValidationError,
    ErrorResponse,
)
from src.modules.rag import RAGService
from src.modules.rag.service import GENERIC_ERROR_ANSWER

logger = structlog.get_logger()

router = APIRouter()

# Input constraints
MAX_QUESTION_LENGTH = 2000

NOT_CONFIGURED_MESSAGE = (
    "Document search is not configured. Please set OPENROUTER_API_KEY and EMBEDDING_API_KEY."
)

# Answers depend on the current document set and must not be cached
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class AskResponse(BaseModel):
    """Answer to a question. On failure answer holds a user-facing message."""

    question: str
    answer: str
    is_error: bool


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.get("/documents", response_model=DocumentListResponse)
async def list_documents(
    doc_service: Annotated[DocumentService, Depends(get_document_service)],
) -> DocumentListResponse:
    """List all documents, newest first."""
    docs = await doc_service.list_documents()
    return DocumentListResponse(
        documents=[DocumentResponse.from_document(d) for d in docs],
        total_count=len(docs),
    )


@router.post(
    "/documents",
    status_code=201,
    response_model=DocumentUploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_document(
    file: Annotated[UploadFile, File()],
    settings: Annotated[Settings, Depends(get_settings)],
    doc_service: Annotated[DocumentService, Depends(get_document_service)],
) -> Response | DocumentUploadResponse:
    """Store an uploaded document and index it.

    Indexing is best effort: a stored document that could not be indexed is
    returned with is_indexed false.
    """
    if not doc_service.accepts_uploads:
        return _error(503, NOT_CONFIGURED_MESSAGE)

    if not file.filename:
        return _error(400, "No file selected.")

    # Reject before reading into memory when the client reports a size
    if file.size is not None and file.size > settings.max_upload_bytes:
        max_mb = settings.max_upload_bytes / (1024 * 1024)
        return _error(400, f"File too large. Maximum size: {max_mb:.0f} MB")

    try:
        file_content = await file.read()
        doc = await doc_service.upload_document(
            file_content=file_content,
            filename=file.filename,
            content_type=file.content_type,
        )

    except DocumentValidationError as e:
        return _error(400, f"Upload of {file.filename} failed: {e}")

    except DocumentStorageError as e:
        return _error(500, f"Upload of {file.filename} failed: {e.reason}")

    except Exception as e:
        logger.error(
            "api_document_upload_error",
            error=str(e),
            error_type=type(e).__name__,
        )
        return _error(500, f"Upload of {file.filename} failed: {e}")

    logger.info(
        "api_document_uploaded",
        doc_id=str(doc.id),
        filename=doc.filename,
        is_indexed=doc.is_indexed,
    )
    return DocumentUploadResponse(document=DocumentResponse.from_document(doc))


@router.get(
    "/documents/{doc_id}",
    response_model=DocumentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_document(
    doc_id: UUID,
    doc_service: Annotated[DocumentService, Depends(get_document_service)],
) -> Response | DocumentResponse:
    """Return the metadata of one document."""
    try:
        doc = await doc_service.get_document(doc_id)
    except DocumentNotFoundError:
        return _error(404, "Document not found.")

    return DocumentResponse.from_document(doc)


@router.delete(
    "/documents/{doc_id}",
    response_model=DocumentDeleteResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def delete_document(
    doc_id: UUID,
    doc_service: Annotated[DocumentService, Depends(get_document_service)],
) -> Response | DocumentDeleteResponse:
    """Delete a document from the index, the file store and the database."""
    try:
        await doc_service.delete_document(doc_id)

    except DocumentNotFoundError:
        return _error(404, "Document not found.")

    except DocumentStorageError as e:
        return _error(500, f"Delete failed: {e.reason}")

    except Exception as e:
        logger.error(
            "api_document_delete_error",
            error=str(e),
            error_type=type(e).__name__,
            doc_id=str(doc_id),
        )
        return _error(500, f"Delete failed: {e}")

    logger.info("api_document_deleted", doc_id=str(doc_id))
    return DocumentDeleteResponse(message="Document deleted.")


@router.post("/ask", response_model=AskResponse)
@limiter.limit(get_rate_limit_string)
async def ask(
    request: Request,
    response: Response,
    question: Annotated[str, Form(min_length=1, max_length=MAX_QUESTION_LENGTH)],
    rag_service: Annotated[RAGService | None, Depends(get_rag_service)],
) -> AskResponse:
    """Answer a question from the uploaded documents.

    Failures are reported in the body with is_error set, never as an HTTP
    error status.
    """
    response.headers.update(NO_CACHE_HEADERS)

    if rag_service is None:
        logger.warning("rag_not_configured")
        return AskResponse(question=question, answer=NOT_CONFIGURED_MESSAGE, is_error=True)

    try:
        result = await rag_service.ask(question)
    except Exception as e:
        logger.error(
            "api_ask_error",
            error=str(e),
            error_type=type(e).__name__,
            question_length=len(question),
        )
        return AskResponse(question=question, answer=GENERIC_ERROR_ANSWER, is_error=True)

    return AskResponse(
        question=result.question,
        answer=result.answer,
        is_error=result.is_error,
    )
