"""Tests for the JSON API routes."""

from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_document_service, get_rag_service
from src.api.rate_limit import RATE_LIMIT_MESSAGE, limiter
from src.api.routes import MAX_QUESTION_LENGTH, NOT_CONFIGURED_MESSAGE
from src.config import get_settings
from src.main import app
from src.modules.documents import (
    Document,
    DocumentNotFoundError,
    DocumentStorageError,
    DocumentValidationError,
)
from src.modules.rag import AskResult
from src.modules.rag.service import GENERIC_ERROR_ANSWER


def make_document(filename: str = "notes.txt", *, is_indexed: bool = True) -> Document:
    return Document(
        id=uuid4(),
        filename=filename,
        content_type="text/plain",
        size_bytes=12,
        file_path=Path(f"/uploads/1700000000000_{filename}"),
        created_at=datetime.now(UTC),
        is_indexed=is_indexed,
    )


def make_doc_service(*, accepts_uploads: bool = True) -> MagicMock:
    service = MagicMock()
    service.accepts_uploads = accepts_uploads
    service.list_documents = AsyncMock(return_value=[])
    service.get_document = AsyncMock()
    service.upload_document = AsyncMock()
    service.delete_document = AsyncMock()
    return service


@pytest.fixture
def doc_service() -> MagicMock:
    return make_doc_service()


@pytest.fixture
def rag_service() -> MagicMock:
    service = MagicMock()
    service.ask = AsyncMock()
    return service


@pytest.fixture(autouse=True)
def reset_limiter() -> Generator[None, None, None]:
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def client(doc_service, rag_service) -> Generator[TestClient, None, None]:
    """Create test client with mocked services."""
    app.dependency_overrides.clear()
    app.dependency_overrides[get_document_service] = lambda: doc_service
    app.dependency_overrides[get_rag_service] = lambda: rag_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_doc_service() -> MagicMock:
    return make_doc_service(accepts_uploads=False)


@pytest.fixture
def unconfigured_client(unconfigured_doc_service) -> Generator[TestClient, None, None]:
    """Create test client without embeddings or generation configured."""
    app.dependency_overrides.clear()
    app.dependency_overrides[get_document_service] = lambda: unconfigured_doc_service
    app.dependency_overrides[get_rag_service] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestListDocuments:
    """Tests for GET /documents."""

    def test_empty(self, client: TestClient) -> None:
        response = client.get("/documents")

        assert response.status_code == 200
        assert response.json() == {"documents": [], "total_count": 0}

    def test_lists_documents(self, client: TestClient, doc_service) -> None:
        docs = [make_document("b.txt"), make_document("a.txt", is_indexed=False)]
        doc_service.list_documents = AsyncMock(return_value=docs)

        response = client.get("/documents")

        data = response.json()
        assert data["total_count"] == 2
        assert [d["filename"] for d in data["documents"]] == ["b.txt", "a.txt"]
        assert data["documents"][0]["id"] == str(docs[0].id)
        assert data["documents"][1]["is_indexed"] is False
        assert "file_path" not in data["documents"][0]

    def test_works_without_index(self, unconfigured_client: TestClient) -> None:
        response = unconfigured_client.get("/documents")

        assert response.status_code == 200
        assert response.json()["total_count"] == 0


class TestGetDocument:
    """Tests for GET /documents/{doc_id}."""

    def test_returns_document(self, client: TestClient, doc_service) -> None:
        doc = make_document("notes.txt")
        doc_service.get_document = AsyncMock(return_value=doc)

        response = client.get(f"/documents/{doc.id}")

        assert response.status_code == 200
        assert response.json()["id"] == str(doc.id)
        assert response.json()["filename"] == "notes.txt"
        doc_service.get_document.assert_awaited_once_with(doc.id)

    def test_unknown_document_is_404(self, client: TestClient, doc_service) -> None:
        doc_id = uuid4()
        doc_service.get_document = AsyncMock(side_effect=DocumentNotFoundError(str(doc_id)))

        response = client.get(f"/documents/{doc_id}")

        assert response.status_code == 404
        assert response.json() == {"error": "Document not found."}


class TestUploadDocument:
    """Tests for POST /documents."""

    def test_upload_success(self, client: TestClient, doc_service) -> None:
        doc = make_document("notes.txt")
        doc_service.upload_document = AsyncMock(return_value=doc)

        response = client.post(
            "/documents",
            files={"file": ("notes.txt", b"hello world!", "text/plain")},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["document"]["id"] == str(doc.id)
        assert data["document"]["is_indexed"] is True
        call_kwargs = doc_service.upload_document.call_args.kwargs
        assert call_kwargs["file_content"] == b"hello world!"
        assert call_kwargs["filename"] == "notes.txt"
        assert call_kwargs["content_type"] == "text/plain"

    def test_upload_stored_but_not_indexed(self, client: TestClient, doc_service) -> None:
        doc_service.upload_document = AsyncMock(
            return_value=make_document("scan.pdf", is_indexed=False)
        )

        response = client.post(
            "/documents",
            files={"file": ("scan.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 201
        assert response.json()["document"]["is_indexed"] is False

    def test_missing_file_is_rejected(self, client: TestClient) -> None:
        response = client.post("/documents", data={})

        assert response.status_code == 422

    def test_validation_error_is_400(self, client: TestClient, doc_service) -> None:
        doc_service.upload_document = AsyncMock(
            side_effect=DocumentValidationError("File is empty")
        )

        response = client.post(
            "/documents",
            files={"file": ("empty.txt", b"x", "text/plain")},
        )

        assert response.status_code == 400
        assert "empty.txt" in response.json()["error"]

    def test_storage_error_is_500(self, client: TestClient, doc_service) -> None:
        doc_service.upload_document = AsyncMock(
            side_effect=DocumentStorageError("notes.txt", "disk full")
        )

        response = client.post(
            "/documents",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 500
        assert "disk full" in response.json()["error"]

    def test_unexpected_error_is_500(self, client: TestClient, doc_service) -> None:
        doc_service.upload_document = AsyncMock(side_effect=RuntimeError("database is locked"))

        response = client.post(
            "/documents",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 500
        assert "notes.txt" in response.json()["error"]

    def test_not_configured(self, unconfigured_client: TestClient) -> None:
        response = unconfigured_client.post(
            "/documents",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 503
        assert response.json() == {"error": NOT_CONFIGURED_MESSAGE}


class TestDeleteDocument:
    """Tests for DELETE /documents/{doc_id}."""

    def test_delete_success(self, client: TestClient, doc_service) -> None:
        doc_id = uuid4()

        response = client.delete(f"/documents/{doc_id}")

        assert response.status_code == 200
        assert response.json() == {"message": "Document deleted."}
        doc_service.delete_document.assert_awaited_once_with(doc_id)

    def test_unknown_document_is_404(self, client: TestClient, doc_service) -> None:
        doc_id = uuid4()
        doc_service.delete_document = AsyncMock(side_effect=DocumentNotFoundError(str(doc_id)))

        response = client.delete(f"/documents/{doc_id}")

        assert response.status_code == 404
        assert response.json() == {"error": "Document not found."}

    def test_storage_error_is_500(self, client: TestClient, doc_service) -> None:
        doc_service.delete_document = AsyncMock(
            side_effect=DocumentStorageError("notes.txt", "permission denied")
        )

        response = client.delete(f"/documents/{uuid4()}")

        assert response.status_code == 500
        assert "permission denied" in response.json()["error"]

    def test_invalid_id_is_422(self, client: TestClient, doc_service) -> None:
        response = client.delete("/documents/not-a-uuid")

        assert response.status_code == 422
        doc_service.delete_document.assert_not_called()

    def test_works_without_index(
        self, unconfigured_client: TestClient, unconfigured_doc_service
    ) -> None:
        doc_id = uuid4()

        response = unconfigured_client.delete(f"/documents/{doc_id}")

        assert response.status_code == 200
        unconfigured_doc_service.delete_document.assert_awaited_once_with(doc_id)


class TestAsk:
    """Tests for POST /ask."""

    def test_answer(self, client: TestClient, rag_service) -> None:
        rag_service.ask = AsyncMock(
            return_value=AskResult(question="What is Atlas?", answer="A cat.")
        )

        response = client.post("/ask", data={"question": "What is Atlas?"})

        assert response.status_code == 200
        assert response.json() == {
            "question": "What is Atlas?",
            "answer": "A cat.",
            "is_error": False,
        }
        rag_service.ask.assert_awaited_once_with("What is Atlas?")

    def test_failure_is_reported_in_body(self, client: TestClient, rag_service) -> None:
        rag_service.ask = AsyncMock(
            return_value=AskResult(question="q", answer="Request timed out.", is_error=True)
        )

        response = client.post("/ask", data={"question": "q"})

        assert response.status_code == 200
        assert response.json()["is_error"] is True
        assert response.json()["answer"] == "Request timed out."

    def test_unexpected_error_gives_generic_answer(self, client: TestClient, rag_service) -> None:
        rag_service.ask = AsyncMock(side_effect=RuntimeError("boom"))

        response = client.post("/ask", data={"question": "q"})

        assert response.status_code == 200
        assert response.json() == {
            "question": "q",
            "answer": GENERIC_ERROR_ANSWER,
            "is_error": True,
        }

    def test_responses_are_not_cached(self, client: TestClient, rag_service) -> None:
        rag_service.ask = AsyncMock(return_value=AskResult(question="q", answer="a"))

        response = client.post("/ask", data={"question": "q"})

        assert response.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
        assert response.headers["Pragma"] == "no-cache"

    def test_not_configured(self, unconfigured_client: TestClient) -> None:
        response = unconfigured_client.post("/ask", data={"question": "q"})

        assert response.status_code == 200
        assert response.json()["answer"] == NOT_CONFIGURED_MESSAGE
        assert response.json()["is_error"] is True

    def test_requires_question(self, client: TestClient) -> None:
        response = client.post("/ask", data={})

        assert response.status_code == 422

    def test_rejects_empty_question(self, client: TestClient) -> None:
        response = client.post("/ask", data={"question": ""})

        assert response.status_code == 422

    def test_rejects_oversized_question(self, client: TestClient, rag_service) -> None:
        response = client.post("/ask", data={"question": "x" * (MAX_QUESTION_LENGTH + 1)})

        assert response.status_code == 422
        rag_service.ask.assert_not_called()

    def test_rate_limit(self, client: TestClient, rag_service) -> None:
        rag_service.ask = AsyncMock(return_value=AskResult(question="q", answer="a"))
        attempts = get_settings().rate_limit_requests + 1

        statuses = [
            client.post("/ask", data={"question": "q"}).status_code for _ in range(attempts)
        ]

        assert 429 in statuses
        throttled = client.post("/ask", data={"question": "q"})
        assert throttled.json() == {"question": "", "answer": RATE_LIMIT_MESSAGE, "is_error": True}
