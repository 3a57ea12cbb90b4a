"""Schemas for the RAG module."""

from dataclasses import dataclass, field


@dataclass
class TextSegment:
    """A raw slice of extracted text, e.g. one PDF page."""

    content: str
    page: int | None = None


@dataclass
class Chunk:
    """A bounded slice of a document's text, the unit stored in the index.

    metadata is annotated with the owning document's id and filename before
    the chunk is submitted to the vector index.
    """

    content: str
    position: int  # Order within the document
    page: int | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class RetrievedChunk:
    """A chunk returned by similarity search for one query."""

    content: str
    rank: int  # 1-based, most similar first
    document_id: str
    filename: str
    score: float = 0.0


@dataclass
class IndexingResult:
    """Outcome of indexing one document.

    Returned instead of raised so that callers can log a failed best-effort
    indexing attempt and carry on.
    """

    document_id: str
    filename: str
    chunks_created: int
    success: bool
    error_message: str | None = None
    error_type: str | None = None


@dataclass
class AskResult:
    """Answer to a question as presented to the user."""

    question: str
    answer: str
    is_error: bool = False
