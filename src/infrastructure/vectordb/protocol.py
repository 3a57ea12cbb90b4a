"""Protocol definition for vector store providers."""

from dataclasses import dataclass
from typing import Protocol

# Metadata key linking a stored chunk to its owning document record
DOCUMENT_ID_KEY = "document_id"


@dataclass
class DocumentChunk:
    """A chunk of a document for storage in the vector store."""

    id: str
    content: str
    embedding: list[float]
    metadata: dict[str, str]


@dataclass
class RetrievalResult:
    """Result from a vector similarity search."""

    id: str
    content: str
    metadata: dict[str, str]
    score: float  # Higher is more similar


class VectorStore(Protocol):
    """Protocol for vector store implementations."""

    async def add_chunks(self, chunks: list[DocumentChunk]) -> None:
        """Add chunks with precomputed embeddings.

        Raises:
            VectorStoreError: If addition fails.
        """
        ...

    async def query(
        self,
        embedding: list[float],
        *,
        top_k: int = 5,
    ) -> list[RetrievalResult]:
        """Return up to top_k chunks ordered by descending similarity.

        Raises:
            VectorStoreError: If the query fails.
        """
        ...

    async def delete_by_document_ids(self, document_ids: list[str]) -> None:
        """Delete every chunk whose document_id metadata is in document_ids.

        Raises:
            VectorStoreError: If deletion fails.
        """
        ...

    def count(self) -> int:
        """Return the number of chunks in the store."""
        ...
