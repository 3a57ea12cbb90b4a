"""Chroma vector store implementation."""

import os
from pathlib import Path
from typing import Any

# Disable Chroma telemetry before the client is imported
os.environ.setdefault("ANONYMIZED_TELEMETRY", "False")

import chromadb
import structlog
from chromadb.config import Settings as ChromaSettings

from src.infrastructure.observability import get_tracer
from src.infrastructure.vectordb.exceptions import (
    VectorStoreConfigurationError,
    VectorStoreError,
)
from src.infrastructure.vectordb.protocol import (
    DOCUMENT_ID_KEY,
    DocumentChunk,
    RetrievalResult,
)

logger = structlog.get_logger()
tracer = get_tracer(__name__)


class ChromaVectorStore:
    """Vector store using ChromaDB in embedded, persistent mode.

    Embeddings are computed by the caller; the collection uses cosine space
    so that score = 1 - distance.
    """

    PROVIDER_NAME = "chroma"

    def __init__(
        self,
        persist_path: str | Path,
        collection_name: str = "documents",
    ) -> None:
        """Open (or create) the persistent collection.

        Raises:
            VectorStoreConfigurationError: If initialization fails.
        """
        self._persist_path = Path(persist_path)
        self._collection_name = collection_name

        try:
            self._persist_path.mkdir(parents=True, exist_ok=True)

            self._client = chromadb.PersistentClient(
                path=str(self._persist_path),
                settings=ChromaSettings(anonymized_telemetry=False),
            )
            self._collection = self._client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
            )

            logger.info(
                "chroma_initialized",
                provider=self.PROVIDER_NAME,
                persist_path=str(self._persist_path),
                collection=collection_name,
                count=self._collection.count(),
            )

        except Exception as e:
            logger.error(
                "chroma_init_failed",
                provider=self.PROVIDER_NAME,
                persist_path=str(self._persist_path),
                error=str(e),
            )
            raise VectorStoreConfigurationError(
                f"Failed to initialize Chroma: {e}",
                provider=self.PROVIDER_NAME,
            ) from e

    async def add_chunks(self, chunks: list[DocumentChunk]) -> None:
        """Add chunks with embeddings to the collection.

        Raises:
            VectorStoreError: If addition fails.
        """
        if not chunks:
            return

        with tracer.start_as_current_span("vectordb.add_chunks") as span:
            span.set_attribute("vectordb.provider", self.PROVIDER_NAME)
            span.set_attribute("vectordb.chunk_count", len(chunks))

            try:
                metadatas: list[dict[str, Any]] = [chunk.metadata for chunk in chunks]
                self._collection.add(
                    ids=[chunk.id for chunk in chunks],
                    documents=[chunk.content for chunk in chunks],
                    embeddings=[chunk.embedding for chunk in chunks],
                    metadatas=metadatas,
                )
            except Exception as e:
                span.record_exception(e)
                logger.error(
                    "chroma_add_failed",
                    provider=self.PROVIDER_NAME,
                    error=str(e),
                    chunk_count=len(chunks),
                )
                raise VectorStoreError(
                    f"Failed to add chunks: {e}",
                    provider=self.PROVIDER_NAME,
                ) from e

            logger.debug(
                "chroma_chunks_added",
                provider=self.PROVIDER_NAME,
                count=len(chunks),
            )

    async def query(
        self,
        embedding: list[float],
        *,
        top_k: int = 5,
    ) -> list[RetrievalResult]:
        """Query for the top_k most similar chunks.

        An empty collection yields an empty list rather than an error.

        Raises:
            VectorStoreError: If the query fails.
        """
        with tracer.start_as_current_span("vectordb.query") as span:
            span.set_attribute("vectordb.provider", self.PROVIDER_NAME)
            span.set_attribute("vectordb.top_k", top_k)

            try:
                available = self._collection.count()
                if available == 0:
                    return []

                results = self._collection.query(
                    query_embeddings=[embedding],
                    n_results=min(top_k, available),
                    include=["documents", "metadatas", "distances"],
                )
            except Exception as e:
                span.record_exception(e)
                logger.error(
                    "chroma_query_failed",
                    provider=self.PROVIDER_NAME,
                    error=str(e),
                )
                raise VectorStoreError(
                    f"Failed to query: {e}",
                    provider=self.PROVIDER_NAME,
                ) from e

            # Chroma returns one inner list per query embedding
            ids = (results.get("ids") or [[]])[0]
            documents = (results.get("documents") or [[]])[0]
            metadatas = (results.get("metadatas") or [[]])[0]
            distances = (results.get("distances") or [[]])[0]

            retrieval_results: list[RetrievalResult] = []
            for i, chunk_id in enumerate(ids):
                raw_meta = metadatas[i] if i < len(metadatas) else None
                distance = distances[i] if i < len(distances) else 0.0
                retrieval_results.append(
                    RetrievalResult(
                        id=chunk_id,
                        content=documents[i] if i < len(documents) else "",
                        metadata={k: str(v) for k, v in (raw_meta or {}).items()},
                        score=1.0 - float(distance),
                    )
                )

            # Chroma already orders by distance; keep the contract explicit
            retrieval_results.sort(key=lambda r: r.score, reverse=True)

            span.set_attribute("vectordb.results_count", len(retrieval_results))
            logger.debug(
                "chroma_query_success",
                provider=self.PROVIDER_NAME,
                top_k=top_k,
                results_count=len(retrieval_results),
            )
            return retrieval_results

    async def delete_by_document_ids(self, document_ids: list[str]) -> None:
        """Delete every chunk belonging to the given documents.

        Raises:
            VectorStoreError: If deletion fails.
        """
        if not document_ids:
            return

        with tracer.start_as_current_span("vectordb.delete") as span:
            span.set_attribute("vectordb.provider", self.PROVIDER_NAME)
            span.set_attribute("vectordb.document_count", len(document_ids))

            try:
                self._collection.delete(
                    where={DOCUMENT_ID_KEY: {"$in": list(document_ids)}}
                )
            except Exception as e:
                span.record_exception(e)
                logger.error(
                    "chroma_delete_failed",
                    provider=self.PROVIDER_NAME,
                    document_ids=document_ids,
                    error=str(e),
                )
                raise VectorStoreError(
                    f"Failed to delete chunks: {e}",
                    provider=self.PROVIDER_NAME,
                ) from e

            logger.info(
                "chroma_chunks_deleted",
                provider=self.PROVIDER_NAME,
                document_ids=document_ids,
            )

    def count(self) -> int:
        """Return the number of chunks in the store."""
        return self._collection.count()
