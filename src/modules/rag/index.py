"""Searchable index of document chunks.

Pairs an embedding provider with a vector store so that callers work with
text only: chunks go in, ranked chunks come out.
"""

import uuid

import structlog

from src.infrastructure.embeddings import EmbeddingProvider
from src.infrastructure.vectordb import DocumentChunk, VectorStore
from src.infrastructure.vectordb.protocol import DOCUMENT_ID_KEY
from src.modules.rag.schemas import Chunk, RetrievedChunk

logger = structlog.get_logger()

FILENAME_KEY = "filename"


class DocumentIndex:
    """Vector index over chunks, keyed by owning document id."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
    ) -> None:
        self._embeddings = embedding_provider
        self._store = vector_store

    async def add(self, chunks: list[Chunk]) -> int:
        """Embed and store chunks.

        Every chunk must already carry document_id and filename metadata.

        Returns:
            Number of chunks stored.

        Raises:
            ValueError: If a chunk has no document_id metadata.
            EmbeddingProviderError: If embedding fails.
            VectorStoreError: If the store rejects the chunks.
        """
        if not chunks:
            return 0

        for chunk in chunks:
            if not chunk.metadata.get(DOCUMENT_ID_KEY):
                raise ValueError(f"Chunk {chunk.position} has no {DOCUMENT_ID_KEY}")

        embeddings = await self._embeddings.embed_batch([c.content for c in chunks])

        stored = [
            DocumentChunk(
                id=f"{chunk.metadata[DOCUMENT_ID_KEY]}:{chunk.position}:{uuid.uuid4().hex[:8]}",
                content=chunk.content,
                embedding=embedding,
                metadata={
                    **chunk.metadata,
                    "position": str(chunk.position),
                    **({"page": str(chunk.page)} if chunk.page is not None else {}),
                },
            )
            for chunk, embedding in zip(chunks, embeddings, strict=True)
        ]
        await self._store.add_chunks(stored)

        logger.debug("index_chunks_added", count=len(stored))
        return len(stored)

    async def similarity_search(self, query: str, top_k: int) -> list[RetrievedChunk]:
        """Return up to top_k chunks most similar to the query, best first.

        An index with no entries yields an empty list.

        Raises:
            EmbeddingProviderError: If the query cannot be embedded.
            VectorStoreError: If the search fails.
        """
        query_embedding = await self._embeddings.embed(query)
        results = await self._store.query(query_embedding, top_k=top_k)

        return [
            RetrievedChunk(
                content=r.content,
                rank=rank,
                document_id=r.metadata.get(DOCUMENT_ID_KEY, ""),
                filename=r.metadata.get(FILENAME_KEY, "unknown"),
                score=r.score,
            )
            for rank, r in enumerate(results, 1)
        ]

    async def delete_by_document_ids(self, document_ids: list[str]) -> None:
        """Remove all chunks of the given documents.

        Raises:
            VectorStoreError: If deletion fails.
        """
        await self._store.delete_by_document_ids(document_ids)

    def count(self) -> int:
        """Number of chunks currently stored."""
        return self._store.count()
