"""Vector store infrastructure."""

from src.infrastructure.vectordb.chroma import ChromaVectorStore
from src.infrastructure.vectordb.exceptions import (
    VectorStoreConfigurationError,
    VectorStoreError,
)
from src.infrastructure.vectordb.protocol import (
    DocumentChunk,
    RetrievalResult,
    VectorStore,
)

__all__ = [
    "ChromaVectorStore",
    "DocumentChunk",
    "RetrievalResult",
    "VectorStore",
    "VectorStoreConfigurationError",
    "VectorStoreError",
]
