"""RAG (Retrieval-Augmented Generation) module.

This module provides question answering over uploaded documents:
- Text extraction and chunking
- The chunk index (embeddings + vector store)
- Question answering with retrieved context
- Classification of upstream failures
"""

from src.modules.rag.chunker import ChunkingConfig, split_segments, split_text
from src.modules.rag.classifier import classify_error, is_rate_limit_error
from src.modules.rag.exceptions import ClassifiedError, ErrorKind
from src.modules.rag.index import DocumentIndex
from src.modules.rag.loader import DocumentLoadError, extract_text
from src.modules.rag.schemas import (
    AskResult,
    Chunk,
    IndexingResult,
    RetrievedChunk,
    TextSegment,
)
from src.modules.rag.service import RAGService

__all__ = [
    "AskResult",
    "Chunk",
    "ChunkingConfig",
    "ClassifiedError",
    "DocumentIndex",
    "DocumentLoadError",
    "ErrorKind",
    "IndexingResult",
    "RAGService",
    "RetrievedChunk",
    "TextSegment",
    "classify_error",
    "extract_text",
    "is_rate_limit_error",
    "split_segments",
    "split_text",
]
