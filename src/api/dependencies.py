"""FastAPI dependency providers for services and their collaborators."""

from pathlib import Path
from typing import Annotated

from fastapi import Depends

from src.config import Settings, get_settings
from src.infrastructure.database import get_database
from src.infrastructure.embeddings import OpenAIEmbeddingProvider
from src.infrastructure.llm import OpenRouterProvider
from src.infrastructure.storage import LocalFileStore
from src.infrastructure.vectordb import ChromaVectorStore
from src.modules.documents import (
    DeletionOrchestrator,
    DocumentRepository,
    DocumentService,
    IngestionOrchestrator,
)
from src.modules.rag import ChunkingConfig, DocumentIndex, RAGService

# Singletons (per process)
_vector_store_cache: dict[str, ChromaVectorStore] = {}
_document_index_cache: dict[str, DocumentIndex] = {}
_file_store_cache: dict[str, LocalFileStore] = {}


def get_llm_provider(
    settings: Annotated[Settings, Depends(get_settings)],
) -> OpenRouterProvider | None:
    """Get the generation provider if configured, None otherwise."""
    if settings.openrouter_api_key is None:
        return None

    return OpenRouterProvider(
        api_key=settings.openrouter_api_key.get_secret_value(),
        default_model=settings.llm_model,
        timeout_seconds=settings.llm_timeout_seconds,
        circuit_breaker_fail_max=settings.circuit_breaker_fail_max,
        circuit_breaker_timeout=settings.circuit_breaker_timeout,
    )


def get_vector_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ChromaVectorStore:
    """Get or create the vector store singleton.

    The vector store is cached per persist path to avoid re-initializing
    Chroma on every request.
    """
    persist_path = settings.chroma_persist_path

    if persist_path not in _vector_store_cache:
        _vector_store_cache[persist_path] = ChromaVectorStore(
            persist_path=Path(persist_path),
            collection_name=settings.chroma_collection_name,
        )

    return _vector_store_cache[persist_path]


def get_document_index(
    settings: Annotated[Settings, Depends(get_settings)],
    vector_store: Annotated[ChromaVectorStore, Depends(get_vector_store)],
) -> DocumentIndex | None:
    """Get or create the document index singleton.

    Returns None if embeddings aren't configured. The embedding provider
    lives as long as the index so its circuit breaker state is shared
    across requests.
    """
    if settings.embedding_api_key is None:
        return None

    persist_path = settings.chroma_persist_path

    if persist_path not in _document_index_cache:
        embedding_provider = OpenAIEmbeddingProvider(
            api_key=settings.embedding_api_key.get_secret_value(),
            model=settings.embedding_model,
            base_url=settings.embedding_base_url,
            timeout_seconds=settings.embedding_timeout_seconds,
            circuit_breaker_fail_max=settings.circuit_breaker_fail_max,
            circuit_breaker_timeout=settings.circuit_breaker_timeout,
        )
        _document_index_cache[persist_path] = DocumentIndex(
            embedding_provider=embedding_provider,
            vector_store=vector_store,
        )

    return _document_index_cache[persist_path]


def get_file_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> LocalFileStore:
    """Get or create the file store for the configured storage path."""
    storage_path = settings.storage_path

    if storage_path not in _file_store_cache:
        _file_store_cache[storage_path] = LocalFileStore(Path(storage_path))

    return _file_store_cache[storage_path]


def get_document_repository() -> DocumentRepository:
    return DocumentRepository(get_database())


def get_document_service(
    settings: Annotated[Settings, Depends(get_settings)],
    repository: Annotated[DocumentRepository, Depends(get_document_repository)],
    file_store: Annotated[LocalFileStore, Depends(get_file_store)],
    document_index: Annotated[DocumentIndex | None, Depends(get_document_index)],
) -> DocumentService:
    """Get the document service.

    Uploads are disabled when embeddings are not configured. Listing,
    lookup and deletion always work.
    """
    ingestion = None
    if document_index is not None:
        ingestion = IngestionOrchestrator(
            repository,
            file_store,
            document_index,
            chunking_config=ChunkingConfig(
                max_size=settings.rag_chunk_size,
                overlap=settings.rag_chunk_overlap,
            ),
            max_upload_bytes=settings.max_upload_bytes,
        )
    deletion = DeletionOrchestrator(repository, file_store, document_index)

    return DocumentService(repository, ingestion, deletion)


def get_rag_service(
    settings: Annotated[Settings, Depends(get_settings)],
    llm_provider: Annotated[OpenRouterProvider | None, Depends(get_llm_provider)],
    document_index: Annotated[DocumentIndex | None, Depends(get_document_index)],
) -> RAGService | None:
    """Get the RAG service if fully configured.

    Returns None if generation or embeddings are not configured.
    """
    if llm_provider is None or document_index is None:
        return None

    return RAGService(
        llm_provider=llm_provider,
        document_index=document_index,
        top_k=settings.rag_top_k,
        generation_timeout_seconds=settings.llm_timeout_seconds,
    )
