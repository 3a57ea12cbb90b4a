"""Embedding provider infrastructure."""

from src.infrastructure.embeddings.exceptions import (
    EmbeddingConfigurationError,
    EmbeddingConnectionError,
    EmbeddingProviderError,
    EmbeddingRateLimitError,
    EmbeddingTimeoutError,
)
from src.infrastructure.embeddings.openai import OpenAIEmbeddingProvider
from src.infrastructure.embeddings.protocol import EmbeddingProvider

__all__ = [
    "EmbeddingConfigurationError",
    "EmbeddingConnectionError",
    "EmbeddingProvider",
    "EmbeddingProviderError",
    "EmbeddingRateLimitError",
    "EmbeddingTimeoutError",
    "OpenAIEmbeddingProvider",
]
