"""Exceptions raised by embedding providers."""


class EmbeddingProviderError(Exception):
    """Base exception for embedding provider errors."""

    def __init__(self, message: str, *, provider: str = "unknown") -> None:
        self.provider = provider
        super().__init__(message)


class EmbeddingTimeoutError(EmbeddingProviderError):
    """Raised when an embedding request times out."""


class EmbeddingConnectionError(EmbeddingProviderError):
    """Raised when the embedding service cannot be reached."""


class EmbeddingRateLimitError(EmbeddingProviderError):
    """Raised when the provider rejects a request with HTTP 429."""


class EmbeddingConfigurationError(EmbeddingProviderError):
    """Raised when there's a configuration issue (e.g., missing API key)."""
