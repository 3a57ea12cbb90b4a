"""Exceptions raised by text generation providers."""


class LLMProviderError(Exception):
    """Base exception for generation provider errors.

    The message keeps the upstream error text so that status codes and
    provider error markers survive wrapping.
    """

    def __init__(self, message: str, *, provider: str = "unknown") -> None:
        self.provider = provider
        super().__init__(message)


class LLMTimeoutError(LLMProviderError):
    """Raised when a generation request times out."""


class LLMRateLimitError(LLMProviderError):
    """Raised when the provider rejects a request with HTTP 429."""


class LLMConfigurationError(LLMProviderError):
    """Raised when there's a configuration issue (e.g., missing API key)."""


class LLMConnectionError(LLMProviderError):
    """Raised when the provider cannot be reached at the network level."""
