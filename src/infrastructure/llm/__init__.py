"""Text generation provider abstraction layer."""

from src.infrastructure.llm.exceptions import (
    LLMConfigurationError,
    LLMConnectionError,
    LLMProviderError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from src.infrastructure.llm.openrouter import OpenRouterProvider
from src.infrastructure.llm.protocol import LLMProvider

__all__ = [
    "LLMConfigurationError",
    "LLMConnectionError",
    "LLMProvider",
    "LLMProviderError",
    "LLMRateLimitError",
    "LLMTimeoutError",
    "OpenRouterProvider",
]
