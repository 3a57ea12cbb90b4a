"""Classification of upstream failures into ErrorKind.

Provider clients, the HTTP stack and asyncio report the same underlying
condition (most often rate limiting) through different exception types, and
frequently wrap one in another. classify_error() maps any of them onto the
fixed taxonomy in src.modules.rag.exceptions:

1. Provider errors (generation, embedding, vector store) are rate limits if
   their type says so or their message or any cause carries a rate-limit
   marker, API errors otherwise.
2. HTTP status errors are rate limits on status 429 or a marker in the
   message or any cause, API errors otherwise.
3. Network and timeout errors are timeouts.
4. Anything else is a rate limit if any exception in its cause chain
   mentions a marker (case-insensitive), unknown otherwise.
"""

from collections.abc import Iterator

import httpx
import openai

from src.infrastructure.embeddings import (
    EmbeddingConnectionError,
    EmbeddingProviderError,
    EmbeddingRateLimitError,
    EmbeddingTimeoutError,
)
from src.infrastructure.llm import (
    LLMConnectionError,
    LLMProviderError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from src.infrastructure.vectordb import VectorStoreError
from src.modules.rag.exceptions import ClassifiedError, ErrorKind

# Tokens upstream services use to report quota exhaustion
RATE_LIMIT_MARKERS: tuple[str, ...] = ("429", "RESOURCE_EXHAUSTED", "Resource exhausted")
_RATE_LIMIT_MARKERS_LOWER: tuple[str, ...] = tuple(
    dict.fromkeys(m.lower() for m in RATE_LIMIT_MARKERS)
)

_PROVIDER_ERRORS: tuple[type[BaseException], ...] = (
    LLMProviderError,
    EmbeddingProviderError,
    VectorStoreError,
)
_RATE_LIMIT_ERRORS: tuple[type[BaseException], ...] = (
    LLMRateLimitError,
    EmbeddingRateLimitError,
)
_HTTP_STATUS_ERRORS: tuple[type[BaseException], ...] = (
    openai.APIStatusError,
    httpx.HTTPStatusError,
)
# openai.APITimeoutError subclasses APIConnectionError
_TIMEOUT_ERRORS: tuple[type[BaseException], ...] = (
    TimeoutError,
    LLMTimeoutError,
    LLMConnectionError,
    EmbeddingTimeoutError,
    EmbeddingConnectionError,
    openai.APIConnectionError,
    httpx.TimeoutException,
    httpx.NetworkError,
)


def classify_error(error: BaseException) -> ClassifiedError:
    """Map an upstream failure onto the fixed error taxonomy.

    Deterministic given the error's type, message and cause chain. An
    already classified error is returned unchanged.

    Args:
        error: The exception raised by a collaborator.

    Returns:
        A ClassifiedError whose technical message keeps the original text.
    """
    if isinstance(error, ClassifiedError):
        return error

    message = str(error)

    if isinstance(error, _PROVIDER_ERRORS) and not isinstance(error, _TIMEOUT_ERRORS):
        if (
            isinstance(error, _RATE_LIMIT_ERRORS)
            or has_rate_limit_marker(message)
            or _cause_has_rate_limit_marker(error)
        ):
            return ClassifiedError(
                ErrorKind.RATE_LIMIT_EXCEEDED, f"Rate limit exceeded: {message}"
            )
        return ClassifiedError(ErrorKind.API_ERROR, f"AI API error: {message}")

    if isinstance(error, _HTTP_STATUS_ERRORS):
        if (
            _status_code(error) == 429
            or has_rate_limit_marker(message)
            or _cause_has_rate_limit_marker(error)
        ):
            return ClassifiedError(
                ErrorKind.RATE_LIMIT_EXCEEDED, f"Rate limit exceeded: {message}"
            )
        return ClassifiedError(ErrorKind.API_ERROR, f"HTTP error: {message}")

    if isinstance(error, _TIMEOUT_ERRORS):
        return ClassifiedError(
            ErrorKind.TIMEOUT, f"Timeout: {message or type(error).__name__}"
        )

    if is_rate_limit_error(error):
        return ClassifiedError(
            ErrorKind.RATE_LIMIT_EXCEEDED, f"Rate limit exceeded: {message}"
        )

    return ClassifiedError(
        ErrorKind.UNKNOWN, f"Unexpected error: {message or type(error).__name__}"
    )


def has_rate_limit_marker(message: str) -> bool:
    """Case-sensitive check for a rate-limit marker in a message."""
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


def is_rate_limit_error(error: BaseException) -> bool:
    """Check the error and every exception in its cause chain for a marker.

    The check is case-insensitive. Cycles in the chain are detected, so this
    always terminates.
    """
    for link in iter_cause_chain(error):
        text = str(link).lower()
        if any(marker in text for marker in _RATE_LIMIT_MARKERS_LOWER):
            return True
    return False


def _cause_has_rate_limit_marker(error: BaseException) -> bool:
    # The error's own message was already checked case-sensitively
    causes = iter_cause_chain(error)
    next(causes)
    return any(
        marker in str(link).lower()
        for link in causes
        for marker in _RATE_LIMIT_MARKERS_LOWER
    )


def iter_cause_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield the error, its cause, the cause's cause and so on.

    Follows __cause__, falling back to __context__ unless the context was
    suppressed with ``raise ... from None``. Each exception is yielded at
    most once.
    """
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = _next_cause(current)


def _next_cause(error: BaseException) -> BaseException | None:
    if error.__cause__ is not None:
        return error.__cause__
    if error.__suppress_context__:
        return None
    return error.__context__


def _status_code(error: BaseException) -> int | None:
    if isinstance(error, openai.APIStatusError):
        return error.status_code
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None
