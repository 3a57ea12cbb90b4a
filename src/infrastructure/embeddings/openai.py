"""OpenAI-compatible embedding provider."""

from datetime import timedelta
from typing import ClassVar

import structlog
from aiobreaker import CircuitBreaker, CircuitBreakerError
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    RateLimitError,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.infrastructure.embeddings.exceptions import (
    EmbeddingConfigurationError,
    EmbeddingConnectionError,
    EmbeddingProviderError,
    EmbeddingRateLimitError,
    EmbeddingTimeoutError,
)
from src.infrastructure.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)


class OpenAIEmbeddingProvider:
    """Embedding provider for any OpenAI-compatible embeddings endpoint.

    Defaults to OpenRouter. Shares the resilience setup of the generation
    provider: one retry on connection failures and a circuit breaker.
    """

    PROVIDER_NAME = "openai"

    MODEL_DIMENSIONS: ClassVar[dict[str, int]] = {
        "openai/text-embedding-3-small": 1536,
        "openai/text-embedding-3-large": 3072,
        "openai/text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "openai/text-embedding-3-small",
        base_url: str = "https://openrouter.ai/api/v1",
        timeout_seconds: float = 30.0,
        circuit_breaker_fail_max: int = 5,
        circuit_breaker_timeout: float = 60.0,
    ) -> None:
        """Initialize the embedding provider.

        Raises:
            EmbeddingConfigurationError: If API key is missing.
        """
        if not api_key:
            raise EmbeddingConfigurationError(
                "API key is required", provider=self.PROVIDER_NAME
            )

        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self._model = model
        self._timeout = timeout_seconds

        self._breaker = CircuitBreaker(
            fail_max=circuit_breaker_fail_max,
            timeout_duration=timedelta(seconds=circuit_breaker_timeout),
        )

    @property
    def dimensions(self) -> int:
        return self.MODEL_DIMENSIONS.get(self._model, 1536)

    async def embed(self, text: str) -> list[float]:
        """Embed a single text."""
        vectors = await self._embed("embeddings.embed", [text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts in one request, preserving order."""
        if not texts:
            return []
        return await self._embed("embeddings.embed_batch", texts)

    async def _embed(self, span_name: str, texts: list[str]) -> list[list[float]]:
        with tracer.start_as_current_span(span_name) as span:
            span.set_attribute("embeddings.provider", self.PROVIDER_NAME)
            span.set_attribute("embeddings.model", self._model)
            span.set_attribute("embeddings.batch_size", len(texts))

            try:
                vectors = await self._embed_with_resilience(texts)
                if vectors:
                    span.set_attribute("embeddings.dimensions", len(vectors[0]))
                return vectors

            except CircuitBreakerError as e:
                span.record_exception(e)
                logger.warning(
                    "circuit_breaker_open",
                    provider=self.PROVIDER_NAME,
                    model=self._model,
                )
                raise EmbeddingProviderError(
                    "Service temporarily unavailable (circuit open)",
                    provider=self.PROVIDER_NAME,
                ) from e

            except APITimeoutError as e:
                span.record_exception(e)
                logger.warning(
                    "embedding_timeout",
                    provider=self.PROVIDER_NAME,
                    model=self._model,
                    timeout_seconds=self._timeout,
                    batch_size=len(texts),
                )
                raise EmbeddingTimeoutError(
                    f"Request timed out after {self._timeout}s",
                    provider=self.PROVIDER_NAME,
                ) from e

            except APIConnectionError as e:
                span.record_exception(e)
                logger.error(
                    "embedding_connection_error",
                    provider=self.PROVIDER_NAME,
                    model=self._model,
                    error=str(e),
                )
                raise EmbeddingConnectionError(
                    f"Unable to connect to embedding service: {e}",
                    provider=self.PROVIDER_NAME,
                ) from e

    @retry(
        retry=retry_if_exception_type((APIConnectionError, APITimeoutError)),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, max=5),
        reraise=True,
    )
    async def _embed_with_resilience(self, texts: list[str]) -> list[list[float]]:
        return await self._breaker.call_async(  # type: ignore[no-any-return]
            self._do_embed, texts
        )

    async def _do_embed(self, texts: list[str]) -> list[list[float]]:
        logger.debug(
            "embedding_request_start",
            provider=self.PROVIDER_NAME,
            model=self._model,
            batch_size=len(texts),
        )

        try:
            response = await self._client.embeddings.create(
                model=self._model,
                input=texts,
            )
        except RateLimitError as e:
            logger.warning(
                "embedding_rate_limited",
                provider=self.PROVIDER_NAME,
                model=self._model,
            )
            raise EmbeddingRateLimitError(
                f"Rate limited by embedding service (429): {e}",
                provider=self.PROVIDER_NAME,
            ) from e
        except (APIConnectionError, APITimeoutError):
            # Retried by _embed_with_resilience
            raise
        except APIStatusError as e:
            logger.error(
                "embedding_status_error",
                provider=self.PROVIDER_NAME,
                model=self._model,
                status_code=e.status_code,
                error=str(e),
            )
            raise EmbeddingProviderError(
                f"Embedding service returned HTTP {e.status_code}: {e}",
                provider=self.PROVIDER_NAME,
            ) from e
        except Exception as e:
            logger.error(
                "embedding_unexpected_error",
                provider=self.PROVIDER_NAME,
                model=self._model,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise EmbeddingProviderError(
                f"Unexpected embedding error: {e}",
                provider=self.PROVIDER_NAME,
            ) from e

        # The API may return items out of order
        vectors = [item.embedding for item in sorted(response.data, key=lambda x: x.index)]

        logger.debug(
            "embedding_request_success",
            provider=self.PROVIDER_NAME,
            model=self._model,
            batch_size=len(texts),
            dimensions=len(vectors[0]) if vectors else 0,
        )
        return vectors
