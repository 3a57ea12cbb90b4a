"""OpenRouter generation provider."""

from datetime import timedelta

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

from src.infrastructure.llm.exceptions import (
    LLMConfigurationError,
    LLMConnectionError,
    LLMProviderError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from src.infrastructure.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)


class OpenRouterProvider:
    """Generation provider using OpenRouter's OpenAI-compatible API.

    Connection failures and timeouts are retried once with backoff, and a
    circuit breaker fails fast after repeated failures. Rate limiting and
    other HTTP errors are never retried here.
    """

    PROVIDER_NAME = "openrouter"
    BASE_URL = "https://openrouter.ai/api/v1"

    def __init__(
        self,
        api_key: str,
        *,
        default_model: str = "google/gemini-2.0-flash-001",
        timeout_seconds: float = 60.0,
        circuit_breaker_fail_max: int = 5,
        circuit_breaker_timeout: float = 60.0,
    ) -> None:
        """Initialize the OpenRouter provider.

        Args:
            api_key: OpenRouter API key.
            default_model: Default model to use for completions.
            timeout_seconds: Request timeout in seconds.
            circuit_breaker_fail_max: Open circuit after this many failures.
            circuit_breaker_timeout: Time in seconds before attempting recovery.

        Raises:
            LLMConfigurationError: If API key is missing.
        """
        if not api_key:
            raise LLMConfigurationError(
                "OpenRouter API key is required", provider=self.PROVIDER_NAME
            )

        self._client = AsyncOpenAI(
            base_url=self.BASE_URL,
            api_key=api_key,
            timeout=timeout_seconds,
        )
        self._default_model = default_model
        self._timeout = timeout_seconds

        self._breaker = CircuitBreaker(
            fail_max=circuit_breaker_fail_max,
            timeout_duration=timedelta(seconds=circuit_breaker_timeout),
        )

    async def complete(self, prompt: str, *, model: str | None = None) -> str:
        """Generate a completion for a prompt.

        Raises:
            LLMProviderError: If the completion fails.
            LLMTimeoutError: If the request times out.
            LLMConnectionError: If the service cannot be reached.
            LLMRateLimitError: If rate limited.
        """
        model_to_use = model or self._default_model

        with tracer.start_as_current_span("llm.complete") as span:
            span.set_attribute("llm.provider", self.PROVIDER_NAME)
            span.set_attribute("llm.model", model_to_use)
            span.set_attribute("llm.input_length", len(prompt))

            try:
                result: str = await self._complete_with_resilience(prompt, model_to_use)
                span.set_attribute("llm.output_length", len(result))
                return result

            except CircuitBreakerError as e:
                span.record_exception(e)
                logger.warning(
                    "circuit_breaker_open",
                    provider=self.PROVIDER_NAME,
                    model=model_to_use,
                )
                raise LLMProviderError(
                    "Service temporarily unavailable (circuit open)",
                    provider=self.PROVIDER_NAME,
                ) from e

            except APITimeoutError as e:
                span.record_exception(e)
                logger.warning(
                    "llm_timeout",
                    provider=self.PROVIDER_NAME,
                    model=model_to_use,
                    timeout_seconds=self._timeout,
                )
                raise LLMTimeoutError(
                    f"Request timed out after {self._timeout}s",
                    provider=self.PROVIDER_NAME,
                ) from e

            except APIConnectionError as e:
                span.record_exception(e)
                logger.error(
                    "llm_connection_error",
                    provider=self.PROVIDER_NAME,
                    model=model_to_use,
                    error=str(e),
                )
                raise LLMConnectionError(
                    f"Unable to connect to generation service: {e}",
                    provider=self.PROVIDER_NAME,
                ) from e

    @retry(
        retry=retry_if_exception_type((APIConnectionError, APITimeoutError)),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, max=5),
        reraise=True,
    )
    async def _complete_with_resilience(self, prompt: str, model: str) -> str:
        return await self._breaker.call_async(  # type: ignore[no-any-return]
            self._do_complete, prompt, model
        )

    async def _do_complete(self, prompt: str, model: str) -> str:
        """Execute the API call.

        APIConnectionError and APITimeoutError propagate untouched so the
        retry decorator on _complete_with_resilience can see them.
        """
        logger.debug(
            "llm_request_start",
            provider=self.PROVIDER_NAME,
            model=model,
            prompt_length=len(prompt),
        )

        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
            )
        except RateLimitError as e:
            logger.warning("llm_rate_limited", provider=self.PROVIDER_NAME, model=model)
            raise LLMRateLimitError(
                f"Rate limited by OpenRouter (429): {e}",
                provider=self.PROVIDER_NAME,
            ) from e
        except (APIConnectionError, APITimeoutError):
            raise
        except APIStatusError as e:
            logger.error(
                "llm_status_error",
                provider=self.PROVIDER_NAME,
                model=model,
                status_code=e.status_code,
                error=str(e),
            )
            raise LLMProviderError(
                f"OpenRouter returned HTTP {e.status_code}: {e}",
                provider=self.PROVIDER_NAME,
            ) from e
        except Exception as e:
            logger.error(
                "llm_unexpected_error",
                provider=self.PROVIDER_NAME,
                model=model,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise LLMProviderError(
                f"Unexpected generation error: {e}",
                provider=self.PROVIDER_NAME,
            ) from e

        content = response.choices[0].message.content or ""

        logger.debug(
            "llm_request_success",
            provider=self.PROVIDER_NAME,
            model=model,
            response_length=len(content),
        )
        return content
