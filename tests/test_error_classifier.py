"""Tests for error classification."""

import httpx
import openai
import pytest

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
from src.modules.rag import ClassifiedError, ErrorKind, classify_error
from src.modules.rag.classifier import is_rate_limit_error, iter_cause_chain

REQUEST = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")


def status_error(status: int, message: str = "error") -> openai.APIStatusError:
    return openai.APIStatusError(
        message,
        response=httpx.Response(status, request=REQUEST),
        body=None,
    )


def chained(*messages: str) -> Exception:
    """Build a chain where each exception is raised from the next one."""
    error: Exception | None = None
    for message in reversed(messages):
        try:
            if error is None:
                raise RuntimeError(message)
            raise RuntimeError(message) from error
        except RuntimeError as e:
            error = e
    assert error is not None
    return error


class TestProviderErrors:
    """Provider errors are rate limits or API errors."""

    @pytest.mark.parametrize(
        "error",
        [
            LLMProviderError("OpenRouter returned HTTP 429: slow down"),
            EmbeddingProviderError("RESOURCE_EXHAUSTED"),
            VectorStoreError("Resource exhausted, try later"),
        ],
    )
    def test_marker_in_message_is_rate_limit(self, error):
        assert classify_error(error).kind is ErrorKind.RATE_LIMIT_EXCEEDED

    @pytest.mark.parametrize(
        "error",
        [LLMRateLimitError("slow down"), EmbeddingRateLimitError("slow down")],
    )
    def test_rate_limit_types_are_rate_limit(self, error):
        assert classify_error(error).kind is ErrorKind.RATE_LIMIT_EXCEEDED

    @pytest.mark.parametrize(
        "error",
        [
            LLMProviderError("OpenRouter returned HTTP 500"),
            EmbeddingProviderError("invalid model"),
            VectorStoreError("collection missing"),
        ],
    )
    def test_without_marker_is_api_error(self, error):
        assert classify_error(error).kind is ErrorKind.API_ERROR

    def test_marker_check_is_case_sensitive(self):
        error = LLMProviderError("resource_exhausted")

        assert classify_error(error).kind is ErrorKind.API_ERROR

    def test_marker_in_cause_is_rate_limit(self):
        try:
            try:
                raise RuntimeError("429 RESOURCE_EXHAUSTED: quota")
            except RuntimeError as e:
                raise LLMProviderError("Unexpected generation error: upstream failure") from e
        except LLMProviderError as e:
            error = e

        assert classify_error(error).kind is ErrorKind.RATE_LIMIT_EXCEEDED

    def test_cause_without_marker_is_api_error(self):
        error = EmbeddingProviderError("embedding failed")
        error.__cause__ = RuntimeError("invalid input")

        assert classify_error(error).kind is ErrorKind.API_ERROR


class TestHttpErrors:
    """HTTP status errors are rate limits on 429."""

    def test_openai_status_429(self):
        assert classify_error(status_error(429)).kind is ErrorKind.RATE_LIMIT_EXCEEDED

    def test_openai_rate_limit_error(self):
        error = openai.RateLimitError(
            "slow down", response=httpx.Response(429, request=REQUEST), body=None
        )

        assert classify_error(error).kind is ErrorKind.RATE_LIMIT_EXCEEDED

    def test_openai_status_500(self):
        assert classify_error(status_error(500, "server error")).kind is ErrorKind.API_ERROR

    def test_openai_status_marker_in_message(self):
        error = status_error(400, "RESOURCE_EXHAUSTED")

        assert classify_error(error).kind is ErrorKind.RATE_LIMIT_EXCEEDED

    def test_httpx_status_429(self):
        response = httpx.Response(429, request=REQUEST)
        error = httpx.HTTPStatusError("too many", request=REQUEST, response=response)

        assert classify_error(error).kind is ErrorKind.RATE_LIMIT_EXCEEDED

    def test_httpx_status_503(self):
        response = httpx.Response(503, request=REQUEST)
        error = httpx.HTTPStatusError("unavailable", request=REQUEST, response=response)

        assert classify_error(error).kind is ErrorKind.API_ERROR

    def test_status_error_with_marker_in_cause(self):
        error = status_error(503, "upstream unavailable")
        error.__cause__ = RuntimeError("Resource exhausted for project")

        assert classify_error(error).kind is ErrorKind.RATE_LIMIT_EXCEEDED


class TestTimeouts:
    """Network and timeout errors are timeouts."""

    @pytest.mark.parametrize(
        "error",
        [
            TimeoutError(),
            LLMTimeoutError("timed out"),
            LLMConnectionError("refused"),
            EmbeddingTimeoutError("timed out"),
            EmbeddingConnectionError("refused"),
            openai.APITimeoutError(request=REQUEST),
            openai.APIConnectionError(request=REQUEST),
            httpx.ConnectTimeout("timed out"),
            httpx.ConnectError("refused"),
        ],
    )
    def test_is_timeout(self, error):
        assert classify_error(error).kind is ErrorKind.TIMEOUT


class TestCauseChain:
    """Unrecognized errors are classified from their cause chain."""

    def test_plain_error_is_unknown(self):
        result = classify_error(ValueError("bad value"))

        assert result.kind is ErrorKind.UNKNOWN
        assert "bad value" in result.technical_message

    def test_marker_deep_in_chain_is_rate_limit(self):
        error = chained("outer", "middle", "quota: resource exhausted")

        assert classify_error(error).kind is ErrorKind.RATE_LIMIT_EXCEEDED

    def test_marker_check_is_case_insensitive(self):
        assert classify_error(RuntimeError("Resource_Exhausted")).kind is (
            ErrorKind.RATE_LIMIT_EXCEEDED
        )

    def test_implicit_context_is_followed(self):
        try:
            try:
                raise RuntimeError("HTTP 429")
            except RuntimeError:
                raise ValueError("handler failed")
        except ValueError as e:
            error = e

        assert classify_error(error).kind is ErrorKind.RATE_LIMIT_EXCEEDED

    def test_suppressed_context_is_not_followed(self):
        try:
            try:
                raise RuntimeError("HTTP 429")
            except RuntimeError:
                raise ValueError("handler failed") from None
        except ValueError as e:
            error = e

        assert classify_error(error).kind is ErrorKind.UNKNOWN

    def test_cycle_terminates(self):
        first = RuntimeError("first")
        second = RuntimeError("second")
        first.__cause__ = second
        second.__cause__ = first

        assert classify_error(first).kind is ErrorKind.UNKNOWN
        assert list(iter_cause_chain(first)) == [first, second]

    def test_self_cycle_terminates(self):
        error = RuntimeError("loop")
        error.__cause__ = error

        assert is_rate_limit_error(error) is False

    def test_cycle_with_marker_is_rate_limit(self):
        first = RuntimeError("first")
        second = RuntimeError("429 Too Many Requests")
        first.__cause__ = second
        second.__cause__ = first

        assert classify_error(first).kind is ErrorKind.RATE_LIMIT_EXCEEDED


class TestClassifiedError:
    """Tests for the classified error value."""

    def test_already_classified_is_returned_unchanged(self):
        error = ClassifiedError(ErrorKind.TIMEOUT, "slow")

        assert classify_error(error) is error

    def test_user_message_depends_on_kind_only(self):
        a = ClassifiedError(ErrorKind.API_ERROR, "one")
        b = ClassifiedError(ErrorKind.API_ERROR, "two")

        assert a.user_message == b.user_message
        assert str(a) == "one"

    def test_every_kind_has_user_message(self):
        for kind in ErrorKind:
            assert kind.user_message

    def test_classification_is_deterministic(self):
        error = chained("outer", "RESOURCE_EXHAUSTED")

        results = {classify_error(error).kind for _ in range(5)}

        assert results == {ErrorKind.RATE_LIMIT_EXCEEDED}
