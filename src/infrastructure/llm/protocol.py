"""Protocol definition for text generation providers."""

from typing import Protocol


class LLMProvider(Protocol):
    """Protocol for generation backends.

    The question-answering pipeline only depends on this contract, so
    OpenRouter can be swapped for another backend without touching it.
    """

    async def complete(self, prompt: str, *, model: str | None = None) -> str:
        """Generate a completion for a fully assembled prompt.

        Args:
            prompt: Prompt text, sent as a single user message.
            model: Optional model override. Uses provider default if not specified.

        Returns:
            The generated text.

        Raises:
            LLMProviderError: If the completion fails.
            LLMTimeoutError: If the request times out.
            LLMRateLimitError: If rate limited by the provider.
        """
        ...
