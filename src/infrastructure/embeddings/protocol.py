"""Protocol definition for embedding providers."""

from typing import Protocol


class EmbeddingProvider(Protocol):
    """Protocol for embedding backends used by the document index."""

    async def embed(self, text: str) -> list[float]:
        """Embed a single text, typically a search query.

        Raises:
            EmbeddingProviderError: If embedding generation fails.
        """
        ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts, preserving input order.

        Raises:
            EmbeddingProviderError: If embedding generation fails.
        """
        ...

    @property
    def dimensions(self) -> int:
        """Dimensionality of the vectors produced."""
        ...
