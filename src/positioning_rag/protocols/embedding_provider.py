"""Embedding provider protocol.

Defines the interface for any embedding generation service that can
convert text to a fixed-length vector.

Implementations can include:
- OpenAI-compatible embeddings API (default)
- sentence-transformers (local)
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding generation services.

    Any type that implements these members satisfies the protocol,
    no explicit inheritance needed.
    """

    @property
    def dimension(self) -> int:
        """Return the dimension D of the embedding vectors."""
        ...

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the model."""
        ...

    async def encode(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text.

        Args:
            text: The text to encode

        Returns:
            The embedding vector as a list of floats

        Raises:
            EmbeddingFailure: If the service cannot produce a vector
        """
        ...

    async def is_available(self) -> bool:
        """Check if the embedding provider is available."""
        ...
