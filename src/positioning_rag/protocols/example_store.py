"""Reference example store protocol.

Defines the interface for the vector store holding the library of
previously analyzed companies.

Implementations can include:
- Redis Stack with vector search (default)
- PostgreSQL with pgvector
- Any other store with cosine nearest-neighbor search and metadata
"""

from typing import Protocol, runtime_checkable

from positioning_rag.entities import ReferenceExample, ScoredExample


@runtime_checkable
class ExampleStore(Protocol):
    """Protocol for reference example vector stores."""

    def similarity_search(
        self,
        embedding: list[float],
        threshold: float,
        limit: int,
    ) -> list[ScoredExample]:
        """Find the stored examples closest to ``embedding``.

        Args:
            embedding: The query embedding vector
            threshold: Minimum cosine similarity (exclusive)
            limit: Maximum number of results

        Returns:
            Matches with similarity > threshold, highest similarity first

        Raises:
            VectorStoreFailure: If the store cannot be queried
        """
        ...

    def add_example(self, example: ReferenceExample) -> str:
        """Store an example together with its embedding.

        Returns:
            The storage key for the example
        """
        ...

    def count_all(self) -> int:
        """Count stored examples."""
        ...

    def health_check(self) -> bool:
        """Check if the store is accessible."""
        ...
