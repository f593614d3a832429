"""Persistent cache storage protocols.

Two logical tables back the two cache tiers:

- the embedding cache, keyed by content hash (insert-once)
- the generation cache, keyed by request hash (upsert, TTL, hit counter)

Implementations raise ``CacheFailure`` on any storage error; callers treat
that as a miss or a skipped write.
"""

from typing import Protocol, runtime_checkable

from positioning_rag.entities import EmbeddingCacheEntry, GenerationCacheEntry


@runtime_checkable
class EmbeddingCacheStore(Protocol):
    """Protocol for the persistent embedding cache."""

    def get(self, text_hash: str) -> EmbeddingCacheEntry | None:
        """Point lookup by content hash."""
        ...

    def add(self, entry: EmbeddingCacheEntry) -> bool:
        """Insert an entry unless one already exists for its hash.

        Returns:
            True if the entry was written, False if the hash was already cached
        """
        ...

    def count_all(self) -> int:
        """Count cached embeddings."""
        ...

    def health_check(self) -> bool:
        """Check if the store is accessible."""
        ...


@runtime_checkable
class GenerationCacheStore(Protocol):
    """Protocol for the persistent generation cache."""

    def get(self, cache_key: str) -> GenerationCacheEntry | None:
        """Point lookup by cache key, regardless of expiry."""
        ...

    def upsert(self, entry: GenerationCacheEntry) -> None:
        """Insert or overwrite the entry for ``entry.cache_key``.

        Overwriting replaces the payload and timestamps and keeps the
        stored hit count.
        """
        ...

    def increment_hit(self, cache_key: str) -> int:
        """Increment the hit counter and return the new value."""
        ...

    def delete_all(self) -> int:
        """Delete every entry. Returns the number deleted."""
        ...

    def delete_expired(self, now: float) -> int:
        """Physically purge entries with ``expires_at < now``."""
        ...

    def count_all(self) -> int:
        """Count stored entries, expired or not."""
        ...

    def health_check(self) -> bool:
        """Check if the store is accessible."""
        ...
