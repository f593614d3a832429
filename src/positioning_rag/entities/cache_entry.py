"""Cache entry domain entities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class EmbeddingCacheEntry:
    """A cached embedding for a piece of query text.

    One entry exists per content hash and it is never mutated after creation.

    Attributes:
        text_hash: SHA-256 of the lower-cased, trimmed source text
        embedding: The embedding vector
        created_at: When this entry was created (Unix timestamp)
        text: The source text, kept for inspection
    """

    text_hash: str
    embedding: list[float]
    created_at: float
    text: str = ""


@dataclass(frozen=True)
class GenerationCacheEntry:
    """A cached generation result keyed by the normalized request hash.

    Attributes:
        cache_key: Deterministic hash of the normalized request
        content: Serialized GeneratedContent payload
        created_at: When this entry was (last) written (Unix timestamp)
        expires_at: created_at + TTL (Unix timestamp)
        hit_count: Number of logical hits served from this entry
    """

    cache_key: str
    content: dict[str, Any]
    created_at: float
    expires_at: float
    hit_count: int = 0

    def is_expired(self, now: float) -> bool:
        """An entry stays visible up to and including ``expires_at``."""
        return now > self.expires_at
