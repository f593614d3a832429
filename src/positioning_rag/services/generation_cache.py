"""Generation cache gate.

Computes a deterministic key from the normalized request and serves a
fresh cached GeneratedContent when one exists, so identical requests within
the TTL window never reach the generation service.
"""

import asyncio
import hashlib
import json
import logging
import math
import time
from collections.abc import Callable

from positioning_rag.config import settings
from positioning_rag.entities import CoreMessaging, GeneratedContent, GenerationCacheEntry
from positioning_rag.errors import CacheFailure
from positioning_rag.protocols import GenerationCacheStore

logger = logging.getLogger(__name__)

KEY_PREFIX_LENGTH = 50


def round_to_tenth(value: float) -> int:
    """Bucket a sampling parameter to the nearest 0.1, halves rounding up.

    Returns the bucket as an integer number of tenths (0.34 -> 3, 0.36 -> 4).
    """
    return math.floor(value * 10 + 0.5)


def cache_key(messaging: CoreMessaging) -> str:
    """Deterministic cache key for a request.

    Only the primary anchor, the first 50 characters of problem and
    differentiator, and the rounded sampling settings participate; every
    other field is ignored.
    """
    key_data = {
        "primary": messaging.primary_anchor.content.lower().strip(),
        "problem": messaging.problem[:KEY_PREFIX_LENGTH].lower(),
        "diff": messaging.differentiator[:KEY_PREFIX_LENGTH].lower(),
        "temp": round_to_tenth(messaging.generation_settings.temperature),
        "top_p": round_to_tenth(messaging.generation_settings.top_p),
    }
    serialized = json.dumps(key_data, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


class GenerationCacheGate:
    """TTL-bounded cache in front of the generation orchestrator.

    Cache store errors never propagate: a failed read is a miss and a failed
    write is skipped.
    """

    def __init__(
        self,
        store: GenerationCacheStore,
        ttl: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the gate.

        Args:
            store: Persistent generation cache tier.
            ttl: Entry time-to-live in seconds. Defaults to settings (7 days).
            clock: Source of the current Unix time.
        """
        self._store = store
        self._ttl = ttl or settings.generation_cache_ttl
        self._clock = clock

    @classmethod
    def create(cls, store: GenerationCacheStore, ttl: int | None = None) -> "GenerationCacheGate":
        return cls(store=store, ttl=ttl)

    async def lookup(self, key: str) -> GeneratedContent | None:
        """Return the cached content for ``key`` if it exists and is fresh."""
        try:
            entry = await asyncio.to_thread(self._store.get, key)
        except CacheFailure as e:
            logger.warning("Generation cache read failed, treating as miss: %s", e)
            return None

        if entry is None or entry.is_expired(self._clock()):
            return None

        try:
            await asyncio.to_thread(self._store.increment_hit, key)
        except CacheFailure as e:
            logger.info("Cache hit tracking unavailable: %s", e)

        return GeneratedContent.from_dict(entry.content)

    async def store(self, key: str, content: GeneratedContent) -> bool:
        """Upsert ``content`` under ``key`` with a fresh expiry.

        Returns:
            True if written, False if the write failed and was skipped
        """
        now = self._clock()
        entry = GenerationCacheEntry(
            cache_key=key,
            content=content.to_dict(),
            created_at=now,
            expires_at=now + self._ttl,
        )
        try:
            await asyncio.to_thread(self._store.upsert, entry)
        except CacheFailure as e:
            logger.warning("Failed to cache result: %s", e)
            return False
        return True

    async def clear(self) -> int:
        """Delete every generation cache entry."""
        deleted = await asyncio.to_thread(self._store.delete_all)
        logger.info("Generation cache cleared: %d entries", deleted)
        return deleted

    async def cleanup_expired(self) -> int:
        """Physically purge entries past their expiry."""
        deleted = await asyncio.to_thread(self._store.delete_expired, self._clock())
        logger.info("Purged %d expired generation cache entries", deleted)
        return deleted

    def get_stats(self) -> dict:
        return {
            "total_entries": self._store.count_all(),
            "ttl_seconds": self._ttl,
        }

    @property
    def ttl(self) -> int:
        return self._ttl

    @property
    def cache_store(self) -> GenerationCacheStore:
        """Get the underlying store (for testing)."""
        return self._store
