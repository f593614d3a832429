"""Redis implementations of the persistent cache stores.

Both tiers are plain Redis hashes:

- ``{embedding_prefix}:{text_hash}`` → text, embedding (float32 bytes), created_at
- ``{generation_prefix}:{cache_key}`` → content (JSON), created_at, expires_at, hit_count

Generation entries also get a Redis EXPIREAT one second past ``expires_at``
so that expired rows are eventually purged even without an explicit cleanup.
Logical expiry is always decided from ``expires_at``.
"""

import json
import struct

import redis

from positioning_rag.config import get_redis_client, settings
from positioning_rag.entities import EmbeddingCacheEntry, GenerationCacheEntry
from positioning_rag.errors import CacheFailure


def _decode_hash(raw: dict) -> dict[str, bytes]:
    return {(k.decode() if isinstance(k, bytes) else k): v for k, v in raw.items()}


def _as_str(value: bytes | str | None) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value or ""


class RedisEmbeddingCacheRepository:
    """Insert-once embedding cache keyed by content hash."""

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ) -> None:
        self._client = redis_client or get_redis_client()
        self._prefix = prefix or settings.embedding_cache_prefix

    @classmethod
    def create(cls, prefix: str | None = None) -> "RedisEmbeddingCacheRepository":
        return cls(prefix=prefix)

    def _key(self, text_hash: str) -> str:
        return f"{self._prefix}:{text_hash}"

    def get(self, text_hash: str) -> EmbeddingCacheEntry | None:
        try:
            raw = self._client.hgetall(self._key(text_hash))
        except redis.RedisError as e:
            raise CacheFailure(f"Embedding cache read failed: {e}") from e

        if not raw:
            return None

        fields = _decode_hash(raw)
        vector_bytes = fields.get("embedding") or b""
        try:
            if not vector_bytes:
                raise ValueError("missing vector")
            embedding = list(struct.unpack(f"{len(vector_bytes) // 4}f", vector_bytes))
            created_at = float(_as_str(fields.get("created_at")) or 0)
        except (struct.error, ValueError) as e:
            raise CacheFailure(f"Corrupt embedding cache entry {text_hash}: {e}") from e

        return EmbeddingCacheEntry(
            text_hash=text_hash,
            embedding=embedding,
            created_at=created_at,
            text=_as_str(fields.get("text")),
        )

    def add(self, entry: EmbeddingCacheEntry) -> bool:
        key = self._key(entry.text_hash)
        vector_bytes = struct.pack(f"{len(entry.embedding)}f", *entry.embedding)
        try:
            # HSETNX on the vector field keeps the first writer's entry
            created = self._client.hsetnx(key, "embedding", vector_bytes)
            if created:
                self._client.hset(
                    key,
                    mapping={
                        "text": entry.text,
                        "created_at": str(entry.created_at),
                    },
                )
        except redis.RedisError as e:
            raise CacheFailure(f"Embedding cache write failed: {e}") from e
        return bool(created)

    def count_all(self) -> int:
        count = 0
        for _ in self._client.scan_iter(match=f"{self._prefix}:*"):
            count += 1
        return count

    def health_check(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False


class RedisGenerationCacheRepository:
    """Upsert generation cache with TTL metadata and a hit counter."""

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ) -> None:
        self._client = redis_client or get_redis_client()
        self._prefix = prefix or settings.generation_cache_prefix

    @classmethod
    def create(cls, prefix: str | None = None) -> "RedisGenerationCacheRepository":
        return cls(prefix=prefix)

    def _key(self, cache_key: str) -> str:
        return f"{self._prefix}:{cache_key}"

    def get(self, cache_key: str) -> GenerationCacheEntry | None:
        try:
            raw = self._client.hgetall(self._key(cache_key))
        except redis.RedisError as e:
            raise CacheFailure(f"Generation cache read failed: {e}") from e

        if not raw:
            return None

        fields = _decode_hash(raw)
        try:
            return GenerationCacheEntry(
                cache_key=cache_key,
                content=json.loads(_as_str(fields.get("content"))),
                created_at=float(_as_str(fields.get("created_at"))),
                expires_at=float(_as_str(fields.get("expires_at"))),
                hit_count=int(_as_str(fields.get("hit_count")) or 0),
            )
        except (ValueError, TypeError) as e:
            raise CacheFailure(f"Corrupt generation cache entry {cache_key}: {e}") from e

    def upsert(self, entry: GenerationCacheEntry) -> None:
        key = self._key(entry.cache_key)
        try:
            pipe = self._client.pipeline()
            pipe.hset(
                key,
                mapping={
                    "content": json.dumps(entry.content),
                    "created_at": str(entry.created_at),
                    "expires_at": str(entry.expires_at),
                },
            )
            pipe.hsetnx(key, "hit_count", entry.hit_count)
            pipe.expireat(key, int(entry.expires_at) + 1)
            pipe.execute()
        except redis.RedisError as e:
            raise CacheFailure(f"Generation cache write failed: {e}") from e

    def increment_hit(self, cache_key: str) -> int:
        try:
            return int(self._client.hincrby(self._key(cache_key), "hit_count", 1))
        except redis.RedisError as e:
            raise CacheFailure(f"Hit count update failed: {e}") from e

    def delete_all(self) -> int:
        deleted = 0
        try:
            for key in self._client.scan_iter(match=f"{self._prefix}:*"):
                deleted += int(self._client.delete(key))
        except redis.RedisError as e:
            raise CacheFailure(f"Generation cache clear failed: {e}") from e
        return deleted

    def delete_expired(self, now: float) -> int:
        deleted = 0
        try:
            for key in self._client.scan_iter(match=f"{self._prefix}:*"):
                expires_at = _as_str(self._client.hget(key, "expires_at"))
                if expires_at and float(expires_at) < now:
                    deleted += int(self._client.delete(key))
        except redis.RedisError as e:
            raise CacheFailure(f"Generation cache cleanup failed: {e}") from e
        return deleted

    def count_all(self) -> int:
        count = 0
        for _ in self._client.scan_iter(match=f"{self._prefix}:*"):
            count += 1
        return count

    def health_check(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    def get_stats(self) -> dict:
        return {
            "prefix": self._prefix,
            "total_entries": self.count_all(),
        }
