"""Similarity retrieval service.

Turns a positioning request into a query embedding (memory map → persistent
embedding cache → embedding service, write-through) and fetches the top-K
most similar reference examples from the vector store.
"""

import asyncio
import hashlib
import logging
import time
from dataclasses import dataclass

from positioning_rag.config import settings
from positioning_rag.entities import (
    AnchorType,
    CoreMessaging,
    EmbeddingCacheEntry,
    Effectiveness,
    ReferenceExample,
    ScoredExample,
)
from positioning_rag.errors import CacheFailure
from positioning_rag.protocols import EmbeddingCacheStore, EmbeddingProvider, ExampleStore
from positioning_rag.utils import LRUMap

logger = logging.getLogger(__name__)

FALLBACK_EXAMPLES: tuple[ScoredExample, ...] = (
    ScoredExample(
        example=ReferenceExample(
            company="Wynter",
            tagline="On-demand market research platform for B2B",
            anchor_type=AnchorType.PRODUCT_CATEGORY,
            primary_anchor="market research platform",
            problem="B2B leaders don't know what their target market wants",
            differentiator="Get market insights in under 48 hours vs traditional research",
            industry="market research",
            effectiveness=Effectiveness.HIGH,
            icp=("B2B SaaS founders", "Product marketing managers"),
            tags=frozenset({"speed-focused", "b2b-saas"}),
            tone="professional",
            structure="problem-solution",
            secondary_anchors={"audience": "B2B leaders", "speed": "48 hours"},
        ),
        similarity=0.8,
    ),
)


@dataclass(frozen=True)
class RetrievalResult:
    """Retrieved examples and whether they came from the static fallback list."""

    examples: list[ScoredExample]
    is_fallback: bool = False


def build_query_text(messaging: CoreMessaging) -> str:
    """Concatenate the request fields that describe the positioning."""
    parts = [
        messaging.primary_anchor.content,
        messaging.secondary_anchor.content,
        messaging.problem,
        messaging.differentiator,
        " ".join(messaging.icp),
    ]
    return " ".join(part for part in parts if part)


def content_hash(text: str) -> str:
    """SHA-256 hex digest of the normalized (lower-cased, trimmed) text."""
    return hashlib.sha256(text.lower().strip().encode("utf-8")).hexdigest()


class RetrievalService:
    """Fetches grounding examples for a positioning request.

    Example:
        ```python
        retrieval = RetrievalService.create(
            example_store=RedisExampleRepository.create(),
            embedding_cache=RedisEmbeddingCacheRepository.create(),
            embedding_provider=OpenAIEmbeddingProvider.create(),
        )
        examples = await retrieval.retrieve(messaging)
        ```
    """

    def __init__(
        self,
        example_store: ExampleStore,
        embedding_cache: EmbeddingCacheStore,
        embedding_provider: EmbeddingProvider,
        top_k: int | None = None,
        similarity_threshold: float | None = None,
        memory_cache_size: int | None = None,
    ) -> None:
        """Initialize the retrieval service.

        Args:
            example_store: Vector store holding the reference library.
            embedding_cache: Persistent embedding cache tier.
            embedding_provider: Embedding service.
            top_k: Number of examples to fetch. Defaults to settings.
            similarity_threshold: Minimum cosine similarity. Defaults to settings.
            memory_cache_size: Capacity of the in-process embedding map. Defaults to settings.
        """
        self._store = example_store
        self._embedding_cache = embedding_cache
        self._embeddings = embedding_provider
        self._top_k = top_k or settings.retrieval_top_k
        self._threshold = (
            similarity_threshold
            if similarity_threshold is not None
            else settings.retrieval_similarity_threshold
        )
        self._memory = LRUMap[str, list[float]](memory_cache_size or settings.embedding_memory_cache_size)

    @classmethod
    def create(
        cls,
        example_store: ExampleStore,
        embedding_cache: EmbeddingCacheStore,
        embedding_provider: EmbeddingProvider,
        top_k: int | None = None,
        similarity_threshold: float | None = None,
    ) -> "RetrievalService":
        """Factory method to create RetrievalService with settings defaults."""
        return cls(
            example_store=example_store,
            embedding_cache=embedding_cache,
            embedding_provider=embedding_provider,
            top_k=top_k,
            similarity_threshold=similarity_threshold,
        )

    async def retrieve(self, messaging: CoreMessaging) -> list[ScoredExample]:
        """Return the most similar reference examples for the request."""
        result = await self.search(messaging)
        return result.examples

    async def search(self, messaging: CoreMessaging) -> RetrievalResult:
        """Search the reference library for the request.

        Never raises: embedding or vector store failures of any kind, and
        empty result sets, fall back to the static example list without retrying.
        """
        query_text = build_query_text(messaging)

        try:
            embedding = await self.get_embedding(query_text)
            matches = await asyncio.to_thread(
                self._store.similarity_search,
                embedding,
                self._threshold,
                self._top_k,
            )
        except Exception as e:
            # Any embedding or store failure, typed or not, degrades to the static examples
            logger.warning("Similar examples search failed (%s), using fallback examples: %s", type(e).__name__, e)
            return RetrievalResult(examples=list(FALLBACK_EXAMPLES), is_fallback=True)

        if not matches:
            logger.warning(
                "No examples above similarity threshold %.2f, using fallback examples",
                self._threshold,
            )
            return RetrievalResult(examples=list(FALLBACK_EXAMPLES), is_fallback=True)

        logger.info("Found %d similar examples", len(matches))
        return RetrievalResult(examples=matches)

    async def get_embedding(self, text: str) -> list[float]:
        """Resolve the embedding for ``text`` through both cache tiers.

        Raises:
            EmbeddingFailure: If the embedding service has to be called and fails
        """
        text_hash = content_hash(text)

        cached = self._memory.get(text_hash)
        if cached is not None:
            return cached

        try:
            entry = await asyncio.to_thread(self._embedding_cache.get, text_hash)
        except CacheFailure as e:
            logger.warning("Embedding cache read failed, treating as miss: %s", e)
            entry = None

        if entry is not None:
            self._memory.put(text_hash, entry.embedding)
            return entry.embedding

        embedding = await self._embeddings.encode(text)

        try:
            await asyncio.to_thread(
                self._embedding_cache.add,
                EmbeddingCacheEntry(
                    text_hash=text_hash,
                    embedding=embedding,
                    created_at=time.time(),
                    text=text,
                ),
            )
        except CacheFailure as e:
            logger.warning("Embedding cache write failed, skipping: %s", e)

        self._memory.put(text_hash, embedding)
        return embedding

    def status(self) -> dict:
        """Report retrieval configuration and in-process cache usage."""
        return {
            "memory_cache_size": len(self._memory),
            "memory_cache_max_size": self._memory.max_size,
            "similarity_threshold": self._threshold,
            "top_k": self._top_k,
            "embedding_model": self._embeddings.model_name,
            "embedding_dimension": self._embeddings.dimension,
        }

    def get_stats(self) -> dict:
        """Persistent embedding cache and reference library sizes."""
        return {
            "embedding_cache": {
                "total_entries": self._embedding_cache.count_all(),
                "memory_entries": len(self._memory),
            },
            "example_store": {"total_examples": self._store.count_all()},
        }

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def example_store(self) -> ExampleStore:
        """Get the underlying example store (for testing)."""
        return self._store
