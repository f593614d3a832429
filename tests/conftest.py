"""
Shared fixtures: in-memory implementations of the collaborator protocols.
"""

import asyncio
import hashlib

import pytest

from positioning_rag.entities import (
    Anchor,
    AnchorType,
    CoreMessaging,
    EmbeddingCacheEntry,
    GenerationCacheEntry,
    GenerationSettings,
    ReferenceExample,
    ScoredExample,
)
from positioning_rag.errors import CacheFailure, EmbeddingFailure
from positioning_rag.services import (
    GenerationCacheGate,
    GenerationOrchestrator,
    PositioningPipeline,
    RetrievalService,
)

WELL_FORMED_RESPONSE = (
    "HEADLINE: Project Management Software for marketing teams\n"
    "SUBHEADLINE: Deadlines slip when tasks are tracked manually. Automated timelines flag risks early.\n"
    "OPPORTUNITY: Marketing agencies need predictable delivery"
)


class FakeEmbeddingProvider:
    """Deterministic embeddings derived from a hash of the text."""

    def __init__(self, dimension: int = 4, fail: bool = False) -> None:
        self._dimension = dimension
        self.fail = fail
        self.calls: list[str] = []

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return "fake-embedding"

    async def encode(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail:
            raise EmbeddingFailure("embedding service down")
        digest = hashlib.sha256(text.encode()).digest()
        return [digest[i] / 255.0 for i in range(self._dimension)]

    async def is_available(self) -> bool:
        return not self.fail


class FakeGenerationProvider:
    """Returns a canned completion, or raises ``error`` when set."""

    def __init__(self, response: str = WELL_FORMED_RESPONSE, error: Exception | None = None, delay: float = 0.0):
        self.response = response
        self.error = error
        self.delay = delay
        self.calls: list[dict] = []

    @property
    def model_name(self) -> str:
        return "fake-generation"

    async def generate(self, prompt: str, temperature: float, top_p: float, max_tokens: int) -> str:
        self.calls.append(
            {"prompt": prompt, "temperature": temperature, "top_p": top_p, "max_tokens": max_tokens}
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response

    async def is_available(self) -> bool:
        return self.error is None


class FakeExampleStore:
    """Example store returning preset matches."""

    def __init__(self, matches: list[ScoredExample] | None = None, error: Exception | None = None) -> None:
        self.matches = matches or []
        self.error = error
        self.healthy = True
        self.added: list[ReferenceExample] = []
        self.searches: list[tuple[list[float], float, int]] = []

    def similarity_search(self, embedding: list[float], threshold: float, limit: int) -> list[ScoredExample]:
        self.searches.append((embedding, threshold, limit))
        if self.error is not None:
            raise self.error
        return [m for m in self.matches if m.similarity > threshold][:limit]

    def add_example(self, example: ReferenceExample) -> str:
        if self.error is not None:
            raise self.error
        self.added.append(example)
        return f"examples:{len(self.added)}"

    def count_all(self) -> int:
        return len(self.added)

    def health_check(self) -> bool:
        return self.healthy


class InMemoryEmbeddingCache:
    """Insert-once embedding cache."""

    def __init__(self) -> None:
        self.entries: dict[str, EmbeddingCacheEntry] = {}
        self.fail_reads = False
        self.fail_writes = False

    def get(self, text_hash: str) -> EmbeddingCacheEntry | None:
        if self.fail_reads:
            raise CacheFailure("read failed")
        return self.entries.get(text_hash)

    def add(self, entry: EmbeddingCacheEntry) -> bool:
        if self.fail_writes:
            raise CacheFailure("write failed")
        if entry.text_hash in self.entries:
            return False
        self.entries[entry.text_hash] = entry
        return True

    def count_all(self) -> int:
        return len(self.entries)

    def health_check(self) -> bool:
        return True


class InMemoryGenerationCache:
    """Upsert generation cache that keeps hit counts across overwrites."""

    def __init__(self) -> None:
        self.entries: dict[str, GenerationCacheEntry] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.fail_hits = False
        self.upserts = 0

    def get(self, cache_key: str) -> GenerationCacheEntry | None:
        if self.fail_reads:
            raise CacheFailure("read failed")
        return self.entries.get(cache_key)

    def upsert(self, entry: GenerationCacheEntry) -> None:
        if self.fail_writes:
            raise CacheFailure("write failed")
        self.upserts += 1
        existing = self.entries.get(entry.cache_key)
        hit_count = existing.hit_count if existing else entry.hit_count
        self.entries[entry.cache_key] = GenerationCacheEntry(
            cache_key=entry.cache_key,
            content=entry.content,
            created_at=entry.created_at,
            expires_at=entry.expires_at,
            hit_count=hit_count,
        )

    def increment_hit(self, cache_key: str) -> int:
        if self.fail_hits:
            raise CacheFailure("hincrby failed")
        entry = self.entries[cache_key]
        self.entries[cache_key] = GenerationCacheEntry(
            cache_key=entry.cache_key,
            content=entry.content,
            created_at=entry.created_at,
            expires_at=entry.expires_at,
            hit_count=entry.hit_count + 1,
        )
        return entry.hit_count + 1

    def delete_all(self) -> int:
        count = len(self.entries)
        self.entries.clear()
        return count

    def delete_expired(self, now: float) -> int:
        expired = [key for key, entry in self.entries.items() if entry.expires_at < now]
        for key in expired:
            del self.entries[key]
        return len(expired)

    def count_all(self) -> int:
        return len(self.entries)

    def health_check(self) -> bool:
        return True


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_example(company: str = "Asana", similarity: float = 0.9) -> ScoredExample:
    return ScoredExample(
        example=ReferenceExample(
            company=company,
            tagline=f"{company} helps teams orchestrate their work",
            anchor_type=AnchorType.PRODUCT_CATEGORY,
            primary_anchor="work management platform",
            problem="Teams lose track of who is doing what",
            differentiator="One place to plan and track work",
            icp=("Operations leaders",),
            structure="problem-solution",
        ),
        similarity=similarity,
    )


@pytest.fixture
def messaging() -> CoreMessaging:
    return CoreMessaging(
        primary_anchor=Anchor("Project Management Software", "Product Category"),
        secondary_anchor=Anchor("Marketing Teams", "Department"),
        problem="Campaign deadlines slip because work is tracked manually",
        differentiator="Automated timelines that flag at-risk tasks",
        icp=("Marketing agencies", "  ", "In-house marketing teams"),
        generation_settings=GenerationSettings(temperature=0.3, top_p=0.8),
        thesis=("Agencies juggle many clients",),
        risks=("Crowded category",),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def embedding_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def generation_provider() -> FakeGenerationProvider:
    return FakeGenerationProvider()


@pytest.fixture
def example_store() -> FakeExampleStore:
    return FakeExampleStore(matches=[make_example("Asana", 0.92), make_example("Monday", 0.81)])


@pytest.fixture
def embedding_cache() -> InMemoryEmbeddingCache:
    return InMemoryEmbeddingCache()


@pytest.fixture
def generation_cache() -> InMemoryGenerationCache:
    return InMemoryGenerationCache()


@pytest.fixture
def retrieval(example_store, embedding_cache, embedding_provider) -> RetrievalService:
    return RetrievalService(
        example_store=example_store,
        embedding_cache=embedding_cache,
        embedding_provider=embedding_provider,
        top_k=3,
        similarity_threshold=0.6,
        memory_cache_size=8,
    )


@pytest.fixture
def cache_gate(generation_cache, clock) -> GenerationCacheGate:
    return GenerationCacheGate(store=generation_cache, ttl=3600, clock=clock)


@pytest.fixture
def pipeline(retrieval, cache_gate, generation_provider) -> PositioningPipeline:
    return PositioningPipeline(
        retrieval=retrieval,
        cache_gate=cache_gate,
        orchestrator=GenerationOrchestrator(generation_provider=generation_provider, max_tokens=800),
        generation_provider=generation_provider,
    )

