"""
Tests for similarity retrieval and the two-tier embedding cache.
"""

import pytest

from positioning_rag.errors import EmbeddingFailure, VectorStoreFailure
from positioning_rag.services import FALLBACK_EXAMPLES, RetrievalService
from positioning_rag.services.retrieval_service import build_query_text, content_hash


def test_query_text_skips_empty_fields(messaging):
    text = build_query_text(messaging)
    assert text.startswith("Project Management Software Marketing Teams Campaign deadlines")
    assert text.endswith("In-house marketing teams")


def test_content_hash_normalizes_case_and_whitespace():
    assert content_hash("  Hello World ") == content_hash("hello world")
    assert content_hash("hello") != content_hash("hello world")


@pytest.mark.asyncio
async def test_retrieve_returns_matches_above_threshold(retrieval, example_store, messaging):
    examples = await retrieval.retrieve(messaging)

    assert [e.example.company for e in examples] == ["Asana", "Monday"]
    _, threshold, limit = example_store.searches[0]
    assert threshold == 0.6
    assert limit == 3


@pytest.mark.asyncio
async def test_no_matches_uses_fallback_examples(retrieval, example_store, messaging):
    example_store.matches = []

    result = await retrieval.search(messaging)

    assert result.is_fallback is True
    assert result.examples == list(FALLBACK_EXAMPLES)
    assert result.examples[0].example.company == "Wynter"


@pytest.mark.asyncio
async def test_vector_store_failure_uses_fallback_examples(retrieval, example_store, messaging):
    example_store.error = VectorStoreFailure("index missing")

    result = await retrieval.search(messaging)

    assert result.is_fallback is True
    assert len(example_store.searches) == 1


@pytest.mark.asyncio
async def test_untyped_store_error_uses_fallback_examples(retrieval, example_store, messaging):
    example_store.error = ValueError("'Use case' is not a valid AnchorType")

    result = await retrieval.search(messaging)

    assert result.is_fallback is True
    assert result.examples == list(FALLBACK_EXAMPLES)


@pytest.mark.asyncio
async def test_embedding_failure_uses_fallback_without_search(retrieval, embedding_provider, example_store, messaging):
    embedding_provider.fail = True

    result = await retrieval.search(messaging)

    assert result.is_fallback is True
    assert example_store.searches == []


@pytest.mark.asyncio
async def test_embedding_write_through_and_memory_hit(retrieval, embedding_provider, embedding_cache):
    first = await retrieval.get_embedding("market research platform")
    second = await retrieval.get_embedding("market research platform")

    assert first == second
    assert len(embedding_provider.calls) == 1
    entry = embedding_cache.entries[content_hash("market research platform")]
    assert entry.embedding == first
    assert entry.text == "market research platform"


@pytest.mark.asyncio
async def test_persistent_cache_hit_skips_provider(
    retrieval, embedding_provider, embedding_cache, example_store
):
    await retrieval.get_embedding("market research platform")

    fresh = RetrievalService(
        example_store=example_store,
        embedding_cache=embedding_cache,
        embedding_provider=embedding_provider,
        memory_cache_size=8,
    )
    await fresh.get_embedding("MARKET research platform ")

    assert len(embedding_provider.calls) == 1


@pytest.mark.asyncio
async def test_cache_failures_degrade_to_provider(retrieval, embedding_provider, embedding_cache):
    embedding_cache.fail_reads = True
    embedding_cache.fail_writes = True

    embedding = await retrieval.get_embedding("market research platform")

    assert len(embedding) == embedding_provider.dimension
    assert embedding_cache.entries == {}


@pytest.mark.asyncio
async def test_provider_failure_propagates_from_get_embedding(retrieval, embedding_provider):
    embedding_provider.fail = True

    with pytest.raises(EmbeddingFailure):
        await retrieval.get_embedding("market research platform")


@pytest.mark.asyncio
async def test_memory_tier_is_bounded(retrieval, embedding_provider):
    for i in range(10):
        await retrieval.get_embedding(f"text {i}")

    status = retrieval.status()
    assert status["memory_cache_size"] == 8
    assert status["memory_cache_max_size"] == 8
    assert status["embedding_model"] == "fake-embedding"
