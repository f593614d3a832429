"""
Tests for the generation cache key and gate.
"""

import dataclasses

import pytest

from positioning_rag.entities import Anchor, GeneratedContent, GenerationSettings
from positioning_rag.services import cache_key, round_to_tenth


def with_settings(messaging, temperature, top_p=0.8):
    return dataclasses.replace(
        messaging, generation_settings=GenerationSettings(temperature=temperature, top_p=top_p)
    )


@pytest.fixture
def content():
    return GeneratedContent(
        headline="Project Management Software for marketing teams",
        subheadline="Ship campaigns on time",
        opportunity="Agencies need predictable delivery",
    )


def test_rounding_buckets():
    """Sampling values bucket to the nearest tenth, halves rounding up."""
    assert round_to_tenth(0.31) == round_to_tenth(0.34) == 3
    assert round_to_tenth(0.36) == 4
    assert round_to_tenth(0.25) == 3
    assert round_to_tenth(0.0) == 0
    assert round_to_tenth(1.0) == 10


def test_cache_key_is_deterministic(messaging):
    assert cache_key(messaging) == cache_key(messaging)
    assert len(cache_key(messaging)) == 64


def test_cache_key_ignores_non_key_fields(messaging):
    """Secondary anchor, ICP, thesis and risks do not participate."""
    other = dataclasses.replace(
        messaging,
        secondary_anchor=Anchor("Sales Teams", "Department"),
        icp=("Enterprise",),
        thesis=(),
        risks=("Different risk",),
    )
    assert cache_key(other) == cache_key(messaging)


def test_cache_key_only_uses_text_prefixes(messaging):
    base = dataclasses.replace(messaging, problem="p" * 50, differentiator="d" * 50)
    longer = dataclasses.replace(messaging, problem="p" * 50 + " extra", differentiator="d" * 50 + " more")
    assert cache_key(base) == cache_key(longer)


def test_cache_key_normalizes_case_and_primary_whitespace(messaging):
    shouted = dataclasses.replace(
        messaging,
        primary_anchor=Anchor("  PROJECT MANAGEMENT SOFTWARE  ", "Product Category"),
        problem=messaging.problem.upper(),
        differentiator=messaging.differentiator.upper(),
    )
    assert cache_key(shouted) == cache_key(messaging)


def test_cache_key_tracks_sampling_buckets(messaging):
    assert cache_key(with_settings(messaging, 0.31)) == cache_key(with_settings(messaging, 0.34))
    assert cache_key(with_settings(messaging, 0.34)) != cache_key(with_settings(messaging, 0.36))
    assert cache_key(with_settings(messaging, 0.3, top_p=0.8)) != cache_key(with_settings(messaging, 0.3, top_p=0.9))


def test_cache_key_changes_with_primary_anchor(messaging):
    other = dataclasses.replace(messaging, primary_anchor=Anchor("CRM", "Product Category"))
    assert cache_key(other) != cache_key(messaging)


@pytest.mark.asyncio
async def test_store_then_lookup_returns_written_payload(cache_gate, content):
    assert await cache_gate.store("key-1", content) is True
    assert await cache_gate.lookup("key-1") == content


@pytest.mark.asyncio
async def test_lookup_miss_returns_none(cache_gate):
    assert await cache_gate.lookup("missing") is None


@pytest.mark.asyncio
async def test_entry_visible_until_expiry_inclusive(cache_gate, generation_cache, clock, content):
    await cache_gate.store("key-1", content)
    expires_at = generation_cache.entries["key-1"].expires_at
    assert expires_at == clock.now + 3600

    clock.now = expires_at
    assert await cache_gate.lookup("key-1") == content

    clock.now = expires_at + 0.001
    assert await cache_gate.lookup("key-1") is None


@pytest.mark.asyncio
async def test_lookup_increments_hit_count(cache_gate, generation_cache, content):
    await cache_gate.store("key-1", content)
    await cache_gate.lookup("key-1")
    await cache_gate.lookup("key-1")
    assert generation_cache.entries["key-1"].hit_count == 2


@pytest.mark.asyncio
async def test_hit_tracking_failure_still_serves_hit(cache_gate, generation_cache, content):
    await cache_gate.store("key-1", content)
    generation_cache.fail_hits = True
    assert await cache_gate.lookup("key-1") == content


@pytest.mark.asyncio
async def test_overwrite_refreshes_expiry_and_keeps_hits(cache_gate, generation_cache, clock, content):
    await cache_gate.store("key-1", content)
    await cache_gate.lookup("key-1")

    clock.now += 100
    replacement = dataclasses.replace(content, headline="A new headline")
    await cache_gate.store("key-1", replacement)

    entry = generation_cache.entries["key-1"]
    assert entry.hit_count == 1
    assert entry.expires_at == clock.now + 3600
    assert await cache_gate.lookup("key-1") == replacement


@pytest.mark.asyncio
async def test_read_failure_is_a_miss(cache_gate, generation_cache, content):
    await cache_gate.store("key-1", content)
    generation_cache.fail_reads = True
    assert await cache_gate.lookup("key-1") is None


@pytest.mark.asyncio
async def test_write_failure_is_skipped(cache_gate, generation_cache, content):
    generation_cache.fail_writes = True
    assert await cache_gate.store("key-1", content) is False
    assert generation_cache.entries == {}


@pytest.mark.asyncio
async def test_cleanup_expired_purges_only_stale_entries(cache_gate, clock, content):
    await cache_gate.store("old", content)
    clock.now += 3000
    await cache_gate.store("fresh", content)

    clock.now += 1000
    assert await cache_gate.cleanup_expired() == 1
    assert await cache_gate.lookup("fresh") == content


@pytest.mark.asyncio
async def test_clear_removes_everything(cache_gate, content):
    await cache_gate.store("a", content)
    await cache_gate.store("b", content)
    assert await cache_gate.clear() == 2
    assert cache_gate.get_stats() == {"total_entries": 0, "ttl_seconds": 3600}
