"""
Tests for the LRU map and single-flight coalescing.
"""

import asyncio

import pytest

from positioning_rag.utils import LRUMap, SingleFlight


def test_lru_evicts_least_recently_used():
    lru = LRUMap[str, int](max_size=2)
    lru.put("a", 1)
    lru.put("b", 2)
    assert lru.get("a") == 1

    lru.put("c", 3)

    assert "b" not in lru
    assert lru.get("a") == 1
    assert lru.get("c") == 3
    assert len(lru) == 2


def test_lru_put_existing_key_refreshes_value():
    lru = LRUMap[str, int](max_size=2)
    lru.put("a", 1)
    lru.put("b", 2)
    lru.put("a", 10)
    lru.put("c", 3)

    assert lru.get("a") == 10
    assert "b" not in lru


def test_lru_rejects_zero_capacity():
    with pytest.raises(ValueError):
        LRUMap(max_size=0)


@pytest.mark.asyncio
async def test_single_flight_shares_result():
    flight = SingleFlight[int]()
    calls = 0

    async def work():
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return 42

    results = await asyncio.gather(*(flight.do("k", work) for _ in range(3)))

    assert calls == 1
    assert [value for value, _ in results] == [42, 42, 42]
    assert [shared for _, shared in results] == [False, True, True]
    assert flight.inflight_count == 0


@pytest.mark.asyncio
async def test_single_flight_propagates_errors_to_all_waiters():
    flight = SingleFlight[int]()

    async def work():
        await asyncio.sleep(0.01)
        raise ValueError("boom")

    results = await asyncio.gather(*(flight.do("k", work) for _ in range(2)), return_exceptions=True)

    assert all(isinstance(r, ValueError) for r in results)
    assert flight.inflight_count == 0


@pytest.mark.asyncio
async def test_single_flight_runs_again_after_completion():
    flight = SingleFlight[int]()
    calls = 0

    async def work():
        nonlocal calls
        calls += 1
        return calls

    first, _ = await flight.do("k", work)
    second, shared = await flight.do("k", work)

    assert (first, second) == (1, 2)
    assert shared is False


@pytest.mark.asyncio
async def test_single_flight_cancelled_caller_does_not_cancel_shared_work():
    flight = SingleFlight[int]()
    calls = 0

    async def work():
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.05)
        return 7

    first = asyncio.create_task(flight.do("k", work))
    await asyncio.sleep(0)
    second = asyncio.create_task(flight.do("k", work))
    await asyncio.sleep(0)

    first.cancel()

    assert await second == (7, True)
    assert first.cancelled()
    assert calls == 1
    assert flight.inflight_count == 0
