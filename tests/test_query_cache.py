import asyncio

import pytest

from app.helpers.query_cache import QueryCache

KEY = ("medications", "u1")


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def _counting_fetcher(results):
    calls = []

    async def fetch():
        calls.append(1)
        result = results[len(calls) - 1]
        if isinstance(result, Exception):
            raise result
        return result
    return fetch, calls


def test_zero_stale_time_refetches_every_read():
    cache = QueryCache(stale_time=0)
    fetch, calls = _counting_fetcher([["a"], ["b"]])

    assert asyncio.run(cache.fetch_query(KEY, fetch)) == ["a"]
    assert asyncio.run(cache.fetch_query(KEY, fetch)) == ["b"]
    assert len(calls) == 2


def test_fresh_entry_is_served_from_cache_until_invalidated():
    clock = FakeClock()
    cache = QueryCache(stale_time=60, clock=clock)
    fetch, calls = _counting_fetcher([["a"], ["b"]])

    asyncio.run(cache.fetch_query(KEY, fetch))
    clock.now += 30
    assert asyncio.run(cache.fetch_query(KEY, fetch)) == ["a"]
    assert len(calls) == 1

    cache.invalidate(KEY)
    assert cache.get(KEY) == ["a"]
    assert asyncio.run(cache.fetch_query(KEY, fetch)) == ["b"]
    assert len(calls) == 2


def test_entry_goes_stale_after_stale_time():
    clock = FakeClock()
    cache = QueryCache(stale_time=60, clock=clock)
    fetch, calls = _counting_fetcher([["a"], ["b"]])

    asyncio.run(cache.fetch_query(KEY, fetch))
    clock.now += 61
    assert asyncio.run(cache.fetch_query(KEY, fetch)) == ["b"]


def test_failed_refetch_keeps_previous_data():
    cache = QueryCache()
    error = RuntimeError("boom")
    fetch, _ = _counting_fetcher([["a"], error])

    asyncio.run(cache.fetch_query(KEY, fetch))
    cache.invalidate(KEY)
    with pytest.raises(RuntimeError):
        asyncio.run(cache.fetch_query(KEY, fetch))

    state = cache.get_state(KEY)
    assert cache.get(KEY) == ["a"]
    assert state.error is error
    assert state.is_invalidated
    assert not state.is_fetching


def test_keys_are_isolated_per_user():
    cache = QueryCache(stale_time=60)
    cache.set(("medications", "u1"), ["mine"])
    cache.set(("medications", "u2"), ["theirs"])

    cache.invalidate(("medications", "u1"))

    assert cache.is_stale(("medications", "u1"))
    assert not cache.is_stale(("medications", "u2"))


def test_invalidating_unknown_key_is_a_no_op():
    cache = QueryCache()
    cache.invalidate(KEY)
    assert cache.get(KEY) is None
    assert cache.get_state(KEY) is None


def test_clear_drops_everything():
    cache = QueryCache(stale_time=60)
    cache.set(KEY, ["a"])
    cache.clear()
    assert cache.get(KEY) is None


def test_invalidation_during_fetch_is_not_lost():
    cache = QueryCache(stale_time=300)

    async def scenario():
        started = asyncio.Event()
        release = asyncio.Event()
        results = iter([["before-write"], ["after-write"]])

        async def fetch():
            value = next(results)
            if value == ["before-write"]:
                started.set()
                await release.wait()
            return value

        first = asyncio.create_task(cache.fetch_query(KEY, fetch))
        await started.wait()
        cache.invalidate(KEY)
        release.set()
        return await first, await cache.fetch_query(KEY, fetch)

    first, second = asyncio.run(scenario())

    assert first == ["before-write"]
    assert second == ["after-write"]
