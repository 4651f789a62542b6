import asyncio

import pytest

from conftest import FakeClock, ScriptedFetcher
from ledger_server.modules.rates import RateCache


async def test_first_call_fetches_and_caches(rate_cache, fetcher, clock):
    assert rate_cache.snapshot() is None

    assert await rate_cache.get_current_rate() == 1.0
    assert fetcher.calls == 1
    assert rate_cache.snapshot().fetched_at == clock.now
    assert rate_cache.is_fresh()


async def test_fresh_value_is_served_without_fetching(rate_cache, fetcher, clock):
    await rate_cache.get_current_rate()
    fetcher.price = 2.0

    clock.advance(59)
    assert await rate_cache.get_current_rate() == 1.0
    assert fetcher.calls == 1


async def test_stale_value_is_refreshed(rate_cache, fetcher, clock):
    await rate_cache.get_current_rate()
    fetcher.price = 2.0

    clock.advance(61)
    assert await rate_cache.get_current_rate() == 2.0
    assert fetcher.calls == 2
    assert rate_cache.age() == 0


async def test_failed_refresh_serves_previous_value(rate_cache, fetcher, clock):
    await rate_cache.get_current_rate()
    fetcher.price = None

    clock.advance(61)
    assert await rate_cache.get_current_rate() == 1.0
    assert fetcher.calls == 2
    # the old entry is kept, so the next call retries
    assert rate_cache.age() == 61
    assert await rate_cache.get_current_rate() == 1.0
    assert fetcher.calls == 3

    fetcher.price = 1.5
    assert await rate_cache.get_current_rate() == 1.5


async def test_unknown_rate_is_none(rate_cache, fetcher):
    fetcher.price = None

    assert await rate_cache.get_current_rate() is None
    assert rate_cache.snapshot() is None
    assert rate_cache.age() is None
    assert not rate_cache.is_fresh()


async def test_slow_fetch_counts_as_failure():
    async def hanging() -> float:
        await asyncio.sleep(10)
        return 1.0

    cache = RateCache(hanging, 60.0, clock=FakeClock(), fetch_timeout=0.01)

    assert await cache.get_current_rate() is None


async def test_reset_forces_refetch(clock):
    fetcher = ScriptedFetcher(3.0)
    cache = RateCache(fetcher, 60.0, clock=clock)
    await cache.get_current_rate()

    cache.reset()
    await cache.get_current_rate()

    assert fetcher.calls == 2


def test_ttl_must_be_positive():
    with pytest.raises(ValueError):
        RateCache(ScriptedFetcher(), 0)


class FlakyFetcher:
    """Answers once, then fails with an error the price client never maps."""

    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self) -> float:
        self.calls += 1
        if self.calls > 1:
            raise RuntimeError("boom")
        return 1.0


async def test_unexpected_fetch_error_falls_back_to_cached_value(clock):
    fetcher = FlakyFetcher()
    cache = RateCache(fetcher, 60.0, clock=clock)
    assert await cache.get_current_rate() == 1.0

    clock.advance(61)

    assert await cache.get_current_rate() == 1.0
    assert fetcher.calls == 2


async def test_unexpected_fetch_error_without_cached_value_is_none(clock):
    async def broken() -> float:
        raise RuntimeError("boom")

    cache = RateCache(broken, 60.0, clock=clock)

    assert await cache.get_current_rate() is None
