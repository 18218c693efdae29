"""Result Cache: single slot, fixed TTL, last writer wins."""

import pytest

from ccpi.schemas.indicators import Pillar
from ccpi.services.cache import ResultCache
from ccpi.services.scoring.composite import CompositeEngine
from fakes import make_indicator, one_per_pillar

WEIGHTS = {"momentum": 0.35, "risk_appetite": 0.30, "valuation": 0.15, "macro": 0.20}


@pytest.fixture
def engine():
    return CompositeEngine(one_per_pillar(), WEIGHTS)


def compute(engine, value):
    return engine.compute(
        [make_indicator(n, p, value) for n, p in zip(("m", "r", "v", "x"), Pillar)]
    )


def test_empty_cache_misses(clock):
    cache = ResultCache(ttl_seconds=300, clock=clock)

    assert cache.get() is None
    assert cache.entry() is None


def test_round_trip_returns_written_value(engine, clock):
    cache = ResultCache(ttl_seconds=300, clock=clock)
    result = compute(engine, 42)

    cache.put(result)

    assert cache.get() == result
    assert cache.entry().stored_at == clock.now


def test_reads_within_ttl_are_identical(engine, clock):
    cache = ResultCache(ttl_seconds=300, clock=clock)
    cache.put(compute(engine, 42))

    first = cache.get()
    clock.advance(299)
    second = cache.get()

    assert second is first
    assert second.timestamp == first.timestamp


def test_entry_expires_at_ttl(engine, clock):
    cache = ResultCache(ttl_seconds=300, clock=clock)
    cache.put(compute(engine, 42))

    clock.advance(300)

    assert cache.get() is None


def test_put_overwrites_unconditionally(engine, clock):
    cache = ResultCache(ttl_seconds=300, clock=clock)
    older = compute(engine, 10)
    newer = compute(engine, 90)

    cache.put(newer)
    clock.advance(10)
    cache.put(older)

    assert cache.get() is older
    assert cache.age(cache.entry()) == 0


def test_clear(engine, clock):
    cache = ResultCache(clock=clock)
    cache.put(compute(engine, 42))

    cache.clear()

    assert cache.get() is None
