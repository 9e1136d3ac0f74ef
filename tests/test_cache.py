"""Tests for the in-memory cache."""

from datetime import UTC, datetime, timedelta

from nutrimate.services.cache import InMemoryCache


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 10, 19, 8, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


def test_cache_expires_entries() -> None:
    clock = _Clock()
    cache = InMemoryCache(clock=clock)
    key = ("goals", "female", "1981-05-02")

    cache.set(key, 2040, ttl_seconds=60)
    assert cache.get(key) == 2040

    clock.now += timedelta(seconds=60)
    assert cache.get(key) is None
    assert len(cache) == 0


def test_cache_invalidate() -> None:
    cache = InMemoryCache()
    cache.set("key", "value", ttl_seconds=60)

    cache.invalidate("key")
    cache.invalidate("missing")

    assert cache.get("key") is None
