"""Simple cache abstractions."""

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface keyed by hashable input tuples."""

    def get(self, key: Hashable) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: Hashable, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL in seconds."""

    def invalidate(self, key: Hashable) -> None:
        """Drop a cached value."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


class InMemoryCache(Cache):
    """Process-local cache with lazy expiry."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._entries: dict[Hashable, _CacheEntry] = {}
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    def get(self, key: Hashable) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: Hashable, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL."""
        expires_at = self._clock() + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def invalidate(self, key: Hashable) -> None:
        """Remove a key if present."""
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
