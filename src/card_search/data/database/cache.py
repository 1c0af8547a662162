"""Async-safe LRU caches for entity name lookups."""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from ...config import Settings, get_settings

T = TypeVar("T")


def normalize_key(namespace: str, fragment: str) -> str:
    """Build a cache key from a namespace and a name fragment."""
    return f"{namespace}:{' '.join(fragment.lower().split())}"


@dataclass
class LookupCache(Generic[T]):
    """Bounded LRU cache mapping a lookup key to the candidates it returned.

    Entries are tuples and are replaced, never mutated, so readers never see
    a half-written list. There is no TTL; entries live until evicted.
    """

    max_size: int = 100
    _cache: OrderedDict[str, tuple[T, ...]] = field(default_factory=OrderedDict)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    hits: int = 0
    misses: int = 0

    async def get(self, key: str) -> tuple[T, ...] | None:
        """Get cached candidates, or None when the key was never stored."""
        async with self._lock:
            if key not in self._cache:
                self.misses += 1
                return None

            # Move to end (most recently used) - O(1)
            self._cache.move_to_end(key)
            self.hits += 1
            return self._cache[key]

    async def put(self, key: str, candidates: Sequence[T]) -> None:
        """Store candidates, evicting the least recently used entry at capacity."""
        async with self._lock:
            if key in self._cache:
                self._cache[key] = tuple(candidates)
                self._cache.move_to_end(key)
                return

            if len(self._cache) >= self.max_size:
                self._cache.popitem(last=False)

            self._cache[key] = tuple(candidates)

    async def clear(self) -> None:
        """Clear the cache."""
        async with self._lock:
            self._cache.clear()
            self.hits = 0
            self.misses = 0

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        return list(self._cache)

    def __len__(self) -> int:
        return len(self._cache)

    def stats(self) -> dict[str, int]:
        """Get cache statistics."""
        return {
            "size": len(self._cache),
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "utilization_percent": round(len(self._cache) / self.max_size * 100)
            if self.max_size
            else 0,
        }


@dataclass
class LookupCaches:
    """One lookup cache per entity type, shared by every search in the process."""

    players: LookupCache[Any]
    series: LookupCache[Any]
    teams: LookupCache[Any]
    colors: LookupCache[Any]

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> LookupCaches:
        """Create caches sized from settings."""
        settings = settings or get_settings()
        return cls(
            players=LookupCache(max_size=settings.player_cache_size),
            series=LookupCache(max_size=settings.series_cache_size),
            teams=LookupCache(max_size=settings.team_cache_size),
            colors=LookupCache(max_size=settings.color_cache_size),
        )

    async def clear(self) -> None:
        """Clear every cache."""
        for cache in (self.players, self.series, self.teams, self.colors):
            await cache.clear()

    def stats(self) -> dict[str, Any]:
        """Aggregate hit/miss statistics across all caches."""
        caches = {
            "player": self.players.stats(),
            "set": self.series.stats(),
            "team": self.teams.stats(),
            "color": self.colors.stats(),
        }
        hits = sum(c["hits"] for c in caches.values())
        misses = sum(c["misses"] for c in caches.values())
        total = hits + misses
        return {
            "hits": hits,
            "misses": misses,
            "total_requests": total,
            "hit_rate": f"{round(hits / total * 100) if total else 0}%",
            "caches": caches,
        }
