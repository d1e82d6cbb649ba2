#!/usr/bin/env python3
"""
In-Memory TTL Cache

Per-process key/value store with per-entry expiry.

STAGE-1: Response cache

Implementation Details:
- Plain dict guarded by asyncio.Lock
- Each entry remembers when it was stored and its own TTL
- An entry is visible while `now - stored_at <= ttl`
- Expired entries are deleted when read, or by a cleanup pass that runs
  before an insert once the store reaches max_entries
- The cleanup pass is a soft cap, not LRU: if nothing has expired the new
  entry is inserted anyway

Values are deep-copied on the way in and on the way out, so a caller
mutating a returned dict never changes what other callers see.

Author: System Architect
Date: 2026-09-28
"""

import asyncio
import copy
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from maple_gateway.core.config.constants import Stage
from maple_gateway.core.interfaces import Clock, SystemClock
from maple_gateway.core.logging import get_logger, log_stage

logger = get_logger(__name__)

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    value: V
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl


@dataclass(frozen=True)
class CacheLookup(Generic[V]):
    """
    Result of a cache lookup.

    Hit and miss are explicit variants so that a cached None is still a hit.
    """

    hit: bool
    value: V | None = None

    @classmethod
    def miss(cls) -> "CacheLookup[V]":
        return cls(hit=False)


class TTLCache(Generic[V]):
    """
    TTL cache with lazy expiry.

    Usage:
        cache: TTLCache[dict] = TTLCache(max_entries=1000, default_ttl=300)

        await cache.set("ocid:hero", {"ocid": "abc"}, ttl=7200)
        result = await cache.lookup("ocid:hero")
        if result.hit:
            ...
    """

    def __init__(
        self,
        max_entries: int = 1000,
        default_ttl: float = 300.0,
        clock: Clock | None = None,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._default_ttl = default_ttl
        self._clock = clock or SystemClock()
        self._entries: dict[str, CacheEntry[V]] = {}
        self._lock = asyncio.Lock()

        # Metrics
        self._hits = 0
        self._misses = 0
        self._expirations = 0
        self._cleanups = 0

    async def set(self, key: str, value: V, ttl: float | None = None) -> None:
        """
        Store value, overwriting any existing entry for key.

        Args:
            key: Cache key
            value: Value to store (deep-copied)
            ttl: Time to live in seconds (default_ttl when None)
        """
        ttl = self._default_ttl if ttl is None else ttl
        async with self._lock:
            if len(self._entries) >= self._max_entries:
                self._cleanup_locked()
            self._entries[key] = CacheEntry(
                value=copy.deepcopy(value),
                stored_at=self._clock.now(),
                ttl=ttl,
            )

    async def lookup(self, key: str) -> CacheLookup[V]:
        """Return an explicit hit/miss result for key."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return CacheLookup.miss()
            if entry.is_expired(self._clock.now()):
                del self._entries[key]
                self._expirations += 1
                self._misses += 1
                return CacheLookup.miss()
            self._hits += 1
            return CacheLookup(hit=True, value=copy.deepcopy(entry.value))

    async def get(self, key: str) -> V | None:
        """Return the stored value, or None when absent or expired."""
        result = await self.lookup(key)
        return result.value

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def invalidate_prefix(self, prefix: str) -> int:
        """
        Delete every entry whose key starts with prefix.

        Returns:
            Number of entries removed
        """
        async with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            log_stage(logger, Stage.CACHE_WRITE, "Cache prefix invalidated", prefix=prefix, removed=len(doomed))
        return len(doomed)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    async def cleanup(self) -> int:
        """Delete all expired entries. Returns the number removed."""
        async with self._lock:
            return self._cleanup_locked()

    def _cleanup_locked(self) -> int:
        now = self._clock.now()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        self._expirations += len(expired)
        self._cleanups += 1
        log_stage(
            logger,
            Stage.CACHE_WRITE,
            "Cache cleanup pass",
            level="debug",
            removed=len(expired),
            remaining=len(self._entries),
        )
        return len(expired)

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet purged."""
        return len(self._entries)

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def stats(self) -> dict[str, Any]:
        """
        Get cache performance statistics.

        Returns:
            Dict with hit rate, counters, size and capacity utilization
        """
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "max_size": self._max_entries,
            "utilization_percent": round(len(self._entries) / self._max_entries * 100, 2),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 4) if total else 0.0,
            "expirations": self._expirations,
            "cleanups": self._cleanups,
        }
