"""
Read-Side Score Cache

In-memory TTL cache for materialized certifier listings and lookups.
Key = SHA-256(namespace + key). TTL from settings (1 hour default).

Advisory only: the materializer clears it after each run so readers
see fresh scores without waiting for expiry.

Usage:
    from naqiy.cache import score_cache
    cached = await score_cache.get("ranking", scope)
    if cached is None:
        cached = build_ranking(...)
        await score_cache.put("ranking", scope, cached)
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from typing import Any, Optional

from naqiy.config import settings


class ScoreCache:
    """In-memory cache with TTL eviction, guarded by an asyncio lock."""

    def __init__(self, ttl_seconds: int = 3600, max_entries: int = 256):
        self._cache: dict[str, tuple[float, Any]] = {}
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def _make_key(namespace: str, key: str) -> str:
        raw = f"{namespace}||{key}"
        return hashlib.sha256(raw.encode()).hexdigest()

    async def get(self, namespace: str, key: str) -> Optional[Any]:
        """Return the cached value if present and not expired."""
        cache_key = self._make_key(namespace, key)
        async with self._lock:
            entry = self._cache.get(cache_key)
            if entry is None:
                self._misses += 1
                return None

            ts, value = entry
            if time.monotonic() - ts > self._ttl:
                del self._cache[cache_key]
                self._misses += 1
                return None

            self._hits += 1
            return value

    async def put(self, namespace: str, key: str, value: Any) -> None:
        """Store a value. Evicts the oldest entry when full."""
        cache_key = self._make_key(namespace, key)
        async with self._lock:
            if cache_key not in self._cache and len(self._cache) >= self._max_entries:
                oldest_key = min(
                    self._cache, key=lambda k: self._cache[k][0],
                )
                del self._cache[oldest_key]

            self._cache[cache_key] = (time.monotonic(), value)

    async def clear(self) -> int:
        """Drop every entry. Returns how many were removed."""
        async with self._lock:
            removed = len(self._cache)
            self._cache.clear()
            return removed

    @property
    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "entries": len(self._cache),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }


# Shared across the application
score_cache = ScoreCache(ttl_seconds=settings.CACHE_TTL_SECONDS)
