"""
cache_service.py — Dashboard Query Caching
In-memory cache keyed by (namespace, user_id, params). Supports TTL-based
expiry, hit-rate statistics and invalidation when a study session finishes.
"""

import time
from typing import Callable

from studytracker.services.event_bus import SessionEvents, SessionFinished

DASHBOARD_STATS = "dashboard-stats"
DASHBOARD_CHARTS = "dashboard-charts"


class QueryCache:
    """In-memory query cache with TTL and hit tracking."""

    def __init__(self, ttl_seconds: int = 300, clock: Callable[[], float] = time.time):
        # (namespace, user_id, params) → {value, timestamp, ttl, hit_count}
        self._cache: dict[tuple, dict] = {}
        self._hits: int = 0
        self._misses: int = 0
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    # ------------------------------------------------------------------
    @staticmethod
    def _key(namespace: str, user_id: str, params: tuple) -> tuple:
        return (namespace, user_id, params)

    # ------------------------------------------------------------------
    def get(self, namespace: str, user_id: str, params: tuple = ()):
        """Return cached value or None on miss / expiry."""
        key = self._key(namespace, user_id, params)
        entry = self._cache.get(key)
        if entry is None:
            self._misses += 1
            return None

        age = self._clock() - entry["timestamp"]
        if age > entry["ttl"]:
            del self._cache[key]
            self._misses += 1
            return None

        entry["hit_count"] += 1
        self._hits += 1
        return entry["value"]

    # ------------------------------------------------------------------
    def set(self, namespace: str, user_id: str, params: tuple, value, ttl_seconds: int | None = None):
        """Store a value with a TTL (seconds). ttl_seconds=0 → don't cache."""
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return
        self._cache[self._key(namespace, user_id, params)] = {
            "value": value,
            "timestamp": self._clock(),
            "ttl": ttl,
            "hit_count": 0,
        }

    def get_or_load(self, namespace: str, user_id: str, params: tuple, loader: Callable[[], object]):
        value = self.get(namespace, user_id, params)
        if value is None:
            value = loader()
            self.set(namespace, user_id, params, value)
        return value

    # ------------------------------------------------------------------
    def invalidate(self, namespace: str | None = None, user_id: str | None = None) -> int:
        """Drop every entry matching the namespace and/or user. Returns how many were dropped."""
        doomed = [
            k for k in self._cache
            if (namespace is None or k[0] == namespace) and (user_id is None or k[1] == user_id)
        ]
        for k in doomed:
            del self._cache[k]
        return len(doomed)

    def clear_expired(self):
        """Evict all entries past their TTL."""
        now = self._clock()
        expired = [
            k for k, v in self._cache.items()
            if now - v["timestamp"] > v["ttl"]
        ]
        for k in expired:
            del self._cache[k]

    # ------------------------------------------------------------------
    def attach(self, events: SessionEvents) -> Callable[[], None]:
        """Invalidate a user's dashboard entries whenever one of their sessions finishes."""
        def on_finished(event: SessionFinished):
            self.invalidate(DASHBOARD_STATS, event.user_id)
            self.invalidate(DASHBOARD_CHARTS, event.user_id)

        return events.subscribe(on_finished)

    # ------------------------------------------------------------------
    def get_stats(self) -> dict:
        """Cache statistics: entries and hit rate."""
        total_lookups = self._hits + self._misses
        return {
            "total_entries": len(self._cache),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total_lookups, 4) if total_lookups else 0.0,
        }
