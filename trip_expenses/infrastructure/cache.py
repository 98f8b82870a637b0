"""Thread-safe in-memory cache with TTL and simple eviction.

Time is read from an injectable clock returning epoch milliseconds, so
freshness windows can be tested without sleeping.
"""

from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any, Callable, Optional

from trip_expenses.domain.constants import ROUTE_CACHE_TTL_MS

Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


class MemoryCache:
    def __init__(self, default_ttl_ms: int = 300_000, max_size: int = 500, clock: Clock = now_ms):
        self._store: dict[str, tuple[Any, int]] = {}
        self._default_ttl_ms = default_ttl_ms
        self._max_size = max_size
        self._clock = clock
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            value, expire_at = entry
            if self._clock() >= expire_at:
                del self._store[key]
                self._misses += 1
                return None
            self._hits += 1
            return value

    def set(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> None:
        ttl_ms = ttl_ms if ttl_ms is not None else self._default_ttl_ms
        with self._lock:
            if key not in self._store and len(self._store) >= self._max_size:
                items = sorted(self._store.items(), key=lambda x: x[1][1])
                for k, _ in items[: self._max_size // 10 + 1]:
                    del self._store[k]
            self._store[key] = (value, self._clock() + ttl_ms)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0

    @property
    def stats(self) -> dict[str, Any]:
        total = self._hits + self._misses
        return {
            "size": len(self._store),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }


def make_cache_key(*parts: Any) -> str:
    raw = json.dumps(parts, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.md5(raw.encode()).hexdigest()


route_cache = MemoryCache(default_ttl_ms=ROUTE_CACHE_TTL_MS, max_size=300)
