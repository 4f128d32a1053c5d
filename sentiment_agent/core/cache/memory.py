"""In-memory cache implementation with TTL support and thread safety."""

import threading
import time
from datetime import timedelta
from typing import Any, Callable, Dict, Optional

from .base import CacheProvider


class InMemoryCache(CacheProvider):
    """Thread-safe in-memory cache with TTL (time-to-live) support.

    Expired entries are dropped lazily on read.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """Initialize empty cache.

        Args:
            clock: Time source in epoch seconds (injectable for tests)
        """
        self._cache: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            if entry["expiry"] is not None and self._clock() > entry["expiry"]:
                del self._cache[key]
                return None
            return entry["value"]

    def set(self, key: str, value: Any, ttl: Optional[timedelta] = None) -> None:
        with self._lock:
            expiry = self._clock() + ttl.total_seconds() if ttl else None
            self._cache[key] = {"value": value, "expiry": expiry}

    def delete(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
