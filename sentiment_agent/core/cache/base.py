"""Abstract base class for cache providers with unified interface."""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


class CacheProvider(ABC):
    """Abstract base class for TTL caches.

    Implementations back the quote / fundamentals lookups (InMemoryCache) and
    the LLM research verdicts (research.cache.ResearchCache).
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Retrieve a value from cache by key.

        Args:
            key: Cache key

        Returns:
            Cached value, or None if not found or expired
        """

    @abstractmethod
    def set(self, key: str, value: Any, ttl: Optional[timedelta] = None) -> None:
        """Store a value in cache with optional TTL.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time-to-live; if None, the implementation default applies
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Drop a single key (no-op when absent)."""

    @abstractmethod
    def clear(self) -> None:
        """Clear all cached values."""

    def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], T],
        ttl: Optional[timedelta] = None,
    ) -> T:
        """Get from cache or fetch and cache if missing.

        ``None`` results are not cached, so a failed lookup is retried on the
        next call.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        value = fetch_fn()
        if value is not None:
            self.set(key, value, ttl)
        return value
