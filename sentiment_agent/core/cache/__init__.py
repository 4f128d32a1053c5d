"""Unified cache infrastructure."""

from .base import CacheProvider
from .memory import InMemoryCache
from .config import (
    CACHE_TTL_QUOTE,
    CACHE_TTL_FUNDAMENTALS,
    CACHE_TTL_RESEARCH,
)

__all__ = [
    "CacheProvider",
    "InMemoryCache",
    "CACHE_TTL_QUOTE",
    "CACHE_TTL_FUNDAMENTALS",
    "CACHE_TTL_RESEARCH",
]
