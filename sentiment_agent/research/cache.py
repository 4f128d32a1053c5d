"""TTL cache of LLM research verdicts, backed by AgentState.research_cache."""

import time
from datetime import timedelta
from typing import Callable, Dict, Optional

from sentiment_agent.core.cache import CACHE_TTL_RESEARCH, CacheProvider
from sentiment_agent.state import ResearchResult


class ResearchCache(CacheProvider):
    """Verdicts keyed by symbol, served while younger than the TTL.

    The backing dict is the persisted ``AgentState.research_cache``, so the
    cache survives restarts. Age comes from ``ResearchResult.timestamp``; an
    entry exactly TTL seconds old is already stale.
    """

    def __init__(
        self,
        entries: Dict[str, ResearchResult],
        ttl: timedelta = CACHE_TTL_RESEARCH,
        clock: Callable[[], float] = time.time,
    ):
        self._entries = entries
        self._ttl_s = ttl.total_seconds()
        self._clock = clock

    def is_fresh(self, result: ResearchResult) -> bool:
        return self._clock() - result.timestamp < self._ttl_s

    def get(self, key: str) -> Optional[ResearchResult]:
        result = self._entries.get(key.upper())
        if result is None or not self.is_fresh(result):
            return None
        return result

    def set(self, key: str, value: ResearchResult, ttl: Optional[timedelta] = None) -> None:
        """Store *value*; its own timestamp drives expiry, so *ttl* is unused."""
        self._entries[key.upper()] = value

    def delete(self, key: str) -> None:
        self._entries.pop(key.upper(), None)

    def clear(self) -> None:
        self._entries.clear()

    def purge_stale(self) -> int:
        """Drop every expired verdict. Returns how many were removed."""
        stale = [k for k, r in self._entries.items() if not self.is_fresh(r)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def fresh_results(self) -> Dict[str, ResearchResult]:
        return {k: r for k, r in self._entries.items() if self.is_fresh(r)}
