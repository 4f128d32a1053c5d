"""Per-cycle call budgets for external providers."""

import threading
from typing import Dict, Optional

from sentiment_agent.config import RATE_LIMIT_BUDGETS

# Budget used for providers missing from the table
DEFAULT_BUDGET = 999


class RateLimiter:
    """Tracks calls per provider within one scheduling cycle.

    Data gatherers call ``consume()`` before every request and stop fetching
    once it returns False. The Scheduler calls ``reset()`` at the start of each
    tick; nothing else should.
    """

    def __init__(self, budgets: Optional[Dict[str, int]] = None):
        """Initialize with a provider → calls-per-cycle table.

        Args:
            budgets: Budget per provider name (defaults to config.RATE_LIMIT_BUDGETS)
        """
        self._budgets = dict(RATE_LIMIT_BUDGETS if budgets is None else budgets)
        self._counts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def budget(self, provider: str) -> int:
        return self._budgets.get(provider, DEFAULT_BUDGET)

    def count(self, provider: str) -> int:
        with self._lock:
            return self._counts.get(provider, 0)

    def remaining(self, provider: str) -> int:
        with self._lock:
            return max(0, self.budget(provider) - self._counts.get(provider, 0))

    def consume(self, provider: str) -> bool:
        """Record a call if budget remains. Returns False (and records nothing) otherwise."""
        with self._lock:
            used = self._counts.get(provider, 0)
            if used >= self.budget(provider):
                return False
            self._counts[provider] = used + 1
            return True

    def reset(self) -> None:
        with self._lock:
            self._counts = {}

    def snapshot(self) -> Dict[str, int]:
        """Current call counts (for status reporting)."""
        with self._lock:
            return dict(self._counts)
