"""
Activity feed: the agent's user-visible log.

Every entry is printed as a tagged line (``[2026-01-02T…] [Executor] buy_executed {...}``)
and kept in a bounded in-memory feed that is persisted with the agent state.
"""

import json
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Iterable, List

from sentiment_agent.config import ACTIVITY_LOG_LIMIT


class ActivityFeed:
    """Thread-safe ring buffer of activity entries."""

    def __init__(self, limit: int = ACTIVITY_LOG_LIMIT):
        self._entries: Deque[Dict[str, Any]] = deque(maxlen=limit)
        self._lock = threading.Lock()

    def log(self, agent: str, action: str, **details: Any) -> Dict[str, Any]:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "agent": agent,
            "action": action,
            **details,
        }
        with self._lock:
            self._entries.append(entry)
        print(f"[{entry['timestamp']}] [{agent}] {action} {json.dumps(details, default=str)}")
        return entry

    def recent(self, limit: int = 100) -> List[Dict[str, Any]]:
        with self._lock:
            entries = list(self._entries)
        return entries[-limit:] if limit > 0 else []

    def snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._entries)

    def restore(self, entries: Iterable[Dict[str, Any]]) -> None:
        """Replace the feed with previously persisted entries."""
        with self._lock:
            self._entries.clear()
            self._entries.extend(e for e in entries if isinstance(e, dict))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_default_feed = ActivityFeed()


def get_feed() -> ActivityFeed:
    """Get the process-wide activity feed."""
    return _default_feed


def set_feed(feed: ActivityFeed) -> None:
    """Swap the process-wide activity feed (tests use a fresh one)."""
    global _default_feed
    _default_feed = feed


def log_activity(agent: str, action: str, **details: Any) -> Dict[str, Any]:
    """Record an entry on the process-wide feed."""
    return _default_feed.log(agent, action, **details)
