"""
Social and news sentiment sources.

Each source turns one provider's feed into per-ticker Signals and never
raises; a failing feed simply contributes nothing to the cycle.
"""

from typing import List

from .base import SOURCE_WEIGHTS, PostSource, SignalSource, get_json, source_weight
from .stocktwits import StockTwitsSource
from .reddit import RedditSource
from .quiver import CongressTradingSource, QuiverSource
from .rss import NewsFeedSource


def create_signal_sources() -> List[SignalSource]:
    """Build every source that has the credentials it needs."""
    sources: List[SignalSource] = [
        StockTwitsSource(),
        RedditSource(),
        QuiverSource(),
        CongressTradingSource(),
        NewsFeedSource(),
    ]
    enabled = [s for s in sources if s.is_configured()]
    print(f"[SOURCES] Enabled: {', '.join(s.name for s in enabled)}")
    return enabled


__all__ = [
    "SOURCE_WEIGHTS",
    "PostSource",
    "SignalSource",
    "get_json",
    "source_weight",
    "StockTwitsSource",
    "RedditSource",
    "QuiverSource",
    "CongressTradingSource",
    "NewsFeedSource",
    "create_signal_sources",
]
