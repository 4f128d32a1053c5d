"""StockTwits trending symbols + per-symbol message streams."""

import time
from datetime import datetime
from typing import List, Optional

from sentiment_agent.core.rate_limiter import RateLimiter
from sentiment_agent.errors import ProviderError
from sentiment_agent.signals.scorer import RawPost

from .base import PostSource, get_json, source_weight

STOCKTWITS_BASE = "https://api.stocktwits.com/api/2"
TRENDING_LIMIT = 15
MESSAGES_PER_SYMBOL = 30


def parse_timestamp(value: Optional[str], default: float) -> float:
    """ISO-8601 (``2024-05-01T14:03:22Z``) → epoch seconds."""
    if not value:
        return default
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return default


class StockTwitsSource(PostSource):
    name = "stocktwits"
    budget_key = "stocktwits"

    def __init__(self, scorer=None, pause_s: float = 0.2, trending_limit: int = TRENDING_LIMIT):
        super().__init__(scorer)
        self.pause_s = pause_s
        self.trending_limit = trending_limit

    def trending_symbols(self, limiter: RateLimiter) -> List[str]:
        if not limiter.consume(self.budget_key):
            return []
        data = get_json(self.name, f"{STOCKTWITS_BASE}/trending/symbols.json")
        symbols = (data.get("symbols") or []) if isinstance(data, dict) else []
        return [s["symbol"] for s in symbols if isinstance(s, dict) and s.get("symbol")]

    def fetch_posts(self, limiter: RateLimiter, now: float) -> List[RawPost]:
        posts: List[RawPost] = []
        weight = source_weight(self.name)

        for symbol in self.trending_symbols(limiter)[: self.trending_limit]:
            if not limiter.consume(self.budget_key):
                print(f"[STOCKTWITS] Budget exhausted before {symbol}")
                break
            try:
                data = get_json(
                    self.name,
                    f"{STOCKTWITS_BASE}/streams/symbol/{symbol}.json",
                    params={"limit": MESSAGES_PER_SYMBOL},
                )
            except ProviderError as exc:
                # one bad stream shouldn't cost the other symbols
                print(f"[STOCKTWITS] Stream for {symbol} failed: {exc}")
                continue
            messages = (data.get("messages") or []) if isinstance(data, dict) else []
            for msg in messages:
                if not isinstance(msg, dict):
                    continue
                entities = msg.get("entities") or {}
                label = ((entities.get("sentiment") or {}).get("basic") or "").lower() or None
                likes = (msg.get("likes") or {}).get("total", 0)
                posts.append(
                    RawPost(
                        text=msg.get("body") or "",
                        created_at=parse_timestamp(msg.get("created_at"), now),
                        source=self.name,
                        channel=symbol,
                        source_weight=weight,
                        upvotes=likes,
                        label=label,
                        tickers=[symbol],
                    )
                )
            if self.pause_s:
                time.sleep(self.pause_s)

        return posts
