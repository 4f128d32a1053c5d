"""
Quiver Quantitative feeds: WallStreetBets mentions and congressional trades.

Quiver already aggregates per ticker, so rows are turned into Signals
directly instead of going through the per-post scorer.
"""

from abc import abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sentiment_agent.config import QUIVER_API_TOKEN
from sentiment_agent.core.rate_limiter import RateLimiter
from sentiment_agent.signals.aggregator import MIN_MENTIONS
from sentiment_agent.signals.scorer import time_decay
from sentiment_agent.state import Signal

from .base import SignalSource, get_json, source_weight

QUIVER_BASE = "https://api.quiverquant.com/beta"

# Congressional trades are disclosed days or weeks late
CONGRESS_LOOKBACK_DAYS = 30
CONGRESS_HALF_LIFE_DAYS = 7
CONGRESS_MIN_TRADES = 3


def _row_time(row: Dict[str, Any], date_key: str = "Date") -> Optional[float]:
    """Quiver rows carry a YYYY-MM-DD date and sometimes ``Time``."""
    date = row.get(date_key)
    if not date:
        return None
    attempts = [(str(date)[:10], "%Y-%m-%d")]
    if row.get("Time"):
        attempts.insert(0, (f"{date} {row['Time']}", "%Y-%m-%d %H:%M:%S"))
    for text, fmt in attempts:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc).timestamp()
        except ValueError:
            continue
    return None


class _QuiverFeed(SignalSource):
    """Shared auth and budget handling for Quiver's ``/live`` endpoints."""

    budget_key = "quiver"
    path = ""

    def __init__(self, token: Optional[str] = None):
        self.token = QUIVER_API_TOKEN if token is None else token

    def is_configured(self) -> bool:
        return bool(self.token)

    def fetch_rows(self, limiter: RateLimiter) -> List[Dict[str, Any]]:
        if not self.token or not limiter.consume(self.budget_key):
            return []
        data = get_json(
            "quiver",
            f"{QUIVER_BASE}{self.path}",
            headers={"Authorization": f"Token {self.token}", "Accept": "application/json"},
        )
        return [r for r in data if isinstance(r, dict)] if isinstance(data, list) else []

    def collect(self, limiter: RateLimiter, now: float) -> List[Signal]:
        return self.rows_to_signals(self.fetch_rows(limiter), now)

    @abstractmethod
    def rows_to_signals(self, rows: List[Dict[str, Any]], now: float) -> List[Signal]:
        """Turn raw endpoint rows into per-ticker Signals."""


class QuiverSource(_QuiverFeed):
    name = "quiver"
    path = "/live/wallstreetbets"

    def rows_to_signals(self, rows: List[Dict[str, Any]], now: float) -> List[Signal]:
        weight = source_weight(self.name)
        latest: Dict[str, Signal] = {}

        for row in rows:
            ticker = str(row.get("Ticker") or "").upper()
            try:
                mentions = int(row.get("Mentions") or 0)
                bullish = int(row.get("Bullish") or 0)
                bearish = int(row.get("Bearish") or 0)
            except (TypeError, ValueError):
                continue
            if not ticker or mentions < MIN_MENTIONS:
                continue

            labelled = bullish + bearish
            sentiment = (bullish - bearish) / labelled if labelled else 0.0
            posted = _row_time(row)
            freshness = time_decay((now - posted) / 60.0) if posted is not None else 1.0

            signal = Signal(
                symbol=ticker,
                source=self.name,
                source_detail="wallstreetbets",
                raw_sentiment=sentiment,
                weighted_sentiment=sentiment,
                volume=mentions,
                bullish_count=bullish,
                bearish_count=bearish,
                timestamp=now,
                freshness=freshness,
                source_weight=weight,
                reason=f"Quiver WSB: {mentions} mentions, {bullish}B/{bearish}b",
            )
            # the feed lists several rows per ticker; keep the freshest
            current = latest.get(ticker)
            if current is None or signal.freshness > current.freshness:
                latest[ticker] = signal

        return sorted(latest.values(), key=lambda s: s.weighted_sentiment, reverse=True)


class CongressTradingSource(_QuiverFeed):
    """Recent congressional stock trades: purchases count bullish, sales bearish."""

    name = "congress"
    path = "/live/congresstrading"

    def rows_to_signals(self, rows: List[Dict[str, Any]], now: float) -> List[Signal]:
        cutoff = now - CONGRESS_LOOKBACK_DAYS * 86400
        tally: Dict[str, Dict[str, Any]] = {}

        for row in rows:
            ticker = str(row.get("Ticker") or "").upper()
            kind = str(row.get("Type") or row.get("Transaction") or "").lower()
            traded = _row_time(row, "TransactionDate") or _row_time(row, "ReportDate")
            if not ticker or traded is None or traded < cutoff:
                continue
            if kind.startswith("purchase"):
                side = "buys"
            elif kind.startswith("sale"):
                side = "sells"
            else:
                continue
            entry = tally.setdefault(ticker, {"buys": 0, "sells": 0, "latest": traded, "members": set()})
            entry[side] += 1
            entry["latest"] = max(entry["latest"], traded)
            if row.get("Representative"):
                entry["members"].add(str(row["Representative"]))

        weight = source_weight(self.name)
        signals = []
        for ticker, entry in tally.items():
            buys, sells = entry["buys"], entry["sells"]
            trades = buys + sells
            if trades < CONGRESS_MIN_TRADES:
                continue
            sentiment = (buys - sells) / trades
            signals.append(
                Signal(
                    symbol=ticker,
                    source=self.name,
                    source_detail="quiver",
                    raw_sentiment=sentiment,
                    weighted_sentiment=sentiment,
                    volume=trades,
                    bullish_count=buys,
                    bearish_count=sells,
                    timestamp=now,
                    freshness=time_decay(
                        (now - entry["latest"]) / 60.0, CONGRESS_HALF_LIFE_DAYS * 1440
                    ),
                    source_weight=weight,
                    reason=(
                        f"Congress: {buys} purchase(s), {sells} sale(s) by "
                        f"{len(entry['members']) or '?'} member(s) in {CONGRESS_LOOKBACK_DAYS}d"
                    ),
                )
            )

        return sorted(signals, key=lambda s: s.weighted_sentiment, reverse=True)
