"""
Finnhub fundamentals (market cap, P/E, 52-week range …) for research prompts.

Best-effort: a missing key, an exhausted budget or a failed request all
return None and the research prompt simply goes without fundamentals.
"""

from dataclasses import dataclass
from typing import Optional

import requests

from sentiment_agent.config import FINNHUB_API_KEY
from sentiment_agent.core.cache import CACHE_TTL_FUNDAMENTALS, InMemoryCache
from sentiment_agent.core.rate_limiter import RateLimiter

FINNHUB_BASE_URL = "https://finnhub.io/api/v1"
_TIMEOUT = 10


@dataclass
class Fundamentals:
    symbol: str
    market_cap_musd: Optional[float] = None
    pe_ratio: Optional[float] = None
    dividend_yield_pct: Optional[float] = None
    week52_high: Optional[float] = None
    week52_low: Optional[float] = None
    avg_volume_10d_m: Optional[float] = None
    beta: Optional[float] = None

    @classmethod
    def from_metric(cls, symbol: str, metric: dict) -> "Fundamentals":
        return cls(
            symbol=symbol,
            market_cap_musd=metric.get("marketCapitalization"),
            pe_ratio=metric.get("peBasicExclExtraTTM"),
            dividend_yield_pct=metric.get("dividendYieldIndicatedAnnual"),
            week52_high=metric.get("52WeekHigh"),
            week52_low=metric.get("52WeekLow"),
            avg_volume_10d_m=metric.get("10DayAverageTradingVolume"),
            beta=metric.get("beta"),
        )

    def summary(self) -> str:
        """One-line human readable summary for prompts."""
        parts = []
        if self.market_cap_musd is not None:
            parts.append(f"market cap ${self.market_cap_musd:,.0f}M")
        if self.pe_ratio is not None:
            parts.append(f"P/E {self.pe_ratio:.1f}")
        if self.week52_low is not None and self.week52_high is not None:
            parts.append(f"52w range ${self.week52_low:.2f}–${self.week52_high:.2f}")
        if self.avg_volume_10d_m is not None:
            parts.append(f"10d avg volume {self.avg_volume_10d_m:.1f}M")
        if self.beta is not None:
            parts.append(f"beta {self.beta:.2f}")
        if self.dividend_yield_pct:
            parts.append(f"dividend yield {self.dividend_yield_pct:.2f}%")
        return ", ".join(parts) or "no fundamentals reported"


class FinnhubFundamentals:
    """Metrics lookup with a 15 minute cache and the ``finnhub`` per-cycle budget."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        limiter: Optional[RateLimiter] = None,
        cache: Optional[InMemoryCache] = None,
    ):
        self.api_key = FINNHUB_API_KEY if api_key is None else api_key
        self._limiter = limiter
        self._cache = cache or InMemoryCache()

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def get_metrics(self, symbol: str) -> Optional[Fundamentals]:
        if not self.api_key:
            return None
        return self._cache.get_or_fetch(
            f"finnhub:metric:{symbol}",
            lambda: self._fetch(symbol),
            CACHE_TTL_FUNDAMENTALS,
        )

    def _fetch(self, symbol: str) -> Optional[Fundamentals]:
        if self._limiter is not None and not self._limiter.consume("finnhub"):
            print(f"[FINNHUB] Budget exhausted – skipping {symbol}")
            return None
        try:
            resp = requests.get(
                f"{FINNHUB_BASE_URL}/stock/metric",
                params={"symbol": symbol, "metric": "all", "token": self.api_key},
                headers={"Accept": "application/json"},
                timeout=_TIMEOUT,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            print(f"[FINNHUB] Metrics for {symbol} failed: {exc}")
            return None

        metric = data.get("metric") if isinstance(data, dict) else None
        if not isinstance(metric, dict) or not metric:
            print(f"[FINNHUB] No metric data for {symbol}")
            return None
        return Fundamentals.from_metric(symbol, metric)
