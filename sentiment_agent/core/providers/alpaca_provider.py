"""Alpaca implementations of TradingProvider and QuoteProvider."""

from typing import List, Optional

from sentiment_agent.core import alpaca
from sentiment_agent.core.cache import CACHE_TTL_QUOTE, InMemoryCache
from sentiment_agent.core.rate_limiter import RateLimiter
from sentiment_agent.errors import ProviderError

from .base import QuoteProvider, TradingProvider
from .types import Account, MarketClock, Order, OrderRequest, Position, Quote


class AlpacaTradingProvider(TradingProvider):
    """Alpaca trading API (paper or live, per ALPACA_BASE_URL)."""

    def get_account(self) -> Account:
        return Account.from_api(alpaca.get_account())

    def get_positions(self) -> List[Position]:
        return [Position.from_api(p) for p in alpaca.get_positions()]

    def get_clock(self) -> MarketClock:
        return MarketClock.from_api(alpaca.get_clock())

    def create_order(self, order: OrderRequest) -> Order:
        return Order.from_api(alpaca.submit_order(order.to_payload()))

    def close_position(self, symbol: str) -> Order:
        return Order.from_api(alpaca.close_position(symbol))


class AlpacaQuoteProvider(QuoteProvider):
    """Latest quotes from Alpaca's data API, cached briefly and budgeted per cycle."""

    def __init__(
        self,
        limiter: Optional[RateLimiter] = None,
        cache: Optional[InMemoryCache] = None,
    ):
        self._limiter = limiter
        self._cache = cache or InMemoryCache()

    def get_quote(self, symbol: str) -> Optional[Quote]:
        def _fetch() -> Optional[Quote]:
            if self._limiter is not None and not self._limiter.consume("alpaca"):
                raise ProviderError("alpaca", "per-cycle budget exhausted")
            raw = alpaca.get_latest_quote(symbol)
            quote = Quote(
                bid_price=float(raw.get("bp") or 0.0),
                ask_price=float(raw.get("ap") or 0.0),
            )
            return quote if quote.price > 0 else None

        return self._cache.get_or_fetch(f"quote:{symbol}", _fetch, CACHE_TTL_QUOTE)

    def get_name(self) -> str:
        return "Alpaca"
