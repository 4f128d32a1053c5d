"""
Broker and market data providers.

Quote lookups go through a fallback chain: Alpaca first, then yfinance
(when USE_YFINANCE_FALLBACK is on).
"""

from typing import Optional

from sentiment_agent.config import USE_YFINANCE_FALLBACK
from sentiment_agent.core.rate_limiter import RateLimiter

from .base import QuoteProvider, TradingProvider
from .types import Account, MarketClock, Order, OrderRequest, Position, Quote
from .alpaca_provider import AlpacaQuoteProvider, AlpacaTradingProvider
from .composite_provider import CompositeQuoteProvider


def create_quote_provider(limiter: Optional[RateLimiter] = None) -> QuoteProvider:
    """Create the quote provider chain based on configuration.

    Returns:
        Alpaca → yfinance composite (Alpaca alone when the fallback is off),
        wrapped so lookups never raise
    """
    providers: list[QuoteProvider] = [AlpacaQuoteProvider(limiter=limiter)]

    if USE_YFINANCE_FALLBACK:
        from .yfinance_provider import YFinanceQuoteProvider

        providers.append(YFinanceQuoteProvider())

    return CompositeQuoteProvider(providers)


__all__ = [
    "TradingProvider",
    "QuoteProvider",
    "Account",
    "MarketClock",
    "Order",
    "OrderRequest",
    "Position",
    "Quote",
    "AlpacaTradingProvider",
    "AlpacaQuoteProvider",
    "CompositeQuoteProvider",
    "create_quote_provider",
]
