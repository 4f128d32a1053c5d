"""yfinance implementation of QuoteProvider."""

from typing import Optional

import yfinance as yf

from .base import QuoteProvider
from .types import Quote


class YFinanceQuoteProvider(QuoteProvider):
    """Last-trade price from yfinance, used when Alpaca has no quote."""

    def get_quote(self, symbol: str) -> Optional[Quote]:
        """
        yfinance has no live bid/ask on the free feed, so the last price is
        reported on both sides. Tries fast_info first, then the last daily bar.
        """
        stock = yf.Ticker(symbol)

        try:
            last = stock.fast_info.get("lastPrice")
            if last:
                return Quote(bid_price=float(last), ask_price=float(last))
        except Exception:
            pass

        hist = stock.history(period="5d", interval="1d")
        if len(hist) >= 1:
            last = float(hist.iloc[-1]["Close"])
            if last > 0:
                return Quote(bid_price=last, ask_price=last)
        return None

    def get_name(self) -> str:
        return "yfinance"
