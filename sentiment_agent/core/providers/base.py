"""Abstract base classes for broker and market data providers."""

from abc import ABC, abstractmethod
from typing import List, Optional

from .types import Account, MarketClock, Order, OrderRequest, Position, Quote


class TradingProvider(ABC):
    """Brokerage account / order operations.

    Implementations raise ProviderError on any failed call; callers decide
    whether that failure is fatal for the current step.
    """

    @abstractmethod
    def get_account(self) -> Account:
        pass

    @abstractmethod
    def get_positions(self) -> List[Position]:
        pass

    @abstractmethod
    def get_clock(self) -> MarketClock:
        pass

    @abstractmethod
    def create_order(self, order: OrderRequest) -> Order:
        pass

    @abstractmethod
    def close_position(self, symbol: str) -> Order:
        pass


class QuoteProvider(ABC):
    """Best-effort latest quote source."""

    @abstractmethod
    def get_quote(self, symbol: str) -> Optional[Quote]:
        """Latest bid/ask for *symbol*, or None when the price is unknown."""
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return provider name for logging."""
        pass
