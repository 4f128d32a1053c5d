"""Typed records exchanged with the broker / market-data providers."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


def _num(value: Any, default: float = 0.0) -> float:
    """Alpaca serialises most numbers as strings."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass
class Account:
    cash: float
    equity: float
    buying_power: float

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Account":
        return cls(
            cash=_num(data.get("cash")),
            equity=_num(data.get("equity")),
            buying_power=_num(data.get("buying_power")),
        )


@dataclass
class Position:
    symbol: str
    qty: float
    market_value: float
    unrealized_pl: float
    current_price: float
    cost_basis: float

    @property
    def pl_pct(self) -> float:
        """Unrealised P/L as a percentage of the amount paid."""
        basis = self.market_value - self.unrealized_pl
        if basis == 0:
            return 0.0
        return self.unrealized_pl / basis * 100

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Position":
        return cls(
            symbol=str(data.get("symbol", "")).upper(),
            qty=_num(data.get("qty")),
            market_value=_num(data.get("market_value")),
            unrealized_pl=_num(data.get("unrealized_pl")),
            current_price=_num(data.get("current_price")),
            cost_basis=_num(data.get("cost_basis")),
        )


@dataclass
class MarketClock:
    is_open: bool
    next_open: Optional[str] = None
    next_close: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "MarketClock":
        return cls(
            is_open=bool(data.get("is_open", False)),
            next_open=data.get("next_open"),
            next_close=data.get("next_close"),
        )


@dataclass
class Quote:
    bid_price: float
    ask_price: float

    @property
    def price(self) -> float:
        """Best-effort single price: ask, else bid, else 0."""
        return self.ask_price or self.bid_price or 0.0


@dataclass
class OrderRequest:
    symbol: str
    side: str                         # "buy" | "sell"
    notional: Optional[float] = None
    qty: Optional[float] = None
    type: str = "market"
    time_in_force: str = "day"

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "symbol": self.symbol,
            "side": self.side,
            "type": self.type,
            "time_in_force": self.time_in_force,
        }
        if self.notional is not None:
            payload["notional"] = f"{self.notional:.2f}"
        if self.qty is not None:
            payload["qty"] = str(self.qty)
        return payload


@dataclass
class Order:
    id: str
    status: str
    symbol: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Order":
        return cls(
            id=str(data.get("id", "unknown")),
            status=str(data.get("status", "unknown")),
            symbol=str(data.get("symbol", "")),
        )
