"""Account, positions and market clock queries for Alpaca."""

from typing import Any, Dict, List

from .client import request, trading_url


def get_account() -> Dict[str, Any]:
    """Return Alpaca account info (equity, buying power, cash)."""
    return request("GET", trading_url("/v2/account"))


def get_positions() -> List[Dict[str, Any]]:
    """Return all open positions."""
    data = request("GET", trading_url("/v2/positions"))
    return data if isinstance(data, list) else []


def get_clock() -> Dict[str, Any]:
    """Return the market clock (is_open, next_open, next_close)."""
    return request("GET", trading_url("/v2/clock"))
