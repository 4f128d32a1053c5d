"""Order execution for Alpaca."""

from typing import Any, Dict
from urllib.parse import quote

from .client import request, trading_url


def submit_order(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Submit an order on Alpaca.

    Parameters
    ----------
    payload : dict – symbol, side, type, time_in_force and either
              ``notional`` (dollar amount) or ``qty`` (shares)

    Returns
    -------
    dict  – the Alpaca order object
    """
    return request("POST", trading_url("/v2/orders"), json=payload)


def close_position(ticker: str) -> Dict[str, Any]:
    """Liquidate the whole position in *ticker* at market."""
    return request("DELETE", trading_url(f"/v2/positions/{quote(ticker, safe='')}"))
