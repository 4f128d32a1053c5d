"""Real-time market data queries for Alpaca."""

from typing import Any, Dict

from .client import data_url, request


def get_latest_quote(ticker: str) -> Dict[str, Any]:
    """
    Get the latest quote (bid/ask) for *ticker* from Alpaca's data API.
    Returns dict with keys like 'ap' (ask price), 'bp' (bid price), etc.
    """
    data = request("GET", data_url(f"/v2/stocks/{ticker}/quotes/latest"))
    return data.get("quote", data)
