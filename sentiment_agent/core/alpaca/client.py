"""HTTP client infrastructure for Alpaca API."""

from typing import Any, Dict, Optional

import requests

from sentiment_agent.config import (
    ALPACA_API_KEY,
    ALPACA_BASE_URL,
    ALPACA_DATA_URL,
    ALPACA_SECRET_KEY,
)
from sentiment_agent.errors import ProviderError

_TIMEOUT = 10


def get_headers() -> dict:
    """Return HTTP headers with Alpaca API credentials."""
    return {
        "APCA-API-KEY-ID": ALPACA_API_KEY,
        "APCA-API-SECRET-KEY": ALPACA_SECRET_KEY,
        "Content-Type": "application/json",
    }


def trading_url(path: str) -> str:
    """Build URL for trading API endpoint."""
    return f"{ALPACA_BASE_URL}{path}"


def data_url(path: str) -> str:
    """Build URL for data API endpoint."""
    return f"{ALPACA_DATA_URL}{path}"


def request(
    method: str,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    json: Optional[Dict[str, Any]] = None,
) -> Any:
    """Issue an Alpaca request and return the decoded JSON body.

    Raises:
        ProviderError: transport failure, non-2xx status or an undecodable body
    """
    try:
        resp = requests.request(
            method,
            url,
            headers=get_headers(),
            params=params,
            json=json,
            timeout=_TIMEOUT,
        )
    except requests.RequestException as exc:
        raise ProviderError("alpaca", str(exc)) from exc

    if not resp.ok:
        raise ProviderError("alpaca", resp.text[:300], status=resp.status_code)
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError as exc:
        raise ProviderError("alpaca", f"invalid JSON: {exc}", status=resp.status_code) from exc
