"""
Alpaca broker integration, split into focused submodules.

All functions are re-exported here:
  from sentiment_agent.core.alpaca import get_account
"""

from .account import get_account, get_positions, get_clock
from .market_data import get_latest_quote
from .orders import submit_order, close_position

__all__ = [
    # Account
    "get_account",
    "get_positions",
    "get_clock",
    # Market data
    "get_latest_quote",
    # Orders
    "submit_order",
    "close_position",
]
