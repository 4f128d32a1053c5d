from .refresh_clock import refresh_clock
from .gather_signals import gather_signals, research_signals
from .trade import analyst_pass, load_portfolio, manage_positions, research_buys

__all__ = [
    "refresh_clock",
    "gather_signals",
    "research_signals",
    "load_portfolio",
    "manage_positions",
    "research_buys",
    "analyst_pass",
]
