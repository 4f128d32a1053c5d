"""Node / edge name constants for the cycle graph."""

REFRESH_CLOCK = "refresh_clock"
GATHER_SIGNALS = "gather_signals"
RESEARCH_SIGNALS = "research_signals"
LOAD_PORTFOLIO = "load_portfolio"
MANAGE_POSITIONS = "manage_positions"
RESEARCH_BUYS = "research_buys"
ANALYST_PASS = "analyst_pass"
