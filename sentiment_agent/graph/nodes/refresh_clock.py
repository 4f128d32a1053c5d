"""
Node: Refresh the market clock and decide which passes run this tick.
"""

from typing import Any, Dict

from sentiment_agent.activity import log_activity
from sentiment_agent.errors import ProviderError
from sentiment_agent.graph.pipeline import CyclePipeline
from sentiment_agent.graph.state import CycleState
from sentiment_agent.signals import merge_signals


def refresh_clock(state: CycleState, pipeline: CyclePipeline) -> Dict[str, Any]:
    print("---REFRESH CLOCK---")
    agent = state["agent_state"]
    now = state["now"]
    cfg = agent.config

    try:
        market_open = pipeline.trading.get_clock().is_open
    except ProviderError as exc:
        # unknown clock: trade nothing, still gather data
        log_activity("System", "clock_error", message=str(exc))
        market_open = False

    run_data_gather = now - agent.last_data_gather_run >= cfg.data_poll_interval_s
    run_analyst = market_open and now - agent.last_analyst_run >= cfg.analyst_interval_s

    if not market_open:
        print("[CLOCK] Market closed – trading pass skipped")

    return {
        "market_open": market_open,
        "run_data_gather": run_data_gather,
        "run_analyst": run_analyst,
        # universe from the cached signals; replaced if data is gathered this tick
        "composites": merge_signals(agent.signal_cache, now),
        "sold": [],
        "bought": [],
    }
