"""
Nodes: the trading pass (market open, analyst interval elapsed).

load_portfolio → manage_positions → research_buys → analyst_pass

Take-profit / stop-loss / LLM exits always run before any buy, and research
buys always run before analyst buys.
"""

from typing import Any, Dict

from sentiment_agent.activity import log_activity
from sentiment_agent.errors import ProviderError
from sentiment_agent.graph.pipeline import CyclePipeline
from sentiment_agent.graph.state import CycleState
from sentiment_agent.signals import analyst_candidates
from sentiment_agent.signals.merger import is_fresh


def _by_symbol(state: CycleState) -> Dict[str, Any]:
    return {c.symbol: c for c in state.get("composites", [])}


def load_portfolio(state: CycleState, pipeline: CyclePipeline) -> Dict[str, Any]:
    print("---LOAD PORTFOLIO---")
    try:
        account = pipeline.trading.get_account()
        positions = pipeline.trading.get_positions()
    except ProviderError as exc:
        log_activity("System", "trading_skipped", reason="Account unavailable", message=str(exc))
        return {"account": None, "positions": []}

    print(f"[PORTFOLIO] Cash ${account.cash:,.2f}, {len(positions)} open position(s)")
    return {"account": account, "positions": positions}


def manage_positions(state: CycleState, pipeline: CyclePipeline) -> Dict[str, Any]:
    print("---MANAGE POSITIONS---")
    sold = pipeline.execution.manage_positions(
        state["agent_state"],
        state.get("positions", []),
        _by_symbol(state),
        state["now"],
    )
    return {"sold": list(state.get("sold", [])) + sold}


def research_buys(state: CycleState, pipeline: CyclePipeline) -> Dict[str, Any]:
    print("---RESEARCH BUYS---")
    sold = set(state.get("sold", []))
    remaining = [p for p in state.get("positions", []) if p.symbol not in sold]
    bought = pipeline.execution.research_buys(
        state["agent_state"],
        state["account"],
        remaining,
        _by_symbol(state),
        state["now"],
    )
    return {"bought": list(state.get("bought", [])) + bought}


def analyst_pass(state: CycleState, pipeline: CyclePipeline) -> Dict[str, Any]:
    print("---ANALYST PASS---")
    agent = state["agent_state"]
    now = state["now"]
    sold = list(state.get("sold", []))
    bought = list(state.get("bought", []))

    if pipeline.analyst is not None:
        fresh = [s for s in agent.signal_cache if is_fresh(s, now)]
        candidates = analyst_candidates(fresh, agent.config.min_sentiment_score)
        remaining = [p for p in state.get("positions", []) if p.symbol not in set(sold)]
        outcome = pipeline.analyst.run(
            agent,
            state["account"],
            remaining,
            candidates,
            _by_symbol(state),
            now,
            bought_this_cycle=set(bought),
            sold_this_cycle=set(sold),
        )
        sold += outcome.sold
        bought += outcome.bought

    agent.last_analyst_run = now
    return {"sold": sold, "bought": bought}
