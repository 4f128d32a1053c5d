"""
Nodes: Gather per-source signals, merge them across sources, then research
the candidates that clear the research gate.
"""

from typing import Any, Dict, List, Set

from sentiment_agent.activity import log_activity
from sentiment_agent.errors import ProviderError
from sentiment_agent.graph.pipeline import CyclePipeline
from sentiment_agent.graph.state import CycleState
from sentiment_agent.signals import merge_signals, refresh_signal_cache, research_candidates
from sentiment_agent.state import Signal


def gather_signals(state: CycleState, pipeline: CyclePipeline) -> Dict[str, Any]:
    print("---GATHER SIGNALS---")
    agent = state["agent_state"]
    now = state["now"]
    log_activity("System", "gathering_data")

    gathered: List[Signal] = []
    for source in pipeline.sources:
        signals = source.fetch(pipeline.limiter, now)
        print(f"[GATHER] {source.name}: {len(signals)} signal(s)")
        gathered.extend(signals)

    agent.signal_cache = refresh_signal_cache(agent.signal_cache, gathered, now)
    composites = merge_signals(agent.signal_cache, now)
    return {"composites": composites}


def _held_symbols(pipeline: CyclePipeline, fallback: Set[str]) -> Set[str]:
    try:
        return {p.symbol for p in pipeline.trading.get_positions()}
    except ProviderError as exc:
        log_activity("Research", "positions_unavailable", message=str(exc))
        return set(fallback)


def research_signals(state: CycleState, pipeline: CyclePipeline) -> Dict[str, Any]:
    print("---RESEARCH SIGNALS---")
    agent = state["agent_state"]
    now = state["now"]
    composites = state.get("composites", [])

    results = {}
    if pipeline.researcher is not None and composites:
        held = _held_symbols(pipeline, set(agent.position_entries))
        candidates = research_candidates(
            composites,
            held,
            agent.config.min_sentiment_score,
            agent.config.research_batch_limit,
        )
        results = pipeline.researcher.research(candidates, agent, now)

    agent.last_data_gather_run = now
    log_activity(
        "System",
        "data_gathered",
        signals=len(agent.signal_cache),
        symbols=len(composites),
        researched=len(results),
    )
    return {"research_results": results}
