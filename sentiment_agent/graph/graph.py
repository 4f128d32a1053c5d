"""
LangGraph workflow for one scheduler tick.

REFRESH_CLOCK ─┬─(data interval elapsed)─→ GATHER_SIGNALS → RESEARCH_SIGNALS ─┐
               │                                                             │
               └─(else)──────────────────────────────────────────────────────┤
                                                                             ▼
        (market open & analyst interval elapsed) → LOAD_PORTFOLIO → MANAGE_POSITIONS
                                                   → RESEARCH_BUYS → ANALYST_PASS → END
"""

from typing import Any, Callable, Dict

from langgraph.graph import END, StateGraph

from .consts import (
    ANALYST_PASS,
    GATHER_SIGNALS,
    LOAD_PORTFOLIO,
    MANAGE_POSITIONS,
    REFRESH_CLOCK,
    RESEARCH_BUYS,
    RESEARCH_SIGNALS,
)
from .nodes import (
    analyst_pass,
    gather_signals,
    load_portfolio,
    manage_positions,
    refresh_clock,
    research_buys,
    research_signals,
)
from .pipeline import CyclePipeline
from .state import CycleState


def _bind(node: Callable[[CycleState, CyclePipeline], Dict[str, Any]], pipeline: CyclePipeline):
    def run(state: CycleState) -> Dict[str, Any]:
        return node(state, pipeline)

    return run


def _after_clock(state: CycleState) -> str:
    if state.get("run_data_gather"):
        return GATHER_SIGNALS
    if state.get("run_analyst"):
        return LOAD_PORTFOLIO
    return END


def _after_research(state: CycleState) -> str:
    return LOAD_PORTFOLIO if state.get("run_analyst") else END


def _after_portfolio(state: CycleState) -> str:
    return MANAGE_POSITIONS if state.get("account") is not None else END


def build_cycle_graph(pipeline: CyclePipeline):
    """Compile the tick workflow with *pipeline* bound into every node."""
    workflow = StateGraph(CycleState)

    # Add nodes
    workflow.add_node(REFRESH_CLOCK, _bind(refresh_clock, pipeline))
    workflow.add_node(GATHER_SIGNALS, _bind(gather_signals, pipeline))
    workflow.add_node(RESEARCH_SIGNALS, _bind(research_signals, pipeline))
    workflow.add_node(LOAD_PORTFOLIO, _bind(load_portfolio, pipeline))
    workflow.add_node(MANAGE_POSITIONS, _bind(manage_positions, pipeline))
    workflow.add_node(RESEARCH_BUYS, _bind(research_buys, pipeline))
    workflow.add_node(ANALYST_PASS, _bind(analyst_pass, pipeline))

    workflow.set_entry_point(REFRESH_CLOCK)
    workflow.add_conditional_edges(
        REFRESH_CLOCK,
        _after_clock,
        {GATHER_SIGNALS: GATHER_SIGNALS, LOAD_PORTFOLIO: LOAD_PORTFOLIO, END: END},
    )
    workflow.add_edge(GATHER_SIGNALS, RESEARCH_SIGNALS)
    workflow.add_conditional_edges(
        RESEARCH_SIGNALS,
        _after_research,
        {LOAD_PORTFOLIO: LOAD_PORTFOLIO, END: END},
    )
    workflow.add_conditional_edges(
        LOAD_PORTFOLIO,
        _after_portfolio,
        {MANAGE_POSITIONS: MANAGE_POSITIONS, END: END},
    )
    workflow.add_edge(MANAGE_POSITIONS, RESEARCH_BUYS)
    workflow.add_edge(RESEARCH_BUYS, ANALYST_PASS)
    workflow.add_edge(ANALYST_PASS, END)

    return workflow.compile()
