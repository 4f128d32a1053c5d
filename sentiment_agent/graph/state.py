"""
Graph state definition for one scheduler tick.
Flows through every node in the cycle graph.
"""

from typing import Dict, List, Optional, TypedDict

from sentiment_agent.core.providers import Account, Position
from sentiment_agent.state import AgentState, CompositeSignal, ResearchResult


class CycleState(TypedDict, total=False):
    """
    Attributes:
        agent_state:      The agent's aggregate root; nodes mutate it in place.
        now:              Tick timestamp (epoch seconds), shared by every node.
        market_open:      Result of the clock refresh (False when it failed).
        run_data_gather:  Data-gather interval elapsed this tick.
        run_analyst:      Market open and analyst interval elapsed this tick.
        composites:       Cross-source merge of the signal cache, best first.
        research_results: Verdicts for this tick's research candidates.
        account:          Account snapshot (None when it couldn't be fetched).
        positions:        Open positions at the start of the trading pass.
        sold:             Symbols sold this tick (position management + analyst).
        bought:           Symbols bought this tick (research path + analyst).
    """

    agent_state: AgentState
    now: float
    market_open: bool
    run_data_gather: bool
    run_analyst: bool
    composites: List[CompositeSignal]
    research_results: Dict[str, ResearchResult]
    account: Optional[Account]
    positions: List[Position]
    sold: List[str]
    bought: List[str]
