"""Trading decisions: sizing, execution and the analyst pass."""

from .sizing import MIN_POSITION_SIZE, is_economical, position_size
from .execution import LLM_SELL_CONFIDENCE, MAX_RESEARCH_BUYS_PER_CYCLE, ExecutionEngine
from .analyst import AnalystEngine, AnalystOutcome

__all__ = [
    "MIN_POSITION_SIZE",
    "is_economical",
    "position_size",
    "LLM_SELL_CONFIDENCE",
    "MAX_RESEARCH_BUYS_PER_CYCLE",
    "ExecutionEngine",
    "AnalystEngine",
    "AnalystOutcome",
]
