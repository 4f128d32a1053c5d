"""
Signal pipeline: score posts, aggregate per source, merge across sources,
and gate candidates for LLM attention.
"""

from .scorer import RawPost, ScoredMention, SignalScorer, extract_tickers, time_decay
from .aggregator import MIN_MENTIONS, aggregate_mentions
from .merger import SIGNAL_MAX_AGE_SECONDS, merge_signals, refresh_signal_cache, source_count_bonus
from .gates import AnalystCandidate, analyst_candidates, research_candidates

__all__ = [
    "RawPost",
    "ScoredMention",
    "SignalScorer",
    "extract_tickers",
    "time_decay",
    "MIN_MENTIONS",
    "aggregate_mentions",
    "SIGNAL_MAX_AGE_SECONDS",
    "merge_signals",
    "refresh_signal_cache",
    "source_count_bonus",
    "AnalystCandidate",
    "analyst_candidates",
    "research_candidates",
]
