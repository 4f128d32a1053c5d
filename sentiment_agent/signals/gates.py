"""
Candidate gates.

Two independent filters decide what gets LLM attention:

- ``research_candidates``: composite signals not yet held whose *raw*
  sentiment clears ``min_sentiment_score``.
  Anything below it never costs a research call.
- ``analyst_candidates``: per-source signals averaged per symbol and kept at
  *half* the threshold.

Neither threshold is derived from the other.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from sentiment_agent.state import CompositeSignal, Signal

DEFAULT_RESEARCH_BATCH_LIMIT = 10
ANALYST_CANDIDATE_LIMIT = 10
ANALYST_THRESHOLD_FACTOR = 0.5


@dataclass
class AnalystCandidate:
    symbol: str
    avg_sentiment: float
    signal_count: int
    volume: int
    sources: List[str] = field(default_factory=list)
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "avg_sentiment": round(self.avg_sentiment, 3),
            "signal_count": self.signal_count,
            "volume": self.volume,
            "sources": self.sources,
            "reasons": self.reasons,
        }


def research_candidates(
    composites: Iterable[CompositeSignal],
    held_symbols: Set[str],
    min_sentiment_score: float,
    limit: int = DEFAULT_RESEARCH_BATCH_LIMIT,
) -> List[CompositeSignal]:
    held = {s.upper() for s in held_symbols}
    accepted = [
        c for c in composites
        if c.symbol.upper() not in held and c.raw_sentiment >= min_sentiment_score
    ]
    accepted.sort(key=lambda c: c.sentiment, reverse=True)
    return accepted[:limit]


def analyst_candidates(
    signals: Iterable[Signal],
    min_sentiment_score: float,
    limit: int = ANALYST_CANDIDATE_LIMIT,
) -> List[AnalystCandidate]:
    grouped: Dict[str, List[Signal]] = {}
    for signal in signals:
        grouped.setdefault(signal.symbol.upper(), []).append(signal)

    threshold = ANALYST_THRESHOLD_FACTOR * min_sentiment_score
    candidates: List[AnalystCandidate] = []
    for symbol, group in grouped.items():
        avg = sum(s.sentiment for s in group) / len(group)
        if avg < threshold:
            continue
        candidates.append(
            AnalystCandidate(
                symbol=symbol,
                avg_sentiment=avg,
                signal_count=len(group),
                volume=sum(s.volume for s in group),
                sources=sorted({s.source_key for s in group}),
                reasons=[s.reason for s in group],
            )
        )

    candidates.sort(key=lambda c: c.avg_sentiment, reverse=True)
    return candidates[:limit]
