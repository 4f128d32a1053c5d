"""
Cross-source merging.

Every fresh per-source Signal for a symbol is folded into one CompositeSignal,
which is the ranked universe consumed by the research gate and the analyst.
"""

from typing import Dict, Iterable, List

from sentiment_agent.state import CompositeSignal, Signal

# Signals older than this are ignored by the merger and dropped from the cache
SIGNAL_MAX_AGE_SECONDS = 30 * 60


def source_count_bonus(source_count: int) -> float:
    if source_count >= 3:
        return 1.4
    if source_count == 2:
        return 1.2
    return 1.0


def is_fresh(signal: Signal, now: float, max_age_s: float = SIGNAL_MAX_AGE_SECONDS) -> bool:
    return now - signal.timestamp < max_age_s


def merge_signals(
    signals: Iterable[Signal],
    now: float,
    max_age_s: float = SIGNAL_MAX_AGE_SECONDS,
) -> List[CompositeSignal]:
    """Merge fresh signals per symbol and rank by quality score (descending)."""
    merged: Dict[str, CompositeSignal] = {}

    for signal in signals:
        if not is_fresh(signal, now, max_age_s):
            continue
        symbol = signal.symbol.upper()
        composite = merged.get(symbol)
        if composite is None:
            merged[symbol] = CompositeSignal(
                symbol=symbol,
                sentiment=signal.sentiment,
                raw_sentiment=signal.raw_sentiment,
                volume=signal.volume,
                sources={signal.source_key},
                best_signal=signal,
            )
            continue

        composite.sentiment += signal.sentiment
        composite.raw_sentiment = (
            composite.raw_sentiment * composite.merged_count + signal.raw_sentiment
        ) / (composite.merged_count + 1)
        composite.merged_count += 1
        composite.volume += signal.volume
        composite.sources.add(signal.source_key)
        if abs(signal.sentiment) > abs(composite.best_signal.sentiment):
            composite.best_signal = signal

    for composite in merged.values():
        best = composite.best_signal
        composite.quality_score = (
            abs(composite.sentiment)
            * best.source_weight
            * best.freshness
            * source_count_bonus(len(composite.sources))
        )

    return sorted(merged.values(), key=lambda c: c.quality_score, reverse=True)


def refresh_signal_cache(
    previous: Iterable[Signal],
    gathered: Iterable[Signal],
    now: float,
    max_age_s: float = SIGNAL_MAX_AGE_SECONDS,
) -> List[Signal]:
    """Build the next signal cache.

    Everything gathered this cycle replaces its (symbol, source) predecessor.
    Previous signals for pairs that were not refreshed stay while still fresh,
    so one failing source doesn't blank out its contribution.
    """
    gathered = list(gathered)
    refreshed = {(s.symbol.upper(), s.source) for s in gathered}
    carried = [
        s for s in previous
        if (s.symbol.upper(), s.source) not in refreshed and is_fresh(s, now, max_age_s)
    ]
    return gathered + carried
