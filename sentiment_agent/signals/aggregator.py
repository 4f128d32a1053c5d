"""Fold per-post contributions into one Signal per ticker per source."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from sentiment_agent.state import Signal

from .scorer import ScoredMention

# Tickers with fewer mentions than this in one source are single-post noise
MIN_MENTIONS = 5


@dataclass
class _Bucket:
    mentions: int = 0
    raw_sum: float = 0.0
    weighted_sum: float = 0.0
    quality_sum: float = 0.0
    decay_sum: float = 0.0
    weight_sum: float = 0.0
    upvotes: int = 0
    comments: int = 0
    bullish: int = 0
    bearish: int = 0
    channels: Set[str] = field(default_factory=set)

    def add(self, mention: ScoredMention) -> None:
        self.mentions += 1
        self.raw_sum += mention.raw_sentiment
        self.weighted_sum += mention.raw_sentiment * mention.quality
        self.quality_sum += mention.quality
        self.decay_sum += mention.decay
        self.weight_sum += mention.source_weight
        self.upvotes += mention.upvotes
        self.comments += mention.comments
        if mention.raw_sentiment > 0:
            self.bullish += 1
        elif mention.raw_sentiment < 0:
            self.bearish += 1
        if mention.channel:
            self.channels.add(mention.channel)


def aggregate_mentions(
    mentions: Iterable[ScoredMention],
    source: str,
    now: float,
    min_mentions: int = MIN_MENTIONS,
) -> List[Signal]:
    """Aggregate one source's scored mentions into per-ticker Signals.

    Args:
        mentions: Scored contributions from every post the source returned
        source: Source name stamped on each Signal
        now: Cycle timestamp (epoch seconds)
        min_mentions: Floor below which a ticker emits nothing

    Returns:
        Signals ordered by weighted sentiment, strongest first
    """
    buckets: Dict[str, _Bucket] = {}
    for mention in mentions:
        ticker = (mention.ticker or "").upper()
        if not ticker:
            continue
        buckets.setdefault(ticker, _Bucket()).add(mention)

    signals: List[Signal] = []
    for ticker, b in buckets.items():
        if b.mentions < min_mentions:
            continue
        weighted = b.weighted_sum / b.quality_sum if b.quality_sum else 0.0
        signals.append(
            Signal(
                symbol=ticker,
                source=source,
                source_detail=",".join(sorted(b.channels)),
                raw_sentiment=b.raw_sum / b.mentions,
                weighted_sentiment=weighted,
                volume=b.mentions,
                bullish_count=b.bullish,
                bearish_count=b.bearish,
                total_upvotes=b.upvotes,
                total_comments=b.comments,
                timestamp=now,
                freshness=b.decay_sum / b.mentions,
                source_weight=b.weight_sum / b.mentions,
                reason=f"{source}: {b.bullish}B/{b.bearish}b ({weighted * 100:.0f}%) over {b.mentions} posts",
            )
        )

    signals.sort(key=lambda s: s.weighted_sentiment, reverse=True)
    return signals
