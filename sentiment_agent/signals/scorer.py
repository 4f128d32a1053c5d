"""
Per-post signal scoring.

Turns one raw social post into (ticker, raw sentiment, quality) contributions:

    raw_sentiment = (bullish_hits - bearish_hits) / (bullish_hits + bearish_hits)
    quality       = decay × engagement × flair × source_weight
"""

import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

# ── Keyword dictionaries ─────────────────────────────────────────────────────

BULLISH_KEYWORDS = frozenset({
    "moon", "mooning", "rocket", "buy", "buying", "calls", "long", "bullish",
    "breakout", "squeeze", "undervalued", "tendies", "rip", "green", "gains",
    "upside", "beat", "beats", "upgrade", "upgraded", "rally", "soar", "surge",
    "accumulate", "oversold", "strong", "🚀", "📈", "🐂",
})

BEARISH_KEYWORDS = frozenset({
    "puts", "short", "shorting", "sell", "selling", "bearish", "crash", "dump",
    "dumping", "overvalued", "drill", "tank", "tanking", "red", "bagholder",
    "bagholding", "downside", "miss", "missed", "downgrade", "downgraded",
    "plunge", "collapse", "bankrupt", "overbought", "weak", "rug", "📉", "🐻",
})

# Upper-case words that look like tickers but almost never are
TICKER_BLACKLIST = frozenset({
    "A", "I", "AI", "AM", "AN", "AND", "ARE", "AT", "ATH", "ATM", "BE", "BUY",
    "CEO", "CFO", "CPI", "DD", "DOW", "EPS", "ETF", "EV", "FDA", "FED", "FOMO",
    "FOR", "FUD", "GDP", "GO", "HODL", "IMO", "IN", "IPO", "IRS", "IS", "IT",
    "LOL", "MOON", "NEW", "NO", "NOT", "NOW", "NYSE", "OF", "OK", "ON", "OP",
    "OR", "OTM", "ITM", "PM", "PE", "RH", "SEC", "SELL", "SO", "THE", "TLDR",
    "TO", "UK", "UP", "US", "USA", "USD", "WSB", "YOLO", "YOY", "QOQ", "EOD",
    "IV", "LFG", "GDP", "API", "CEO", "EU", "ALL", "ANY", "CAN", "HAS", "HIS",
    "HER", "ITS", "JUST", "LIKE", "MY", "OUR", "OUT", "WHO", "WHY", "YOU",
})

_CASHTAG_RE = re.compile(r"\$([A-Za-z]{1,5})\b")
_BARE_TICKER_RE = re.compile(r"\b([A-Z]{2,5})\b")


def _keyword_pattern(words: frozenset) -> re.Pattern:
    alnum = sorted((w for w in words if w.isalnum()), key=len, reverse=True)
    return re.compile(r"\b(" + "|".join(map(re.escape, alnum)) + r")\b")


_BULLISH_RE = _keyword_pattern(BULLISH_KEYWORDS)
_BEARISH_RE = _keyword_pattern(BEARISH_KEYWORDS)
_BULLISH_SYMBOLS = frozenset(w for w in BULLISH_KEYWORDS if not w.isalnum())
_BEARISH_SYMBOLS = frozenset(w for w in BEARISH_KEYWORDS if not w.isalnum())

# ── Multiplier tables ────────────────────────────────────────────────────────

DECAY_HALF_LIFE_MINUTES = 120.0
DECAY_FLOOR = 0.2

# (threshold, multiplier), highest threshold first
UPVOTE_MULTIPLIERS: Tuple[Tuple[int, float], ...] = (
    (1000, 1.5),
    (500, 1.3),
    (200, 1.2),
    (100, 1.1),
    (50, 1.0),
    (0, 0.8),
)
COMMENT_MULTIPLIERS: Tuple[Tuple[int, float], ...] = (
    (200, 1.4),
    (100, 1.25),
    (50, 1.15),
    (20, 1.05),
    (0, 0.9),
)
DEFAULT_UPVOTE_MULTIPLIER = 0.8
DEFAULT_COMMENT_MULTIPLIER = 0.9

FLAIR_MULTIPLIERS: Dict[str, float] = {
    "dd": 1.5,
    "technical analysis": 1.3,
    "news": 1.2,
    "chart": 1.1,
    "discussion": 1.0,
    "yolo": 0.6,
    "gain": 0.5,
    "loss": 0.5,
    "meme": 0.4,
    "shitpost": 0.3,
}


@dataclass
class RawPost:
    """One social post / message as delivered by a source.

    ``tickers`` is set when the feed already knows what the post is about
    (e.g. a per-symbol stream); otherwise tickers are extracted from the text.
    ``label`` carries an explicit author sentiment tag ("bullish"/"bearish").
    """

    text: str
    created_at: float                 # epoch seconds
    source: str
    channel: str = ""
    source_weight: float = 1.0
    upvotes: int = 0
    comments: int = 0
    flair: Optional[str] = None
    label: Optional[str] = None
    tickers: List[str] = field(default_factory=list)


@dataclass
class ScoredMention:
    ticker: str
    raw_sentiment: float
    quality: float
    decay: float
    source_weight: float
    upvotes: int
    comments: int
    channel: str


# ── Scoring primitives ───────────────────────────────────────────────────────


def count_keyword_hits(text: str) -> Tuple[int, int]:
    """Return (bullish_hits, bearish_hits); each keyword counts once per text."""
    lowered = (text or "").lower()
    bullish = len(set(_BULLISH_RE.findall(lowered)))
    bearish = len(set(_BEARISH_RE.findall(lowered)))
    bullish += sum(1 for s in _BULLISH_SYMBOLS if s in lowered)
    bearish += sum(1 for s in _BEARISH_SYMBOLS if s in lowered)
    return bullish, bearish


def raw_sentiment(bullish_hits: int, bearish_hits: int) -> float:
    """Net keyword balance in [-1, 1]; 0 when nothing matched."""
    total = bullish_hits + bearish_hits
    if total <= 0:
        return 0.0
    return (bullish_hits - bearish_hits) / total


def time_decay(age_minutes: float, half_life_minutes: float = DECAY_HALF_LIFE_MINUTES) -> float:
    """Halves every *half_life_minutes*, clamped to [DECAY_FLOOR, 1.0]."""
    if not half_life_minutes or half_life_minutes <= 0:
        return 1.0
    age = max(0.0, age_minutes)
    value = math.pow(0.5, age / half_life_minutes)
    return min(1.0, max(DECAY_FLOOR, value))


def _lookup_threshold(value: int, table: Sequence[Tuple[int, float]], default: float) -> float:
    for threshold, multiplier in table:
        if value >= threshold:
            return multiplier
    return default


def engagement_multiplier(upvotes: int, comments: int) -> float:
    up = _lookup_threshold(upvotes, UPVOTE_MULTIPLIERS, DEFAULT_UPVOTE_MULTIPLIER)
    com = _lookup_threshold(comments, COMMENT_MULTIPLIERS, DEFAULT_COMMENT_MULTIPLIER)
    return (up + com) / 2


def flair_multiplier(flair: Optional[str]) -> float:
    if not flair:
        return 1.0
    return FLAIR_MULTIPLIERS.get(flair.strip().lower(), 1.0)


def extract_tickers(text: str) -> List[str]:
    """Cashtags ($NVDA) plus bare upper-case words that aren't common acronyms."""
    found: List[str] = []
    for match in _CASHTAG_RE.findall(text or ""):
        ticker = match.upper()
        if ticker not in TICKER_BLACKLIST and ticker not in found:
            found.append(ticker)
    for match in _BARE_TICKER_RE.findall(text or ""):
        if match not in TICKER_BLACKLIST and match not in found:
            found.append(match)
    return found


def _as_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


# ── Scorer ───────────────────────────────────────────────────────────────────


class SignalScorer:
    """Stateless per-post scorer."""

    def __init__(self, half_life_minutes: float = DECAY_HALF_LIFE_MINUTES):
        self.half_life_minutes = half_life_minutes

    def score(self, post: RawPost, now: float) -> List[ScoredMention]:
        """Score *post* as of *now* (epoch seconds). Malformed posts score nothing."""
        text = post.text if isinstance(post.text, str) else ""
        tickers = [t.upper() for t in post.tickers if t] or extract_tickers(text)
        if not tickers:
            return []

        bullish, bearish = count_keyword_hits(text)
        label = (post.label or "").lower()
        if label == "bullish":
            bullish += 1
        elif label == "bearish":
            bearish += 1
        sentiment = raw_sentiment(bullish, bearish)

        try:
            age_minutes = (now - float(post.created_at)) / 60.0
        except (TypeError, ValueError):
            age_minutes = float("inf")
        decay = time_decay(age_minutes, self.half_life_minutes)

        upvotes = _as_int(post.upvotes)
        comments = _as_int(post.comments)
        quality = (
            decay
            * engagement_multiplier(upvotes, comments)
            * flair_multiplier(post.flair)
            * post.source_weight
        )

        return [
            ScoredMention(
                ticker=ticker,
                raw_sentiment=sentiment,
                quality=quality,
                decay=decay,
                source_weight=post.source_weight,
                upvotes=upvotes,
                comments=comments,
                channel=post.channel,
            )
            for ticker in tickers
        ]
