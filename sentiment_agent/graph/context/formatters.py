"""Formatting helpers for converting pipeline data to LLM-friendly text."""

from typing import Dict, Iterable, List, Optional

from sentiment_agent.core.fundamentals import Fundamentals
from sentiment_agent.core.providers import Account, Position
from sentiment_agent.state import CompositeSignal, PositionEntry, ResearchResult


def format_account_summary(account: Account) -> str:
    return (
        f"Account equity: ${account.equity:,.2f}  |  "
        f"Buying power: ${account.buying_power:,.2f}  |  "
        f"Cash: ${account.cash:,.2f}"
    )


def format_price(price: Optional[float]) -> str:
    return f"${price:,.2f}" if price else "unknown"


def format_fundamentals(fundamentals: Optional[Fundamentals]) -> str:
    return fundamentals.summary() if fundamentals else "unavailable"


def format_position_summary(position: Position) -> str:
    """Format a held position into readable text for the LLM.

    Args:
        position: Broker position

    Returns:
        Multi-line summary with size, value and P/L
    """
    pl = position.pl_pct
    return (
        f"POSITION: {position.symbol}\n"
        f"SHARES: {position.qty:g}\n"
        f"CURRENT P&L: {pl:+.2f}%\n"
        f"MARKET VALUE: ${position.market_value:,.2f}\n"
        f"CURRENT PRICE: ${position.current_price:,.2f}"
    )


def format_entry_context(entry: Optional[PositionEntry], now: float) -> str:
    if entry is None:
        return "No entry record (opened outside this agent or before a restart)."
    return (
        f"bought {entry.hold_minutes(now):.0f} min ago at ${entry.entry_price:,.2f} "
        f"on {entry.entry_sentiment * 100:.0f}% sentiment from {', '.join(entry.entry_sources) or 'n/a'} "
        f"(peak ${entry.peak_price:,.2f}); reason: {entry.entry_reason}"
    )


def format_signal_sentiment(signal: Optional[CompositeSignal]) -> str:
    if signal is None:
        return "No recent data"
    return (
        f"{signal.sentiment * 100:.0f}% bullish ({signal.volume} messages, "
        f"{len(signal.sources)} sources)"
    )


def format_sources(sources: Iterable[str]) -> str:
    return ", ".join(sorted(sources)) or "none"


def format_positions_block(
    positions: List[Position],
    entries: Dict[str, PositionEntry],
    composites: Dict[str, CompositeSignal],
    now: float,
) -> str:
    if not positions:
        return "No open positions."
    lines = []
    for p in positions:
        entry = entries.get(p.symbol)
        current = composites.get(p.symbol)
        held = f"{entry.hold_minutes(now):.0f} min" if entry else "unknown"
        entry_sent = f"{entry.entry_sentiment * 100:.0f}%" if entry else "n/a"
        now_sent = f"{current.sentiment * 100:.0f}%" if current else "no data"
        lines.append(
            f"- {p.symbol}: {p.qty:g} sh, value ${p.market_value:,.2f}, P/L {p.pl_pct:+.2f}%, "
            f"held {held}, sentiment entry {entry_sent} → now {now_sent}"
        )
    return "\n".join(lines)


def format_candidates_block(candidates: Iterable, research: Dict[str, ResearchResult]) -> str:
    """Analyst candidates, each with its fresh research verdict if there is one."""
    lines = []
    for c in candidates:
        line = (
            f"- {c.symbol}: avg sentiment {c.avg_sentiment * 100:.0f}% over "
            f"{c.signal_count} signal(s), volume {c.volume}, sources {format_sources(c.sources)}"
        )
        verdict = research.get(c.symbol)
        if verdict is not None:
            line += (
                f"; research {verdict.verdict} @ {verdict.confidence:.2f}: {verdict.reasoning}"
            )
        lines.append(line)
    return "\n".join(lines) or "No candidates this cycle."


__all__ = [
    "format_account_summary",
    "format_price",
    "format_fundamentals",
    "format_position_summary",
    "format_entry_context",
    "format_signal_sentiment",
    "format_sources",
    "format_positions_block",
    "format_candidates_block",
]
