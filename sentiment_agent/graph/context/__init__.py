"""LLM context building - turns pipeline data into prompt text."""

from .formatters import (
    format_account_summary,
    format_candidates_block,
    format_entry_context,
    format_fundamentals,
    format_position_summary,
    format_positions_block,
    format_price,
    format_signal_sentiment,
    format_sources,
)

__all__ = [
    "format_account_summary",
    "format_candidates_block",
    "format_entry_context",
    "format_fundamentals",
    "format_position_summary",
    "format_positions_block",
    "format_price",
    "format_signal_sentiment",
    "format_sources",
]
