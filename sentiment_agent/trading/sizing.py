"""Confidence-weighted position sizing."""

from typing import Optional

# Orders smaller than this aren't worth the spread / fees
MIN_POSITION_SIZE = 100.0

# Hard ceiling on the share of cash committed to one buy
MAX_SIZE_PCT_OF_CASH = 20.0


def position_size(
    cash: float,
    size_pct: float,
    confidence: float,
    max_position_value: float,
    suggested_pct: Optional[float] = None,
) -> float:
    """Dollar notional for a buy.

    ``min(cash × min(20, pct)/100 × confidence, max_position_value)`` where
    ``pct`` is the configured percentage, lowered to *suggested_pct* when the
    analyst proposes a smaller one.
    """
    pct = size_pct
    if suggested_pct is not None and suggested_pct > 0:
        pct = min(pct, suggested_pct)
    pct = min(MAX_SIZE_PCT_OF_CASH, pct)
    confidence = max(0.0, min(1.0, confidence))
    return max(0.0, min(cash * pct / 100.0 * confidence, max_position_value))


def is_economical(size: float) -> bool:
    return size >= MIN_POSITION_SIZE
