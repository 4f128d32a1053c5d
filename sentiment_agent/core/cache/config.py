"""Cache configuration: TTL constants for different data types."""

from datetime import timedelta

# Real-time quotes (very volatile)
CACHE_TTL_QUOTE = timedelta(seconds=30)

# Fundamentals barely move intraday; Finnhub budget is tight
CACHE_TTL_FUNDAMENTALS = timedelta(minutes=15)

# LLM research verdicts: served without a new call while younger than this
CACHE_TTL_RESEARCH = timedelta(seconds=300)
