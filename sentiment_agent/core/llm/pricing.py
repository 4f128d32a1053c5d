"""Static per-model token pricing used when the backend reports no cost."""

from typing import Dict

# USD per 1M tokens
MODEL_PRICING: Dict[str, Dict[str, float]] = {
    "gpt-4o": {"input": 2.5, "output": 10.0},
    "gpt-4o-mini": {"input": 0.15, "output": 0.6},
}
FALLBACK_MODEL = "gpt-4o-mini"


def estimate_cost(model: str, tokens_in: int, tokens_out: int) -> float:
    """Cost of a call in USD. Unknown models are billed at gpt-4o-mini rates.

    Provider-prefixed ids ("openai/gpt-4o") match on the last path segment.
    """
    key = model.split("/")[-1] if model else FALLBACK_MODEL
    rates = MODEL_PRICING.get(key, MODEL_PRICING[FALLBACK_MODEL])
    return (tokens_in * rates["input"] + tokens_out * rates["output"]) / 1_000_000
