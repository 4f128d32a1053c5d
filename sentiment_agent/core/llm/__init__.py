"""LLM backends behind a single completion interface."""

from .base import (
    CompletionResult,
    CompletionUsage,
    LLMProvider,
    backoff_seconds,
    call_with_backoff,
)
from .factory import PROVIDERS, create_llm_provider
from .pricing import estimate_cost

__all__ = [
    "CompletionResult",
    "CompletionUsage",
    "LLMProvider",
    "backoff_seconds",
    "call_with_backoff",
    "PROVIDERS",
    "create_llm_provider",
    "estimate_cost",
]
