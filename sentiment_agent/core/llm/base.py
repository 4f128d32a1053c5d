"""LLM provider interface and the retry policy shared by every backend."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, TypeVar

from sentiment_agent.errors import ProviderError

T = TypeVar("T")

MAX_ATTEMPTS = 3
BACKOFF_BASE_SECONDS = 1.0
BACKOFF_CAP_SECONDS = 8.0


@dataclass
class CompletionUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    # Actual USD cost when the backend reports it (OpenRouter does, OpenAI doesn't)
    cost: Optional[float] = None


@dataclass
class CompletionResult:
    content: str
    usage: CompletionUsage = field(default_factory=CompletionUsage)


class LLMProvider(ABC):
    """Chat-completion backend.

    Implementations retry rate-limit / unavailable responses via
    ``call_with_backoff`` and raise ProviderError for everything else.
    """

    name: str = "llm"

    @abstractmethod
    def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        response_format: Optional[Dict[str, str]] = None,
    ) -> CompletionResult:
        """Run one chat completion.

        Args:
            messages: [{"role": "system" | "user" | "assistant", "content": ...}]
            model: Model id; provider default when None
            temperature: Sampling temperature
            max_tokens: Completion token cap
            response_format: e.g. {"type": "json_object"}; dropped when unsupported

        Returns:
            CompletionResult with the message content and token usage
        """

    def estimate_cost(self, model: str, prompt_tokens: int, completion_tokens: int) -> Optional[float]:
        """USD cost from the backend's own pricing data, if it has any."""
        return None


def backoff_seconds(attempt: int) -> float:
    """1s, 2s, 4s … capped at 8s."""
    return min(BACKOFF_BASE_SECONDS * (2 ** attempt), BACKOFF_CAP_SECONDS)


def call_with_backoff(fn: Callable[[], T], label: str) -> T:
    """Run *fn*, retrying retryable ProviderErrors with exponential backoff.

    Raises:
        ProviderError: non-retryable failure, or the last retryable one once
            MAX_ATTEMPTS is used up
    """
    for attempt in range(MAX_ATTEMPTS):
        try:
            return fn()
        except ProviderError as exc:
            if not exc.retryable or attempt == MAX_ATTEMPTS - 1:
                raise
            delay = backoff_seconds(attempt)
            print(f"[LLM] {label}: {exc.status} on attempt {attempt + 1}, retrying in {delay:.0f}s…")
            time.sleep(delay)
    raise ProviderError(label, "max retries exceeded")
