"""Exception taxonomy for the trading agent."""

from typing import Optional

# HTTP statuses worth retrying with backoff: rate limited / temporarily unavailable
RETRYABLE_STATUSES = frozenset({429, 503})


class AgentError(Exception):
    """Base class for all agent errors."""


class ProviderError(AgentError):
    """A call to an external API failed (non-2xx or transport failure)."""

    def __init__(self, provider: str, message: str, status: Optional[int] = None):
        super().__init__(f"{provider} error ({status if status is not None else 'n/a'}): {message}")
        self.provider = provider
        self.status = status
        self.message = message

    @property
    def retryable(self) -> bool:
        return self.status in RETRYABLE_STATUSES


class ResearchParseError(AgentError):
    """The LLM answered, but not with the structured output we asked for."""

    def __init__(self, chain: str, message: str, raw: str = ""):
        super().__init__(f"{chain}: {message}")
        self.chain = chain
        self.raw = raw


class ExecutionError(AgentError):
    """The broker rejected or failed an order."""

    def __init__(self, symbol: str, side: str, message: str):
        super().__init__(f"{side} {symbol} failed: {message}")
        self.symbol = symbol
        self.side = side


class ConfigurationError(AgentError):
    """A configuration update was rejected."""
