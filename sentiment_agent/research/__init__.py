"""LLM research over gated candidates, with a TTL verdict cache."""

from .cache import ResearchCache
from .researcher import Researcher

__all__ = ["ResearchCache", "Researcher"]
