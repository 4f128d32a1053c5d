"""Sentiment-driven trading agent: social signals → LLM research → paper trades."""

from .agent import TradingAgent, create_agent

__all__ = [
    "TradingAgent",
    "create_agent",
]
