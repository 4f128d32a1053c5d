"""
Chain configurations for the LLM decision pipeline.

Defines the system prompts, input templates, and output models for each chain
in a data-driven format, enabling prompt changes without code modification.
Literal JSON braces in templates are doubled ({{ }}) for ChatPromptTemplate.
"""

from dataclasses import dataclass
from typing import List, Literal, Type

from pydantic import BaseModel

from sentiment_agent import config

from .models import AnalystReport, PositionReview, ResearchVerdict


@dataclass
class ChainConfig:
    """Configuration for building an LLM chain."""

    name: str  # Chain identifier (e.g., "signal_research")
    system_prompt: str  # System message for the chain
    human_prompt_template: str  # Human message template with {variables}
    input_variables: List[str]  # Expected input variable names
    structured_model: Type[BaseModel]  # Pydantic model the JSON answer must satisfy
    model_role: Literal["research", "analyst"] = "research"  # Which AgentConfig model to use
    temperature: float = config.LLM_TEMPERATURE
    max_tokens: int = 300


SIGNAL_RESEARCH_CONFIG = ChainConfig(
    name="signal_research",
    system_prompt=(
        "You are a skeptical stock analyst. Be cautious of hype. Output valid JSON only."
    ),
    human_prompt_template=(
        "Analyze this trading signal and decide if we should buy:\n\n"
        "SYMBOL: {symbol}\n"
        "SENTIMENT: {sentiment_pct}% bullish (raw {raw_sentiment_pct}%)\n"
        "SOURCES: {sources}\n"
        "VOLUME: {volume} messages (we distrust anything under {min_volume})\n"
        "SIGNAL: {reason}\n"
        "CURRENT PRICE: {price}\n"
        "FUNDAMENTALS: {fundamentals}\n\n"
        "Consider:\n"
        "1. Is the sentiment score strong enough to indicate real momentum?\n"
        "2. Is there enough volume to trust the signal?\n"
        "3. Are there any red flags (pump and dump patterns, low liquidity tickers)?\n"
        "4. What catalysts might be driving this sentiment?\n\n"
        "Respond with JSON only:\n"
        "{{\n"
        '  "verdict": "BUY" | "SKIP" | "WAIT",\n'
        '  "confidence": 0.0-1.0,\n'
        '  "reasoning": "brief explanation",\n'
        '  "red_flags": ["any concerns"],\n'
        '  "catalysts": ["positive factors"]\n'
        "}}"
    ),
    input_variables=[
        "symbol", "sentiment_pct", "raw_sentiment_pct", "sources", "volume",
        "min_volume", "reason", "price", "fundamentals",
    ],
    structured_model=ResearchVerdict,
)

POSITION_REVIEW_CONFIG = ChainConfig(
    name="position_review",
    system_prompt=(
        "You are a position manager. Protect profits and cut losses. Output valid JSON only."
    ),
    human_prompt_template=(
        "Analyze this position and recommend HOLD or SELL:\n\n"
        "{position}\n\n"
        "ENTRY CONTEXT: {entry_context}\n"
        "CURRENT SENTIMENT: {current_sentiment}\n\n"
        "RULES:\n"
        "- Take profit target: {take_profit_pct}%\n"
        "- Stop loss: {stop_loss_pct}%\n\n"
        "Consider:\n"
        "1. Is sentiment still supportive or deteriorating?\n"
        "2. Has the position reached a natural exit point?\n"
        "3. Are there signs the move is exhausted?\n\n"
        "Respond with JSON only:\n"
        "{{\n"
        '  "action": "HOLD" | "SELL",\n'
        '  "confidence": 0.0-1.0,\n'
        '  "reasoning": "brief explanation"\n'
        "}}"
    ),
    input_variables=[
        "position", "entry_context", "current_sentiment", "take_profit_pct", "stop_loss_pct",
    ],
    structured_model=PositionReview,
    max_tokens=200,
)

ANALYST_CONFIG = ChainConfig(
    name="analyst",
    system_prompt=(
        "You are the senior portfolio analyst of a small sentiment-driven trading desk. "
        "You see the strongest social-sentiment candidates (with any research verdicts), "
        "every open position and the account. Recommend BUY only for candidates with real, "
        "multi-source support; recommend SELL for positions whose thesis has broken down; "
        "otherwise HOLD. Be selective. Output valid JSON only."
    ),
    human_prompt_template=(
        "--- Account ---\n{account}\n\n"
        "--- Open Positions ({position_count}/{max_positions}) ---\n{positions}\n\n"
        "--- Candidates ---\n{candidates}\n\n"
        "Respond with JSON only:\n"
        "{{\n"
        '  "recommendations": [\n'
        "    {{\n"
        '      "action": "BUY" | "SELL" | "HOLD",\n'
        '      "symbol": "TICKER",\n'
        '      "confidence": 0.0-1.0,\n'
        '      "reasoning": "brief explanation",\n'
        '      "suggested_size_pct": 1-20 (optional, BUY only)\n'
        "    }}\n"
        "  ],\n"
        '  "market_summary": "one or two sentences"\n'
        "}}"
    ),
    input_variables=["account", "position_count", "max_positions", "positions", "candidates"],
    structured_model=AnalystReport,
    model_role="analyst",
    max_tokens=800,
)

# Registry of all chain configurations
CHAIN_CONFIGS = {
    "signal_research": SIGNAL_RESEARCH_CONFIG,
    "position_review": POSITION_REVIEW_CONFIG,
    "analyst": ANALYST_CONFIG,
}
