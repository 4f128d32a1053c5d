"""
Structured outputs of the LLM chains.

Each chain asks for a JSON object and validates the answer against one of
these models; anything that doesn't validate is a ResearchParseError.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class ResearchVerdict(BaseModel):
    """Verdict on a single sentiment candidate."""

    verdict: Literal["BUY", "SKIP", "WAIT"] = Field(
        description="BUY if the sentiment reflects real momentum, SKIP if it looks like hype "
        "or a trap, WAIT if it's promising but unconfirmed."
    )
    confidence: float = Field(
        description="Confidence level between 0.0 and 1.0 for the verdict.",
        ge=0.0,
        le=1.0,
    )
    reasoning: str = Field(description="Brief explanation of the verdict.")
    red_flags: List[str] = Field(default_factory=list, description="Concerns, if any.")
    catalysts: List[str] = Field(default_factory=list, description="Positive factors, if any.")

    @field_validator("verdict", mode="before")
    @classmethod
    def _upper(cls, value):
        return value.upper() if isinstance(value, str) else value


class PositionReview(BaseModel):
    """HOLD / SELL recommendation for one open position."""

    action: Literal["HOLD", "SELL"] = Field(description="HOLD the position or SELL it now.")
    confidence: float = Field(
        description="Confidence level between 0.0 and 1.0 for the action.",
        ge=0.0,
        le=1.0,
    )
    reasoning: str = Field(description="Brief explanation.")

    @field_validator("action", mode="before")
    @classmethod
    def _upper(cls, value):
        return value.upper() if isinstance(value, str) else value


class AnalystRecommendation(BaseModel):
    action: Literal["BUY", "SELL", "HOLD"]
    symbol: str
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""
    suggested_size_pct: Optional[float] = Field(
        default=None,
        gt=0.0,
        le=100.0,
        description="Optional percent of cash to commit on a BUY.",
    )

    @field_validator("action", "symbol", mode="before")
    @classmethod
    def _upper(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class AnalystReport(BaseModel):
    """Portfolio-level pass over candidates, positions and the account."""

    recommendations: List[AnalystRecommendation] = Field(default_factory=list)
    market_summary: str = ""
