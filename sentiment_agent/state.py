"""
State model for the trading agent.

AgentState is the aggregate root owned by the Scheduler. Everything in here is
plain data: dataclasses for the entities produced by the pipeline and a frozen
pydantic model for the runtime configuration.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sentiment_agent.config import LLM_ANALYST_MODEL, LLM_MODEL
from sentiment_agent.errors import ConfigurationError

Verdict = Literal["BUY", "SKIP", "WAIT"]


# ── Configuration ────────────────────────────────────────────────────────────


class AgentConfig(BaseModel):
    """Runtime trading configuration. Immutable; replaced wholesale on update."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    data_poll_interval_s: float = Field(default=60, gt=0)
    analyst_interval_s: float = Field(default=120, gt=0)
    max_position_value: float = Field(default=2000, gt=0)
    max_positions: int = Field(default=3, ge=0)
    min_sentiment_score: float = Field(default=0.3, ge=0.0, le=1.0)
    min_analyst_confidence: float = Field(default=0.6, ge=0.0, le=1.0)
    min_volume: int = Field(default=10, ge=0)
    take_profit_pct: float = Field(default=8, gt=0)
    stop_loss_pct: float = Field(default=4, gt=0)
    position_size_pct_of_cash: float = Field(default=20, gt=0, le=100)
    research_batch_limit: int = Field(default=10, ge=1)
    min_hold_minutes: float = Field(default=30, ge=0)
    llm_model: str = Field(default=LLM_MODEL, min_length=1)
    llm_analyst_model: str = Field(default=LLM_ANALYST_MODEL, min_length=1)

    def updated(self, updates: Dict[str, Any]) -> "AgentConfig":
        """Return a validated copy with *updates* applied.

        Raises:
            ConfigurationError: unknown keys or out-of-range values. The
                current config is never modified.
        """
        if not isinstance(updates, dict):
            raise ConfigurationError("config update must be a mapping")
        try:
            return AgentConfig.model_validate({**self.model_dump(), **updates})
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc


# ── Pipeline entities ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Signal:
    """One source's aggregated sentiment for one symbol in one cycle."""

    symbol: str
    source: str
    raw_sentiment: float
    weighted_sentiment: float
    volume: int
    bullish_count: int
    bearish_count: int
    timestamp: float
    freshness: float
    source_weight: float
    reason: str
    source_detail: str = ""
    total_upvotes: int = 0
    total_comments: int = 0

    @property
    def sentiment(self) -> float:
        return self.weighted_sentiment

    @property
    def source_key(self) -> str:
        """(source, detail) identity used when counting distinct sources."""
        return f"{self.source}:{self.source_detail}" if self.source_detail else self.source

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Signal":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class CompositeSignal:
    """Cross-source merge of every fresh Signal for one symbol."""

    symbol: str
    sentiment: float
    raw_sentiment: float
    volume: int
    sources: set
    best_signal: Signal
    quality_score: float = 0.0
    # number of signals folded into raw_sentiment's running average
    merged_count: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "sentiment": self.sentiment,
            "raw_sentiment": self.raw_sentiment,
            "volume": self.volume,
            "sources": sorted(self.sources),
            "quality_score": self.quality_score,
            "reason": self.best_signal.reason,
        }


@dataclass
class ResearchResult:
    """Cached LLM verdict for a candidate symbol."""

    symbol: str
    verdict: Verdict
    confidence: float
    reasoning: str
    red_flags: List[str] = field(default_factory=list)
    catalysts: List[str] = field(default_factory=list)
    timestamp: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResearchResult":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class PositionEntry:
    """Context captured when a position is opened, for later staleness checks."""

    symbol: str
    entry_time: float
    entry_price: float
    entry_sentiment: float
    entry_social_volume: int
    entry_sources: List[str]
    entry_reason: str
    peak_price: float
    peak_sentiment: float

    def hold_minutes(self, now: float) -> float:
        return max(0.0, (now - self.entry_time) / 60.0)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PositionEntry":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class CostTracker:
    total_usd: float = 0.0
    calls: int = 0
    tokens_in: int = 0
    tokens_out: int = 0

    def record(self, tokens_in: int, tokens_out: int, cost_usd: float) -> None:
        self.total_usd += cost_usd
        self.calls += 1
        self.tokens_in += tokens_in
        self.tokens_out += tokens_out

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ── Aggregate root ───────────────────────────────────────────────────────────


@dataclass
class AgentState:
    config: AgentConfig = field(default_factory=AgentConfig)
    signal_cache: List[Signal] = field(default_factory=list)
    research_cache: Dict[str, ResearchResult] = field(default_factory=dict)
    position_entries: Dict[str, PositionEntry] = field(default_factory=dict)
    cost_tracker: CostTracker = field(default_factory=CostTracker)
    logs: List[Dict[str, Any]] = field(default_factory=list)
    last_data_gather_run: float = 0.0
    last_analyst_run: float = 0.0
    enabled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config.model_dump(),
            "signal_cache": [s.to_dict() for s in self.signal_cache],
            "research_cache": {k: r.to_dict() for k, r in self.research_cache.items()},
            "position_entries": {k: p.to_dict() for k, p in self.position_entries.items()},
            "cost_tracker": self.cost_tracker.to_dict(),
            "logs": list(self.logs),
            "last_data_gather_run": self.last_data_gather_run,
            "last_analyst_run": self.last_analyst_run,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AgentState":
        """Rebuild state from a snapshot, falling back to defaults per field."""
        state = cls()
        if not data:
            return state

        config = data.get("config")
        if isinstance(config, dict):
            # Keys dropped from AgentConfig since the snapshot was written are ignored
            known = set(AgentConfig.model_fields)
            try:
                state.config = AgentConfig.model_validate({k: v for k, v in config.items() if k in known})
            except ValidationError as exc:
                print(f"[STATE] Stored config invalid, using defaults: {exc}")

        state.signal_cache = [Signal.from_dict(s) for s in data.get("signal_cache", [])]
        state.research_cache = {
            k: ResearchResult.from_dict(r) for k, r in data.get("research_cache", {}).items()
        }
        state.position_entries = {
            k: PositionEntry.from_dict(p) for k, p in data.get("position_entries", {}).items()
        }
        state.cost_tracker = CostTracker(**data.get("cost_tracker", {}))
        state.logs = list(data.get("logs", []))
        state.last_data_gather_run = float(data.get("last_data_gather_run", 0.0))
        state.last_analyst_run = float(data.get("last_analyst_run", 0.0))
        state.enabled = bool(data.get("enabled", False))
        return state
