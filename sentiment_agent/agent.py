"""
TradingAgent: the administrative surface over one Scheduler.

Every method takes the scheduler lock, so an admin call never interleaves
with a running tick.
"""

from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from sentiment_agent.activity import get_feed, log_activity
from sentiment_agent.errors import ProviderError
from sentiment_agent.graph.pipeline import CyclePipeline, create_pipeline
from sentiment_agent.research.cache import ResearchCache
from sentiment_agent.scheduler import Scheduler
from sentiment_agent.signals import merge_signals
from sentiment_agent.state import AgentState
from sentiment_agent.storage import load_state


class TradingAgent:
    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler

    @property
    def state(self) -> AgentState:
        return self.scheduler.state

    @property
    def pipeline(self) -> CyclePipeline:
        return self.scheduler.pipeline

    # ── Status ───────────────────────────────────────────────────────────────

    def status(self) -> Dict[str, Any]:
        """Snapshot of the agent plus best-effort live broker data."""
        with self.scheduler.lock:
            account = positions = clock = None
            try:
                trading = self.pipeline.trading
                account = asdict(trading.get_account())
                positions = [asdict(p) | {"pl_pct": p.pl_pct} for p in trading.get_positions()]
                clock = asdict(trading.get_clock())
            except ProviderError as exc:
                print(f"[STATUS] Broker data unavailable: {exc}")

            state = self.state
            return {
                "enabled": state.enabled,
                "account": account,
                "positions": positions,
                "clock": clock,
                "config": state.config.model_dump(),
                "signal_count": len(state.signal_cache),
                "research_count": len(state.research_cache),
                "tracked_positions": sorted(state.position_entries),
                "cost_tracker": state.cost_tracker.to_dict(),
                "rate_limits": self.pipeline.limiter.snapshot(),
                "llm_enabled": self.pipeline.researcher is not None,
                "last_data_gather_run": state.last_data_gather_run,
                "last_analyst_run": state.last_analyst_run,
            }

    # ── Controls ─────────────────────────────────────────────────────────────

    def enable(self) -> None:
        with self.scheduler.lock:
            self.state.enabled = True
            log_activity("System", "agent_enabled")
            self.scheduler.persist()

    def disable(self) -> None:
        """Soft stop: a tick already running finishes; later ticks no-op."""
        with self.scheduler.lock:
            self.state.enabled = False
            log_activity("System", "agent_disabled")
            self.scheduler.persist()

    def kill(self) -> None:
        """Disable and drop transient state (signals and research verdicts)."""
        with self.scheduler.lock:
            self.state.enabled = False
            self.state.signal_cache = []
            ResearchCache(self.state.research_cache).clear()
            log_activity("System", "agent_killed")
            self.scheduler.persist()

    def trigger(self) -> bool:
        """Run one tick now. Returns False if the agent is disabled."""
        return self.scheduler.tick()

    # ── Config ───────────────────────────────────────────────────────────────

    def get_config(self) -> Dict[str, Any]:
        with self.scheduler.lock:
            return self.state.config.model_dump()

    def update_config(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a partial config update.

        Raises:
            ConfigurationError: unknown key or invalid value; config unchanged
        """
        with self.scheduler.lock:
            self.state.config = self.state.config.updated(updates)
            log_activity("System", "config_updated", changes=sorted(updates))
            self.scheduler.persist()
            return self.state.config.model_dump()

    # ── Read-only views ──────────────────────────────────────────────────────

    def get_signals(self) -> Dict[str, Any]:
        with self.scheduler.lock:
            signals = list(self.state.signal_cache)
            now = self.scheduler.clock()
            return {
                "signals": [s.to_dict() for s in signals],
                "composites": [c.to_dict() for c in merge_signals(signals, now)],
            }

    def get_research(self) -> Dict[str, Dict[str, Any]]:
        with self.scheduler.lock:
            return {k: r.to_dict() for k, r in self.state.research_cache.items()}

    def get_costs(self) -> Dict[str, Any]:
        with self.scheduler.lock:
            return self.state.cost_tracker.to_dict()

    def get_logs(self, limit: int = 100) -> List[Dict[str, Any]]:
        return get_feed().recent(limit)


def create_agent(state_path: Optional[Path] = None) -> TradingAgent:
    """Build the production agent from settings and the persisted state."""
    state = load_state(state_path)
    pipeline = create_pipeline()
    return TradingAgent(Scheduler(state, pipeline, state_path=state_path))
