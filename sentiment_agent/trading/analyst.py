"""
Analyst pass: one portfolio-level LLM call over candidates, positions and the
account, followed by rule checks before anything is executed.

Rules applied to each recommendation:
- below ``min_analyst_confidence`` → discarded
- SELL → only for held symbols not already sold this cycle, held longer than
  ``min_hold_minutes`` (positions without an entry record qualify)
- BUY  → only for symbols not held, not bought by the research path this
  cycle, while open positions < ``max_positions``

SELLs are applied before BUYs so freed slots count.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from sentiment_agent.activity import log_activity
from sentiment_agent.core.providers import Account, Position
from sentiment_agent.errors import ProviderError, ResearchParseError
from sentiment_agent.graph.chains import AnalystRecommendation, AnalystReport, StructuredChain
from sentiment_agent.graph.context import (
    format_account_summary,
    format_candidates_block,
    format_positions_block,
)
from sentiment_agent.research.cache import ResearchCache
from sentiment_agent.signals.gates import AnalystCandidate
from sentiment_agent.state import AgentState, CompositeSignal

from .execution import ExecutionEngine


@dataclass
class AnalystOutcome:
    report: Optional[AnalystReport] = None
    bought: List[str] = field(default_factory=list)
    sold: List[str] = field(default_factory=list)
    rejected: List[Dict[str, str]] = field(default_factory=list)


class AnalystEngine:
    def __init__(self, chain: StructuredChain, execution: ExecutionEngine):
        self.chain = chain
        self.execution = execution

    def request_report(
        self,
        state: AgentState,
        account: Account,
        positions: List[Position],
        candidates: List[AnalystCandidate],
        composites: Dict[str, CompositeSignal],
        now: float,
    ) -> Optional[AnalystReport]:
        fresh = ResearchCache(state.research_cache, clock=lambda: now).fresh_results()
        inputs = {
            "account": format_account_summary(account),
            "position_count": len(positions),
            "max_positions": state.config.max_positions,
            "positions": format_positions_block(positions, state.position_entries, composites, now),
            "candidates": format_candidates_block(candidates, fresh),
        }
        try:
            report: AnalystReport = self.chain.invoke(
                inputs,
                settings=state.config,
                cost_tracker=state.cost_tracker,
            )
        except (ProviderError, ResearchParseError) as exc:
            log_activity("Analyst", "error", message=str(exc))
            return None

        log_activity(
            "Analyst",
            "report",
            recommendations=len(report.recommendations),
            market_summary=report.market_summary,
        )
        return report

    def run(
        self,
        state: AgentState,
        account: Account,
        positions: List[Position],
        candidates: List[AnalystCandidate],
        composites: Dict[str, CompositeSignal],
        now: float,
        bought_this_cycle: Set[str],
        sold_this_cycle: Set[str],
    ) -> AnalystOutcome:
        """Ask for a report and execute the recommendations that pass the rules.

        Args:
            positions: Positions still held after position management
            bought_this_cycle: Symbols the research path bought this cycle
            sold_this_cycle: Symbols already sold this cycle
        """
        outcome = AnalystOutcome()
        if not candidates and not positions:
            log_activity("Analyst", "skipped", reason="no candidates or positions")
            return outcome

        outcome.report = self.request_report(state, account, positions, candidates, composites, now)
        if outcome.report is None:
            return outcome

        cfg = state.config
        held = {p.symbol for p in positions} | set(bought_this_cycle)
        sold = set(sold_this_cycle)
        open_count = len(positions) + len(bought_this_cycle)

        accepted = []
        for rec in outcome.report.recommendations:
            if rec.confidence < cfg.min_analyst_confidence:
                outcome.rejected.append(self._reject(rec, "below min_analyst_confidence"))
            elif rec.action != "HOLD":
                accepted.append(rec)

        for rec in [r for r in accepted if r.action == "SELL"]:
            reason = self._sell_blocker(rec, state, held, sold, now)
            if reason:
                outcome.rejected.append(self._reject(rec, reason))
                continue
            if self.execution.execute_sell(state, rec.symbol, f"Analyst: {rec.reasoning}"):
                outcome.sold.append(rec.symbol)
                sold.add(rec.symbol)
                held.discard(rec.symbol)
                open_count -= 1

        for rec in [r for r in accepted if r.action == "BUY"]:
            if rec.symbol in bought_this_cycle or rec.symbol in outcome.bought:
                outcome.rejected.append(self._reject(rec, "already bought this cycle"))
                continue
            if rec.symbol in held:
                outcome.rejected.append(self._reject(rec, "already held"))
                continue
            if rec.symbol in sold:
                outcome.rejected.append(self._reject(rec, "sold this cycle"))
                continue
            if open_count >= cfg.max_positions:
                outcome.rejected.append(self._reject(rec, "max positions reached"))
                continue
            if self.execution.execute_buy(
                state,
                rec.symbol,
                rec.confidence,
                account,
                reason=f"Analyst: {rec.reasoning}",
                composite=composites.get(rec.symbol),
                now=now,
                suggested_size_pct=rec.suggested_size_pct,
            ):
                outcome.bought.append(rec.symbol)
                held.add(rec.symbol)
                open_count += 1

        for rejected in outcome.rejected:
            log_activity("Analyst", "recommendation_ignored", **rejected)
        return outcome

    @staticmethod
    def _sell_blocker(
        rec: AnalystRecommendation,
        state: AgentState,
        held: Set[str],
        sold: Set[str],
        now: float,
    ) -> Optional[str]:
        if rec.symbol in sold:
            return "already sold this cycle"
        if rec.symbol not in held:
            return "not held"
        entry = state.position_entries.get(rec.symbol)
        if entry is not None and entry.hold_minutes(now) <= state.config.min_hold_minutes:
            return f"held {entry.hold_minutes(now):.0f} min, minimum {state.config.min_hold_minutes:.0f}"
        return None

    @staticmethod
    def _reject(rec: AnalystRecommendation, reason: str) -> Dict[str, str]:
        return {"symbol": rec.symbol, "recommended": rec.action, "reason": reason}
