"""
Per-candidate LLM research.

For every candidate the research gate lets through: serve a fresh cached
verdict, otherwise ask the research chain (one completion per candidate) with
the live quote and Finnhub fundamentals as extra context.
"""

from typing import Dict, Iterable, Optional

from sentiment_agent.activity import log_activity
from sentiment_agent.core.fundamentals import FinnhubFundamentals
from sentiment_agent.core.providers import QuoteProvider
from sentiment_agent.errors import ProviderError, ResearchParseError
from sentiment_agent.graph.chains import ResearchVerdict, StructuredChain
from sentiment_agent.graph.context import format_fundamentals, format_price, format_sources
from sentiment_agent.state import AgentState, CompositeSignal, ResearchResult

from .cache import ResearchCache


class Researcher:
    def __init__(
        self,
        chain: StructuredChain,
        quotes: QuoteProvider,
        fundamentals: Optional[FinnhubFundamentals] = None,
    ):
        self.chain = chain
        self.quotes = quotes
        self.fundamentals = fundamentals

    def build_inputs(self, candidate: CompositeSignal, state: AgentState) -> dict:
        quote = self.quotes.get_quote(candidate.symbol)
        metrics = self.fundamentals.get_metrics(candidate.symbol) if self.fundamentals else None
        return {
            "symbol": candidate.symbol,
            "sentiment_pct": f"{candidate.sentiment * 100:.0f}",
            "raw_sentiment_pct": f"{candidate.raw_sentiment * 100:.0f}",
            "sources": format_sources(candidate.sources),
            "volume": candidate.volume,
            "min_volume": state.config.min_volume,
            "reason": candidate.best_signal.reason,
            "price": format_price(quote.price if quote else None),
            "fundamentals": format_fundamentals(metrics),
        }

    def research_one(
        self,
        candidate: CompositeSignal,
        state: AgentState,
        now: float,
    ) -> Optional[ResearchResult]:
        """One LLM call for *candidate*. Failures are logged and yield None."""
        try:
            verdict: ResearchVerdict = self.chain.invoke(
                self.build_inputs(candidate, state),
                settings=state.config,
                cost_tracker=state.cost_tracker,
            )
        except ResearchParseError as exc:
            log_activity("Research", "parse_error", symbol=candidate.symbol, message=str(exc))
            return None
        except ProviderError as exc:
            log_activity("Research", "error", symbol=candidate.symbol, message=str(exc))
            return None

        result = ResearchResult(
            symbol=candidate.symbol,
            verdict=verdict.verdict,
            confidence=verdict.confidence,
            reasoning=verdict.reasoning,
            red_flags=list(verdict.red_flags),
            catalysts=list(verdict.catalysts),
            timestamp=now,
        )
        log_activity(
            "Research",
            "signal_analyzed",
            symbol=result.symbol,
            verdict=result.verdict,
            confidence=result.confidence,
        )
        return result

    def research(
        self,
        candidates: Iterable[CompositeSignal],
        state: AgentState,
        now: float,
    ) -> Dict[str, ResearchResult]:
        """Research every candidate, reusing fresh cached verdicts.

        Stale verdicts are purged first. Successful calls overwrite the cache
        entry; failed ones leave the cache untouched.

        Returns:
            Verdicts for this batch, keyed by symbol
        """
        cache = ResearchCache(state.research_cache, clock=lambda: now)
        purged = cache.purge_stale()
        if purged:
            print(f"[RESEARCH] Purged {purged} stale verdict(s)")

        results: Dict[str, ResearchResult] = {}
        for candidate in candidates:
            cached = cache.get(candidate.symbol)
            if cached is not None:
                results[candidate.symbol] = cached
                continue
            result = self.research_one(candidate, state, now)
            if result is not None:
                cache.set(candidate.symbol, result)
                results[candidate.symbol] = result
        return results
