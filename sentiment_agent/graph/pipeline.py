"""
Collaborators used by the cycle graph's nodes, and the factory that builds
them from configuration.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from sentiment_agent.core.fundamentals import FinnhubFundamentals
from sentiment_agent.core.llm import LLMProvider, create_llm_provider
from sentiment_agent.core.providers import (
    AlpacaTradingProvider,
    QuoteProvider,
    TradingProvider,
    create_quote_provider,
)
from sentiment_agent.core.rate_limiter import RateLimiter
from sentiment_agent.core.social import SignalSource, create_signal_sources
from sentiment_agent.research import Researcher
from sentiment_agent.trading import AnalystEngine, ExecutionEngine

from .chains import ChainFactory


@dataclass
class CyclePipeline:
    """Everything a tick needs besides the AgentState itself.

    ``researcher`` and ``analyst`` are None when no LLM backend is
    configured; the research and analyst passes are then skipped while
    take-profit / stop-loss keep running.
    """

    trading: TradingProvider
    quotes: QuoteProvider
    limiter: RateLimiter
    execution: ExecutionEngine
    sources: List[SignalSource] = field(default_factory=list)
    researcher: Optional[Researcher] = None
    analyst: Optional[AnalystEngine] = None


def create_pipeline(
    llm: Optional[LLMProvider] = None,
    trading: Optional[TradingProvider] = None,
    sources: Optional[List[SignalSource]] = None,
    limiter: Optional[RateLimiter] = None,
) -> CyclePipeline:
    """Wire the production pipeline (Alpaca, configured LLM backend, all sources)."""
    limiter = limiter or RateLimiter()
    trading = trading or AlpacaTradingProvider()
    quotes = create_quote_provider(limiter=limiter)
    llm = llm if llm is not None else create_llm_provider()
    if llm is None:
        print("[PIPELINE] No LLM credentials – research and analyst passes disabled")

    chains = ChainFactory.build_all_chains(llm) if llm is not None else {}
    execution = ExecutionEngine(trading, quotes, review_chain=chains.get("position_review"))

    researcher = None
    analyst = None
    if llm is not None:
        fundamentals = FinnhubFundamentals(limiter=limiter)
        researcher = Researcher(chains["signal_research"], quotes, fundamentals)
        analyst = AnalystEngine(chains["analyst"], execution)

    return CyclePipeline(
        trading=trading,
        quotes=quotes,
        limiter=limiter,
        execution=execution,
        sources=create_signal_sources() if sources is None else sources,
        researcher=researcher,
        analyst=analyst,
    )
