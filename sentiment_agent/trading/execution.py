"""
Execution engine: risk rules for held positions and order placement.

Per held position, every analyst cycle, in this order:
    1. take-profit   (P/L% ≥ take_profit_pct)   → sell, no LLM call
    2. stop-loss     (P/L% ≤ -stop_loss_pct)    → sell, no LLM call
    3. LLM review    (SELL with confidence ≥ LLM_SELL_CONFIDENCE) → sell
    4. hold
"""

from typing import Callable, Dict, Iterable, List, Optional

from sentiment_agent.activity import log_activity
from sentiment_agent.core.discord_notifier import send_trade_notification
from sentiment_agent.core.providers import (
    Account,
    Order,
    OrderRequest,
    Position,
    QuoteProvider,
    TradingProvider,
)
from sentiment_agent.errors import ExecutionError, ProviderError, ResearchParseError
from sentiment_agent.graph.chains import PositionReview, StructuredChain
from sentiment_agent.graph.context import (
    format_entry_context,
    format_position_summary,
    format_signal_sentiment,
)
from sentiment_agent.research.cache import ResearchCache
from sentiment_agent.state import AgentState, CompositeSignal, PositionEntry

from .sizing import is_economical, position_size

# Fixed floor for LLM-driven exits; independent of min_analyst_confidence
LLM_SELL_CONFIDENCE = 0.7

# Research verdicts turn into at most this many buys per cycle
MAX_RESEARCH_BUYS_PER_CYCLE = 1

_FAILED_ORDER_STATUSES = {"rejected", "canceled", "cancelled", "expired"}


class ExecutionEngine:
    def __init__(
        self,
        trading: TradingProvider,
        quotes: QuoteProvider,
        review_chain: Optional[StructuredChain] = None,
        notify: Callable[..., bool] = send_trade_notification,
    ):
        self.trading = trading
        self.quotes = quotes
        self.review_chain = review_chain
        self.notify = notify

    # ── Position management ──────────────────────────────────────────────────

    def manage_positions(
        self,
        state: AgentState,
        positions: List[Position],
        composites: Dict[str, CompositeSignal],
        now: float,
    ) -> List[str]:
        """Apply take-profit / stop-loss / LLM review to every held position.

        Returns:
            Symbols sold this pass
        """
        self.track_peaks(state, positions, composites)
        self.drop_orphaned_entries(state, positions)

        sold: List[str] = []
        tp = state.config.take_profit_pct
        sl = state.config.stop_loss_pct

        for position in positions:
            pl_pct = position.pl_pct

            if pl_pct >= tp:
                if self.execute_sell(state, position.symbol, f"Take profit at +{pl_pct:.1f}%"):
                    sold.append(position.symbol)
                continue

            if pl_pct <= -sl:
                if self.execute_sell(state, position.symbol, f"Stop loss at {pl_pct:.1f}%"):
                    sold.append(position.symbol)
                continue

            review = self.review_position(state, position, composites.get(position.symbol), now)
            if review is not None and review.action == "SELL" and review.confidence >= LLM_SELL_CONFIDENCE:
                if self.execute_sell(state, position.symbol, f"LLM: {review.reasoning}"):
                    sold.append(position.symbol)

        return sold

    def review_position(
        self,
        state: AgentState,
        position: Position,
        composite: Optional[CompositeSignal],
        now: float,
    ) -> Optional[PositionReview]:
        if self.review_chain is None:
            return None
        inputs = {
            "position": format_position_summary(position),
            "entry_context": format_entry_context(state.position_entries.get(position.symbol), now),
            "current_sentiment": format_signal_sentiment(composite),
            "take_profit_pct": state.config.take_profit_pct,
            "stop_loss_pct": state.config.stop_loss_pct,
        }
        try:
            review: PositionReview = self.review_chain.invoke(
                inputs,
                settings=state.config,
                cost_tracker=state.cost_tracker,
            )
        except (ProviderError, ResearchParseError) as exc:
            log_activity("Research", "position_error", symbol=position.symbol, message=str(exc))
            return None

        log_activity(
            "Research",
            "position_analyzed",
            symbol=position.symbol,
            recommendation=review.action,
            confidence=review.confidence,
        )
        return review

    def track_peaks(
        self,
        state: AgentState,
        positions: Iterable[Position],
        composites: Dict[str, CompositeSignal],
    ) -> None:
        for position in positions:
            entry = state.position_entries.get(position.symbol)
            if entry is None:
                continue
            if position.current_price > entry.peak_price:
                entry.peak_price = position.current_price
            current = composites.get(position.symbol)
            if current is not None and current.sentiment > entry.peak_sentiment:
                entry.peak_sentiment = current.sentiment

    def drop_orphaned_entries(self, state: AgentState, positions: Iterable[Position]) -> None:
        """Forget entry records for positions the broker no longer reports."""
        held = {p.symbol for p in positions}
        for symbol in [s for s in state.position_entries if s not in held]:
            del state.position_entries[symbol]
            log_activity("Executor", "entry_dropped", symbol=symbol, reason="position no longer held")

    # ── Buys from research verdicts ──────────────────────────────────────────

    def research_buys(
        self,
        state: AgentState,
        account: Account,
        positions: List[Position],
        composites: Dict[str, CompositeSignal],
        now: float,
    ) -> List[str]:
        """Buy the strongest fresh BUY verdict, if there's room.

        Returns:
            Symbols bought (at most MAX_RESEARCH_BUYS_PER_CYCLE)
        """
        cfg = state.config
        if len(positions) >= cfg.max_positions:
            log_activity("System", "max_positions_reached", count=len(positions))
            return []

        held = {p.symbol for p in positions}
        fresh = ResearchCache(state.research_cache, clock=lambda: now).fresh_results()
        opportunities = sorted(
            (
                r for r in fresh.values()
                if r.verdict == "BUY"
                and r.confidence >= cfg.min_analyst_confidence
                and r.symbol not in held
            ),
            key=lambda r: r.confidence,
            reverse=True,
        )
        log_activity(
            "System",
            "buy_opportunities",
            count=len(opportunities),
            symbols=[o.symbol for o in opportunities],
        )

        bought: List[str] = []
        for opportunity in opportunities[:MAX_RESEARCH_BUYS_PER_CYCLE]:
            if self.execute_buy(
                state,
                opportunity.symbol,
                opportunity.confidence,
                account,
                reason=f"Research: {opportunity.reasoning}",
                composite=composites.get(opportunity.symbol),
                now=now,
            ):
                bought.append(opportunity.symbol)
        return bought

    # ── Order placement ──────────────────────────────────────────────────────

    def execute_buy(
        self,
        state: AgentState,
        symbol: str,
        confidence: float,
        account: Account,
        reason: str,
        composite: Optional[CompositeSignal] = None,
        now: float = 0.0,
        suggested_size_pct: Optional[float] = None,
    ) -> bool:
        """Size and place a market buy off *account* cash.

        An accepted order is deducted from ``account.cash``, so the next buy in
        the same tick is sized off what is left.
        """
        cfg = state.config
        size = position_size(
            account.cash,
            cfg.position_size_pct_of_cash,
            confidence,
            cfg.max_position_value,
            suggested_pct=suggested_size_pct,
        )
        if not is_economical(size):
            log_activity("Executor", "buy_skipped", symbol=symbol, reason="Position too small", size=round(size, 2))
            return False

        notional = round(size, 2)
        try:
            order = self._submit(
                OrderRequest(symbol=symbol, side="buy", notional=notional, type="market", time_in_force="day")
            )
        except ExecutionError as exc:
            log_activity("Executor", "buy_failed", symbol=symbol, error=str(exc))
            return False
        account.cash = max(0.0, account.cash - notional)

        quote = self.quotes.get_quote(symbol)
        price = quote.price if quote else 0.0
        sentiment = composite.sentiment if composite else 0.0
        state.position_entries[symbol] = PositionEntry(
            symbol=symbol,
            entry_time=now,
            entry_price=price,
            entry_sentiment=sentiment,
            entry_social_volume=composite.volume if composite else 0,
            entry_sources=sorted(composite.sources) if composite else [],
            entry_reason=reason,
            peak_price=price,
            peak_sentiment=sentiment,
        )
        log_activity(
            "Executor",
            "buy_executed",
            symbol=symbol,
            status=order.status,
            size=notional,
            confidence=confidence,
        )
        self.notify(symbol=symbol, side="buy", reason=reason, notional=notional, confidence=confidence)
        return True

    def execute_sell(self, state: AgentState, symbol: str, reason: str) -> bool:
        """Close *symbol* entirely. The research verdict and entry record go with it."""
        try:
            self.trading.close_position(symbol)
        except ProviderError as exc:
            error = ExecutionError(symbol, "sell", exc.message)
            log_activity("Executor", "sell_failed", symbol=symbol, error=str(error))
            return False

        log_activity("Executor", "sell_executed", symbol=symbol, reason=reason)
        ResearchCache(state.research_cache).delete(symbol)
        state.position_entries.pop(symbol, None)
        self.notify(symbol=symbol, side="sell", reason=reason)
        return True

    def _submit(self, request: OrderRequest) -> Order:
        """Place *request*; broker errors and dead-on-arrival orders raise ExecutionError."""
        try:
            order = self.trading.create_order(request)
        except ProviderError as exc:
            raise ExecutionError(request.symbol, request.side, exc.message) from exc
        if order.status.lower() in _FAILED_ORDER_STATUSES:
            raise ExecutionError(request.symbol, request.side, f"order {order.id} {order.status}")
        return order
