"""
Tests for the analyst pass: rule checks applied to the portfolio-level
LLM recommendations before anything is executed.

Usage:
    pytest testing/test_analyst.py -v
"""

from fakes import NOW, FakeLLM, FakeQuotes, FakeTrading, actions, make_position, make_signal
from sentiment_agent.graph.chains import ChainFactory
from sentiment_agent.signals import analyst_candidates
from sentiment_agent.state import PositionEntry
from sentiment_agent.trading import AnalystEngine, ExecutionEngine


def _analyst(trading, recommendations, summary="Choppy tape"):
    llm = FakeLLM([{"recommendations": recommendations, "market_summary": summary}])
    execution = ExecutionEngine(trading, FakeQuotes(), notify=lambda **kw: True)
    chain = ChainFactory.build_chain_by_name("analyst", llm)
    return AnalystEngine(chain, execution), llm


def _rec(action, symbol, confidence=0.8, **extra):
    return {"action": action, "symbol": symbol, "confidence": confidence, "reasoning": f"{action} {symbol}", **extra}


def _candidates(*symbols):
    return analyst_candidates([make_signal(s, 0.5) for s in symbols], 0.3)


def _entry(symbol, minutes_ago):
    return PositionEntry(
        symbol=symbol,
        entry_time=NOW - minutes_ago * 60,
        entry_price=100.0,
        entry_sentiment=0.5,
        entry_social_volume=10,
        entry_sources=["stocktwits"],
        entry_reason="test",
        peak_price=100.0,
        peak_sentiment=0.5,
    )


def _ignored(feed):
    return [e for e in feed.snapshot() if e["action"] == "recommendation_ignored"]


class TestAnalystRules:
    def test_skipped_without_candidates_or_positions(self, state, feed):
        trading = FakeTrading()
        analyst, llm = _analyst(trading, [])

        outcome = analyst.run(state, trading.account, [], [], {}, NOW, set(), set())

        assert outcome.report is None
        assert llm.calls == []
        assert "skipped" in actions(feed)

    def test_uses_analyst_model(self, state):
        trading = FakeTrading()
        analyst, llm = _analyst(trading, [])
        analyst.run(state, trading.account, [], _candidates("NVDA"), {}, NOW, set(), set())
        assert llm.calls[0]["model"] == state.config.llm_analyst_model

    def test_buy_executes_with_suggested_size(self, state):
        trading = FakeTrading(cash=10_000)
        analyst, _ = _analyst(trading, [_rec("BUY", "nvda", 1.0, suggested_size_pct=5)])

        outcome = analyst.run(state, trading.account, [], _candidates("NVDA"), {}, NOW, set(), set())

        assert outcome.bought == ["NVDA"]
        assert trading.orders[0].notional == 500.0

    def test_second_buy_sized_off_remaining_cash(self, state):
        trading = FakeTrading(cash=10_000)
        analyst, _ = _analyst(trading, [
            _rec("BUY", "NVDA", 1.0, suggested_size_pct=5),
            _rec("BUY", "AMD", 1.0, suggested_size_pct=5),
        ])

        outcome = analyst.run(state, trading.account, [], _candidates("NVDA", "AMD"), {}, NOW, set(), set())

        assert outcome.bought == ["NVDA", "AMD"]
        assert [o.notional for o in trading.orders] == [500.0, 475.0]

    def test_low_confidence_discarded(self, state, feed):
        trading = FakeTrading()
        analyst, _ = _analyst(trading, [_rec("BUY", "NVDA", 0.5)])

        outcome = analyst.run(state, trading.account, [], _candidates("NVDA"), {}, NOW, set(), set())

        assert outcome.bought == []
        assert trading.orders == []
        assert _ignored(feed)[0]["reason"] == "below min_analyst_confidence"

    def test_sell_blocked_inside_min_hold(self, state, feed):
        state.position_entries["AAPL"] = _entry("AAPL", minutes_ago=10)
        trading = FakeTrading(positions=[make_position("AAPL", 1.0)])
        analyst, _ = _analyst(trading, [_rec("SELL", "AAPL", 0.9)])

        outcome = analyst.run(state, trading.account, trading.positions, [], {}, NOW, set(), set())

        assert outcome.sold == []
        assert trading.closed == []
        [ignored] = _ignored(feed)
        assert ignored["symbol"] == "AAPL"
        assert ignored["recommended"] == "SELL"
        assert ignored["reason"].startswith("held 10 min")

    def test_sell_allowed_after_min_hold(self, state):
        state.position_entries["AAPL"] = _entry("AAPL", minutes_ago=45)
        trading = FakeTrading(positions=[make_position("AAPL", 1.0)])
        analyst, _ = _analyst(trading, [_rec("SELL", "AAPL", 0.9)])

        outcome = analyst.run(state, trading.account, trading.positions, [], {}, NOW, set(), set())

        assert outcome.sold == ["AAPL"]
        assert "AAPL" not in state.position_entries

    def test_sell_without_entry_record_allowed(self, state):
        trading = FakeTrading(positions=[make_position("AAPL", 1.0)])
        analyst, _ = _analyst(trading, [_rec("SELL", "AAPL", 0.9)])

        outcome = analyst.run(state, trading.account, trading.positions, [], {}, NOW, set(), set())
        assert outcome.sold == ["AAPL"]

    def test_sell_of_unheld_or_already_sold_rejected(self, state, feed):
        trading = FakeTrading(positions=[make_position("AAPL", 1.0)])
        analyst, _ = _analyst(trading, [_rec("SELL", "MSFT", 0.9), _rec("SELL", "TSLA", 0.9)])

        outcome = analyst.run(
            state, trading.account, trading.positions, [], {}, NOW, set(), sold_this_cycle={"TSLA"}
        )

        assert outcome.sold == []
        assert {(e["symbol"], e["reason"]) for e in _ignored(feed)} == {
            ("MSFT", "not held"),
            ("TSLA", "already sold this cycle"),
        }

    def test_buy_not_repeated_after_research_buy(self, state, feed):
        trading = FakeTrading()
        analyst, _ = _analyst(trading, [_rec("BUY", "NVDA", 0.9)])

        outcome = analyst.run(
            state, trading.account, [], _candidates("NVDA"), {}, NOW, bought_this_cycle={"NVDA"}, sold_this_cycle=set()
        )

        assert outcome.bought == []
        assert trading.orders == []
        assert _ignored(feed)[0]["reason"] == "already bought this cycle"

    def test_duplicate_buy_in_one_report(self, state):
        trading = FakeTrading()
        analyst, _ = _analyst(trading, [_rec("BUY", "NVDA", 0.9), _rec("BUY", "NVDA", 0.8)])

        outcome = analyst.run(state, trading.account, [], _candidates("NVDA"), {}, NOW, set(), set())

        assert outcome.bought == ["NVDA"]
        assert len(trading.orders) == 1

    def test_buy_of_held_symbol_rejected(self, state, feed):
        trading = FakeTrading(positions=[make_position("NVDA", 1.0)])
        analyst, _ = _analyst(trading, [_rec("BUY", "NVDA", 0.9)])

        analyst.run(state, trading.account, trading.positions, _candidates("NVDA"), {}, NOW, set(), set())

        assert trading.orders == []
        assert _ignored(feed)[0]["reason"] == "already held"

    def test_sells_free_slots_for_buys(self, state):
        state = state.__class__(config=state.config.updated({"max_positions": 1}), enabled=True)
        trading = FakeTrading(positions=[make_position("AAPL", 1.0)])
        analyst, _ = _analyst(trading, [_rec("BUY", "TSLA", 0.8), _rec("SELL", "AAPL", 0.8)])

        outcome = analyst.run(state, trading.account, trading.positions, _candidates("TSLA"), {}, NOW, set(), set())

        assert outcome.sold == ["AAPL"]
        assert outcome.bought == ["TSLA"]

    def test_buy_blocked_at_max_positions(self, state, feed):
        state = state.__class__(config=state.config.updated({"max_positions": 1}), enabled=True)
        trading = FakeTrading(positions=[make_position("AAPL", 1.0)])
        analyst, _ = _analyst(trading, [_rec("BUY", "TSLA", 0.8)])

        analyst.run(state, trading.account, trading.positions, _candidates("TSLA"), {}, NOW, set(), set())

        assert trading.orders == []
        assert _ignored(feed)[0]["reason"] == "max positions reached"

    def test_unparseable_report_logged(self, state, feed):
        trading = FakeTrading()
        llm = FakeLLM(['{"recommendations": "buy everything"}'])
        execution = ExecutionEngine(trading, FakeQuotes(), notify=lambda **kw: True)
        analyst = AnalystEngine(ChainFactory.build_chain_by_name("analyst", llm), execution)

        outcome = analyst.run(state, trading.account, [], _candidates("NVDA"), {}, NOW, set(), set())

        assert outcome.report is None
        assert trading.orders == []
        assert "error" in actions(feed)
