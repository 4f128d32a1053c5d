"""
End-to-end tests for the scheduler tick, the cycle graph and the
TradingAgent admin surface, wired to fake providers.

Usage:
    pytest testing/test_agent.py -v
"""

import pytest

from fakes import NOW, FakeLLM, FakeQuotes, FakeSource, FakeTrading, actions, make_position, make_research, make_signal
from sentiment_agent.agent import TradingAgent
from sentiment_agent.core.rate_limiter import RateLimiter
from sentiment_agent.errors import ConfigurationError
from sentiment_agent.graph.chains import ChainFactory
from sentiment_agent.graph.pipeline import CyclePipeline
from sentiment_agent.research import Researcher
from sentiment_agent.scheduler import Scheduler
from sentiment_agent.state import AgentState
from sentiment_agent.storage import load_state
from sentiment_agent.trading import AnalystEngine, ExecutionEngine

RESEARCH_BUY = {"verdict": "BUY", "confidence": 0.9, "reasoning": "Broad, organic buzz"}
QUIET_REPORT = {"recommendations": [], "market_summary": "Nothing to do"}


def _pipeline(trading, llm=None, sources=None, limiter=None):
    quotes = FakeQuotes({"NVDA": 130.0})
    chains = ChainFactory.build_all_chains(llm) if llm is not None else {}
    execution = ExecutionEngine(
        trading, quotes, review_chain=chains.get("position_review"), notify=lambda **kw: True
    )
    return CyclePipeline(
        trading=trading,
        quotes=quotes,
        limiter=limiter or RateLimiter({}),
        execution=execution,
        sources=list(sources or []),
        researcher=Researcher(chains["signal_research"], quotes) if llm is not None else None,
        analyst=AnalystEngine(chains["analyst"], execution) if llm is not None else None,
    )


def _agent(tmp_path, state, pipeline, **kw):
    scheduler = Scheduler(state, pipeline, state_path=tmp_path / "state.json", clock=lambda: NOW, **kw)
    return TradingAgent(scheduler)


def _nvda_source():
    return FakeSource("stocktwits", [make_signal("NVDA", 0.6, volume=25)])


class _ExplodingGraph:
    def invoke(self, state):
        raise RuntimeError("graph blew up")


# ── Scheduler tick ───────────────────────────────────────────────────────────


class TestTick:
    def test_disabled_tick_is_a_no_op(self, tmp_path):
        trading = FakeTrading()
        source = _nvda_source()
        agent = _agent(tmp_path, AgentState(enabled=False), _pipeline(trading, sources=[source]))

        assert agent.trigger() is False
        assert trading.calls == []
        assert source.fetched == 0
        assert not (tmp_path / "state.json").exists()

    def test_failure_inside_tick_still_persists(self, tmp_path, state, feed):
        agent = _agent(tmp_path, state, _pipeline(FakeTrading()), graph=_ExplodingGraph())

        assert agent.trigger() is True
        assert "tick_error" in actions(feed)
        restored = load_state(tmp_path / "state.json")
        assert restored.enabled is True
        assert restored.logs[-1]["action"] == "tick_error"

    def test_limiter_reset_each_tick(self, tmp_path, state):
        limiter = RateLimiter({"finnhub": 1})
        limiter.consume("finnhub")
        agent = _agent(tmp_path, state, _pipeline(FakeTrading(is_open=False), limiter=limiter))

        agent.trigger()
        assert limiter.count("finnhub") == 0

    def test_full_cycle_researches_and_buys(self, tmp_path, state, feed):
        trading = FakeTrading(cash=10_000)
        llm = FakeLLM([RESEARCH_BUY, QUIET_REPORT])
        agent = _agent(tmp_path, state, _pipeline(trading, llm, sources=[_nvda_source()]))

        agent.trigger()

        assert [o.symbol for o in trading.orders] == ["NVDA"]
        assert trading.orders[0].notional == 1800.0
        assert state.research_cache["NVDA"].verdict == "BUY"
        assert state.position_entries["NVDA"].entry_price == 130.0
        assert state.last_data_gather_run == NOW
        assert state.last_analyst_run == NOW
        assert len(llm.calls) == 2
        assert {"data_gathered", "buy_executed", "report"} <= set(actions(feed))

    def test_analyst_buy_sized_off_cash_left_after_research_buy(self, tmp_path, state):
        trading = FakeTrading(cash=10_000)
        report = {
            "recommendations": [
                {"action": "BUY", "symbol": "AMD", "confidence": 0.8, "reasoning": "Breakout"},
            ],
            "market_summary": "Risk on",
        }
        llm = FakeLLM([RESEARCH_BUY, report])
        agent = _agent(tmp_path, state, _pipeline(trading, llm, sources=[_nvda_source()]))

        agent.trigger()

        assert [(o.symbol, o.notional) for o in trading.orders] == [("NVDA", 1800.0), ("AMD", 1312.0)]

    def test_market_closed_gathers_but_never_trades(self, tmp_path, state):
        trading = FakeTrading(is_open=False)
        llm = FakeLLM([RESEARCH_BUY])
        agent = _agent(tmp_path, state, _pipeline(trading, llm, sources=[_nvda_source()]))

        agent.trigger()

        assert trading.orders == []
        assert "get_account" not in trading.calls
        assert "NVDA" in state.research_cache
        assert state.last_data_gather_run == NOW
        assert state.last_analyst_run == 0.0

    def test_clock_failure_treated_as_closed(self, tmp_path, state, feed):
        trading = FakeTrading(fail=("get_clock",))
        source = _nvda_source()
        agent = _agent(tmp_path, state, _pipeline(trading, sources=[source]))

        assert agent.trigger() is True
        assert "clock_error" in actions(feed)
        assert source.fetched == 1
        assert trading.orders == []

    def test_intervals_gate_the_passes(self, tmp_path, state):
        state.last_data_gather_run = NOW - 30
        state.last_analyst_run = NOW - 60
        trading = FakeTrading()
        source = _nvda_source()
        agent = _agent(tmp_path, state, _pipeline(trading, sources=[source]))

        agent.trigger()

        assert source.fetched == 0
        assert trading.calls == ["get_clock"]

    def test_exits_run_without_llm(self, tmp_path, state):
        trading = FakeTrading(positions=[make_position("AAPL", 9.0), make_position("MSFT", 1.0)])
        agent = _agent(tmp_path, state, _pipeline(trading))

        agent.trigger()

        assert trading.closed == ["AAPL"]
        assert trading.orders == []

    def test_sold_symbol_not_rebought_same_tick(self, tmp_path, state):
        state.research_cache["AAPL"] = make_research("AAPL", confidence=0.9, timestamp=NOW - 10)
        state.last_data_gather_run = NOW
        trading = FakeTrading(positions=[make_position("AAPL", 9.0)])
        llm = FakeLLM([QUIET_REPORT])
        agent = _agent(tmp_path, state, _pipeline(trading, llm))

        agent.trigger()

        assert trading.closed == ["AAPL"]
        assert trading.orders == []


# ── Admin surface ────────────────────────────────────────────────────────────


class TestAdmin:
    def test_enable_disable_logged_and_persisted(self, tmp_path, feed):
        agent = _agent(tmp_path, AgentState(), _pipeline(FakeTrading()))

        agent.enable()
        assert load_state(tmp_path / "state.json").enabled is True
        agent.disable()
        assert load_state(tmp_path / "state.json").enabled is False
        assert actions(feed) == ["agent_enabled", "agent_disabled"]

    def test_kill_clears_transient_state(self, tmp_path, state):
        state.signal_cache = [make_signal("NVDA", 0.5)]
        state.research_cache["NVDA"] = make_research("NVDA")
        agent = _agent(tmp_path, state, _pipeline(FakeTrading()))

        agent.kill()

        assert state.enabled is False
        assert state.signal_cache == []
        assert state.research_cache == {}

    def test_config_update_validated(self, tmp_path, state):
        agent = _agent(tmp_path, state, _pipeline(FakeTrading()))

        updated = agent.update_config({"max_positions": 5, "take_profit_pct": 12})
        assert updated["max_positions"] == 5
        assert load_state(tmp_path / "state.json").config.take_profit_pct == 12

    @pytest.mark.parametrize("updates", [
        {"take_profit_pct": -1},
        {"min_sentiment_score": 1.5},
        {"max_positions": "many"},
        {"not_a_setting": True},
    ])
    def test_bad_config_rejected_unchanged(self, tmp_path, state, updates):
        agent = _agent(tmp_path, state, _pipeline(FakeTrading()))
        before = agent.get_config()

        with pytest.raises(ConfigurationError):
            agent.update_config(updates)

        assert agent.get_config() == before

    def test_status_survives_broker_outage(self, tmp_path, state):
        trading = FakeTrading(fail=("get_account",))
        agent = _agent(tmp_path, state, _pipeline(trading))

        status = agent.status()

        assert status["account"] is None
        assert status["enabled"] is True
        assert status["llm_enabled"] is False
        assert status["config"]["max_positions"] == state.config.max_positions

    def test_status_reports_positions(self, tmp_path, state):
        trading = FakeTrading(positions=[make_position("AAPL", 5.0)])
        status = _agent(tmp_path, state, _pipeline(trading)).status()

        assert status["positions"][0]["symbol"] == "AAPL"
        assert status["positions"][0]["pl_pct"] == pytest.approx(5.0)
        assert status["clock"]["is_open"] is True

    def test_views(self, tmp_path, state, feed):
        state.signal_cache = [make_signal("NVDA", 0.5), make_signal("NVDA", 0.3, source="reddit")]
        state.research_cache["NVDA"] = make_research("NVDA")
        agent = _agent(tmp_path, state, _pipeline(FakeTrading()))
        for i in range(5):
            feed.log("System", f"event_{i}")

        signals = agent.get_signals()
        assert len(signals["signals"]) == 2
        assert signals["composites"][0]["sources"] == ["reddit", "stocktwits"]
        assert agent.get_research()["NVDA"]["verdict"] == "BUY"
        assert agent.get_costs()["calls"] == 0
        assert [e["action"] for e in agent.get_logs(limit=2)] == ["event_3", "event_4"]

    def test_feed_restored_from_state(self, tmp_path, feed):
        state = AgentState(logs=[{"timestamp": "t", "agent": "System", "action": "agent_enabled"}])
        agent = _agent(tmp_path, state, _pipeline(FakeTrading()))
        assert agent.get_logs() == state.logs
