"""
Tests for LLM research: structured chain parsing, the verdict cache TTL
and per-candidate failure handling.

Usage:
    pytest testing/test_research.py -v
"""

import pytest

from fakes import NOW, FakeLLM, FakeQuotes, actions, make_research, make_signal
from sentiment_agent.errors import ProviderError, ResearchParseError
from sentiment_agent.graph.chains import ChainFactory, ResearchVerdict, parse_structured
from sentiment_agent.research import ResearchCache, Researcher
from sentiment_agent.signals import merge_signals
from sentiment_agent.state import AgentConfig

BUY_VERDICT = {
    "verdict": "buy",
    "confidence": 0.82,
    "reasoning": "Volume confirms the move",
    "red_flags": [],
    "catalysts": ["earnings beat"],
}


def _researcher(llm):
    chain = ChainFactory.build_chain_by_name("signal_research", llm)
    return Researcher(chain, FakeQuotes({"NVDA": 120.5}))


def _candidates(*symbols):
    return merge_signals([make_signal(s, 0.6) for s in symbols], NOW)


# ── Structured parsing ───────────────────────────────────────────────────────


class TestParseStructured:
    def test_code_fenced_json_is_accepted(self):
        content = '```json\n{"verdict": "WAIT", "confidence": 0.5, "reasoning": "unclear"}\n```'
        verdict = parse_structured("signal_research", content, ResearchVerdict)
        assert verdict.verdict == "WAIT"

    @pytest.mark.parametrize("content", [
        "not json at all",
        "[1, 2, 3]",
        '{"verdict": "MAYBE", "confidence": 0.5, "reasoning": "?"}',
        '{"verdict": "BUY", "confidence": 1.7, "reasoning": "too sure"}',
    ])
    def test_bad_answers_raise_parse_error(self, content):
        with pytest.raises(ResearchParseError):
            parse_structured("signal_research", content, ResearchVerdict)

    def test_unknown_chain_name(self):
        with pytest.raises(KeyError):
            ChainFactory.build_chain_by_name("nope", FakeLLM())

    @pytest.mark.parametrize("chain_name, expected", [
        ("signal_research", "small-model"),
        ("position_review", "small-model"),
        ("analyst", "big-model"),
    ])
    def test_model_follows_chain_role(self, chain_name, expected):
        settings = AgentConfig().updated({"llm_model": "small-model", "llm_analyst_model": "big-model"})
        chain = ChainFactory.build_chain_by_name(chain_name, FakeLLM())
        assert chain.model_for(settings) == expected


# ── Verdict cache ────────────────────────────────────────────────────────────


class TestResearchCache:
    def test_entry_expires_at_ttl(self):
        entries = {"AAPL": make_research("AAPL", timestamp=NOW)}
        assert ResearchCache(entries, clock=lambda: NOW + 299).get("aapl") is not None
        assert ResearchCache(entries, clock=lambda: NOW + 300).get("AAPL") is None

    def test_purge_stale(self):
        entries = {
            "OLD": make_research("OLD", timestamp=NOW - 400),
            "NEW": make_research("NEW", timestamp=NOW - 10),
        }
        cache = ResearchCache(entries, clock=lambda: NOW)
        assert cache.purge_stale() == 1
        assert list(entries) == ["NEW"]


# ── Researcher ───────────────────────────────────────────────────────────────


class TestResearcher:
    def test_verdict_cached_and_cost_recorded(self, state):
        llm = FakeLLM([BUY_VERDICT])
        results = _researcher(llm).research(_candidates("NVDA"), state, NOW)

        result = results["NVDA"]
        assert (result.verdict, result.confidence, result.timestamp) == ("BUY", 0.82, NOW)
        assert result.catalysts == ["earnings beat"]
        assert state.research_cache["NVDA"] is result
        assert state.cost_tracker.calls == 1
        assert state.cost_tracker.total_usd == pytest.approx(0.01)
        assert llm.calls[0]["response_format"] == {"type": "json_object"}
        assert llm.calls[0]["model"] == state.config.llm_model

    def test_prompt_carries_price_and_sentiment(self, state):
        llm = FakeLLM([BUY_VERDICT])
        _researcher(llm).research(_candidates("NVDA"), state, NOW)

        prompt = llm.calls[0]["messages"][-1]["content"]
        assert llm.calls[0]["messages"][-1]["role"] == "user"
        assert "NVDA" in prompt
        assert "$120.50" in prompt
        assert "60%" in prompt

    def test_cached_verdict_served_within_ttl(self, state):
        llm = FakeLLM([BUY_VERDICT, {**BUY_VERDICT, "verdict": "SKIP"}])
        researcher = _researcher(llm)

        researcher.research(_candidates("NVDA"), state, NOW)
        again = researcher.research(_candidates("NVDA"), state, NOW + 299)
        assert len(llm.calls) == 1
        assert again["NVDA"].verdict == "BUY"

        later = researcher.research(_candidates("NVDA"), state, NOW + 301)
        assert len(llm.calls) == 2
        assert later["NVDA"].verdict == "SKIP"
        assert state.research_cache["NVDA"].timestamp == NOW + 301

    def test_one_call_per_candidate(self, state):
        llm = FakeLLM([BUY_VERDICT, BUY_VERDICT, BUY_VERDICT])
        results = _researcher(llm).research(_candidates("NVDA", "AMD", "TSLA"), state, NOW)
        assert len(llm.calls) == 3
        assert set(results) == {"NVDA", "AMD", "TSLA"}

    def test_parse_failure_skips_candidate(self, state, feed):
        llm = FakeLLM(["I think you should buy it!", BUY_VERDICT])
        results = _researcher(llm).research(_candidates("NVDA", "AMD"), state, NOW)

        assert len(results) == 1
        assert len(state.research_cache) == 1
        assert "parse_error" in actions(feed)
        # the failed call was still paid for
        assert state.cost_tracker.calls == 2

    def test_provider_failure_leaves_cache_untouched(self, state, feed):
        state.research_cache["NVDA"] = make_research("NVDA", verdict="WAIT", timestamp=NOW - 400)
        llm = FakeLLM([ProviderError("fake-llm", "boom", status=500)])

        results = _researcher(llm).research(_candidates("NVDA"), state, NOW)

        assert results == {}
        assert "NVDA" not in state.research_cache
        assert "error" in actions(feed)
