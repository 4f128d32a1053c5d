"""
Tests for the social / news sources and the per-cycle rate limiter.

Provider HTTP is replaced by monkeypatching each module's ``get_json`` (or
``feedparser.parse``), so nothing here touches the network.

Usage:
    pytest testing/test_sources.py -v
"""

import time
from datetime import datetime, timezone

import feedparser
import pytest

from fakes import NOW, actions
from sentiment_agent.core.rate_limiter import DEFAULT_BUDGET, RateLimiter
from sentiment_agent.core.social import (
    CongressTradingSource,
    NewsFeedSource,
    QuiverSource,
    RedditSource,
    SignalSource,
    StockTwitsSource,
)
from sentiment_agent.core.social import quiver, reddit, rss, stocktwits
from sentiment_agent.core.social.rss import clean_html
from sentiment_agent.errors import ProviderError


# ── Rate limiter ─────────────────────────────────────────────────────────────


class TestRateLimiter:
    def test_budget_exhausts_and_resets(self):
        limiter = RateLimiter({"finnhub": 2})

        assert limiter.consume("finnhub")
        assert limiter.consume("finnhub")
        assert not limiter.consume("finnhub")
        assert limiter.count("finnhub") == 2
        assert limiter.remaining("finnhub") == 0

        limiter.reset()
        assert limiter.consume("finnhub")
        assert limiter.snapshot() == {"finnhub": 1}

    def test_unknown_provider_gets_default_budget(self):
        limiter = RateLimiter({})
        assert limiter.budget("somewhere") == DEFAULT_BUDGET
        assert limiter.remaining("somewhere") == DEFAULT_BUDGET


# ── Reddit ───────────────────────────────────────────────────────────────────


def _listing(*posts):
    return {"data": {"children": [{"data": p} for p in posts]}}


def _reddit_post(title, **extra):
    return {"title": title, "selftext": "", "created_utc": NOW - 60, "ups": 120, "num_comments": 30, **extra}


class TestReddit:
    def test_hot_listing_becomes_signal(self, monkeypatch):
        listing = _listing(
            *[_reddit_post(f"$GME squeeze incoming #{i}", link_flair_text="DD") for i in range(5)],
            _reddit_post("$GME daily thread, puts", stickied=True),
        )
        monkeypatch.setattr(reddit, "get_json", lambda *a, **kw: listing)

        [signal] = RedditSource(["wallstreetbets"]).fetch(RateLimiter({"reddit": 10}), NOW)

        assert signal.symbol == "GME"
        assert signal.source == "reddit"
        assert signal.source_detail == "wallstreetbets"
        assert signal.volume == 5
        assert signal.raw_sentiment == 1.0
        assert signal.source_weight == pytest.approx(0.6)
        assert signal.total_upvotes == 600

    def test_budget_caps_requests(self, monkeypatch):
        requested = []

        def fake_get_json(provider, url, **kw):
            requested.append(url)
            return _listing()

        monkeypatch.setattr(reddit, "get_json", fake_get_json)
        RedditSource(["wallstreetbets", "stocks"]).fetch(RateLimiter({"reddit": 1}), NOW)

        assert len(requested) == 1

    def test_provider_error_yields_nothing(self, monkeypatch, feed):
        def boom(*a, **kw):
            raise ProviderError("reddit", "too many requests", status=429)

        monkeypatch.setattr(reddit, "get_json", boom)

        assert RedditSource(["stocks"]).fetch(RateLimiter({}), NOW) == []
        assert feed.snapshot()[-1]["agent"] == "Reddit"
        assert actions(feed) == ["error"]

    def test_malformed_listing_yields_nothing(self, monkeypatch, feed):
        monkeypatch.setattr(reddit, "get_json", lambda *a, **kw: {"data": {"children": "oops"}})

        assert RedditSource(["stocks"]).fetch(RateLimiter({}), NOW) == []
        assert actions(feed) == ["malformed_response"]


# ── StockTwits ───────────────────────────────────────────────────────────────


def _message(body, sentiment=None, likes=3):
    entities = {"sentiment": {"basic": sentiment}} if sentiment else {}
    return {"body": body, "created_at": "2027-01-15T14:00:00Z", "likes": {"total": likes}, "entities": entities}


class TestStockTwits:
    def test_trending_streams_scored_per_symbol(self, monkeypatch):
        def fake_get_json(provider, url, params=None, headers=None):
            if url.endswith("trending/symbols.json"):
                return {"symbols": [{"symbol": "NVDA"}, {"symbol": "BROKEN"}]}
            if "BROKEN" in url:
                raise ProviderError("stocktwits", "not found", status=404)
            return {"messages": [_message("earnings tomorrow", "Bullish") for _ in range(6)]}

        monkeypatch.setattr(stocktwits, "get_json", fake_get_json)
        limiter = RateLimiter({"stocktwits": 20})

        [signal] = StockTwitsSource(pause_s=0).fetch(limiter, NOW)

        assert signal.symbol == "NVDA"
        assert signal.volume == 6
        assert signal.raw_sentiment == 1.0
        assert limiter.count("stocktwits") == 3

    def test_budget_stops_stream_requests(self, monkeypatch):
        streams = []

        def fake_get_json(provider, url, params=None, headers=None):
            if url.endswith("trending/symbols.json"):
                return {"symbols": [{"symbol": s} for s in ("AAA", "BBB", "CCC")]}
            streams.append(url)
            return {"messages": []}

        monkeypatch.setattr(stocktwits, "get_json", fake_get_json)
        StockTwitsSource(pause_s=0).fetch(RateLimiter({"stocktwits": 2}), NOW)

        assert len(streams) == 1

    def test_parse_timestamp(self):
        assert stocktwits.parse_timestamp("2027-01-15T14:00:00Z", 0.0) == datetime(
            2027, 1, 15, 14, tzinfo=timezone.utc
        ).timestamp()
        assert stocktwits.parse_timestamp("not a date", 42.0) == 42.0
        assert stocktwits.parse_timestamp(None, 42.0) == 42.0


# ── Quiver ───────────────────────────────────────────────────────────────────


class TestQuiver:
    def test_rows_to_signals(self):
        now = datetime(2027, 1, 15, 12, 0, tzinfo=timezone.utc).timestamp()
        rows = [
            {"Ticker": "gme", "Mentions": 12, "Bullish": 6, "Bearish": 2, "Date": "2027-01-15", "Time": "08:00:00"},
            {"Ticker": "GME", "Mentions": 9, "Bullish": 1, "Bearish": 3, "Date": "2027-01-15", "Time": "11:30:00"},
            {"Ticker": "AMC", "Mentions": 3, "Bullish": 3, "Bearish": 0, "Date": "2027-01-15"},
            {"Ticker": "BAD", "Mentions": "lots"},
        ]
        [signal] = QuiverSource(token="t").rows_to_signals(rows, now)

        # the 11:30 row is fresher than the 08:00 one
        assert signal.symbol == "GME"
        assert signal.volume == 9
        assert signal.weighted_sentiment == pytest.approx(-0.5)
        assert signal.source_detail == "wallstreetbets"
        assert signal.freshness > 0.8

    def test_requires_token(self):
        assert not QuiverSource(token="").is_configured()
        assert QuiverSource(token="").fetch(RateLimiter({}), NOW) == []


def _trade(ticker, kind, date, member="Rep. A"):
    return {"Ticker": ticker, "Type": kind, "TransactionDate": date, "Representative": member}


class TestCongressTrading:
    def test_purchases_and_sales_tallied(self):
        now = datetime(2027, 1, 15, 12, 0, tzinfo=timezone.utc).timestamp()
        rows = [
            _trade("nvda", "Purchase", "2027-01-10", "Rep. A"),
            _trade("NVDA", "Purchase", "2027-01-10", "Rep. B"),
            _trade("NVDA", "Purchase", "2027-01-11", "Rep. A"),
            _trade("NVDA", "Sale (Partial)", "2027-01-12 00:00:00", "Rep. C"),
            _trade("AAPL", "Purchase", "2027-01-14"),
            _trade("AAPL", "Purchase", "2027-01-14"),
            *[_trade("TSLA", "Purchase", "2026-11-01") for _ in range(3)],
            *[_trade("MSFT", "Exchange", "2027-01-14") for _ in range(3)],
            {"Ticker": "AMD", "Type": "Purchase", "TransactionDate": "sometime"},
        ]

        [signal] = CongressTradingSource(token="t").rows_to_signals(rows, now)

        assert signal.symbol == "NVDA"
        assert signal.source == "congress"
        assert signal.volume == 4
        assert (signal.bullish_count, signal.bearish_count) == (3, 1)
        assert signal.weighted_sentiment == pytest.approx(0.5)
        # newest trade is 3.5 days old against a 7-day half life
        assert signal.freshness == pytest.approx(0.5 ** 0.5)
        assert "3 member(s)" in signal.reason

    def test_quiver_feeds_share_one_budget(self, monkeypatch):
        requested = []

        def fake_get_json(provider, url, params=None, headers=None):
            requested.append(url.rsplit("/", 1)[-1])
            assert headers["Authorization"] == "Token t"
            return []

        monkeypatch.setattr(quiver, "get_json", fake_get_json)
        limiter = RateLimiter({"quiver": 1})

        QuiverSource(token="t").fetch(limiter, NOW)
        CongressTradingSource(token="t").fetch(limiter, NOW)

        assert requested == ["wallstreetbets"]

    def test_provider_error_yields_nothing(self, monkeypatch, feed):
        def boom(*a, **kw):
            raise ProviderError("quiver", "forbidden", status=403)

        monkeypatch.setattr(quiver, "get_json", boom)

        assert CongressTradingSource(token="t").fetch(RateLimiter({}), NOW) == []
        assert feed.snapshot()[-1]["agent"] == "Congress"
        assert actions(feed) == ["error"]


class _MisbehavingSource(SignalSource):
    name = "misbehaving"

    def collect(self, limiter, now):
        raise KeyError("data")


class TestSourceContract:
    def test_malformed_payload_never_raises(self, feed):
        assert _MisbehavingSource().fetch(RateLimiter({}), NOW) == []
        assert feed.snapshot()[-1]["agent"] == "Misbehaving"
        assert actions(feed) == ["malformed_response"]


# ── News RSS ─────────────────────────────────────────────────────────────────


class TestNewsFeed:
    def test_clean_html(self):
        assert clean_html("<p>Apple <b>beats</b>\n estimates</p>") == "Apple beats estimates"
        assert clean_html("") == ""

    def test_headlines_mentioning_ticker_scored(self, monkeypatch):
        published = time.gmtime(NOW - 600)
        entries = [
            feedparser.FeedParserDict(
                title=f"AAPL shares rally after upgrade #{i}",
                summary="<p>Analysts see <b>upside</b></p>",
                published_parsed=published,
            )
            for i in range(5)
        ]
        entries.append(feedparser.FeedParserDict(title="Markets wrap", summary="Nothing about it"))
        parsed = feedparser.FeedParserDict(bozo=0, entries=entries)
        monkeypatch.setattr(rss.feedparser, "parse", lambda url: parsed)

        [signal] = NewsFeedSource(tickers=["AAPL"]).fetch(RateLimiter({}), NOW)

        assert signal.symbol == "AAPL"
        assert signal.source == "news"
        assert signal.volume == 5
        assert signal.raw_sentiment == 1.0
        assert signal.freshness == pytest.approx(0.5 ** (10 / 120))

    def test_broken_feed_skipped(self, monkeypatch):
        broken = feedparser.FeedParserDict(bozo=1, bozo_exception="bad xml", entries=[])
        monkeypatch.setattr(rss.feedparser, "parse", lambda url: broken)

        assert NewsFeedSource(tickers=["AAPL"]).fetch(RateLimiter({}), NOW) == []
