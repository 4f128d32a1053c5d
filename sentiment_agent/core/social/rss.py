"""
Headline news source – one RSS feed per watched ticker, parsed with
feedparser and scored like any other post.
"""

import calendar
import re
from html.parser import HTMLParser
from typing import List, Optional

import feedparser

from sentiment_agent.config import NEWS_FEED_TEMPLATE, NEWS_TICKERS
from sentiment_agent.core.rate_limiter import RateLimiter
from sentiment_agent.signals.scorer import RawPost

from .base import PostSource, source_weight


class _HTMLToTextParser(HTMLParser):
    """Strip HTML tags and return plain text."""

    def __init__(self):
        super().__init__()
        self._parts: list[str] = []

    def handle_data(self, data: str):
        text = data.strip()
        if text:
            self._parts.append(text)

    def get_text(self) -> str:
        return " ".join(self._parts)


def clean_html(raw: str) -> str:
    """Remove HTML tags and collapse whitespace."""
    parser = _HTMLToTextParser()
    parser.feed(raw or "")
    parser.close()
    return re.sub(r"\s+", " ", parser.get_text()).strip()


class NewsFeedSource(PostSource):
    name = "news"
    budget_key = "news"

    def __init__(
        self,
        tickers: Optional[List[str]] = None,
        feed_template: str = NEWS_FEED_TEMPLATE,
        scorer=None,
    ):
        super().__init__(scorer)
        self.tickers = [t.upper() for t in (tickers if tickers is not None else NEWS_TICKERS)]
        self.feed_template = feed_template

    def fetch_posts(self, limiter: RateLimiter, now: float) -> List[RawPost]:
        posts: List[RawPost] = []
        weight = source_weight(self.name)

        for ticker in self.tickers:
            if not limiter.consume(self.budget_key):
                break
            url = self.feed_template.format(ticker=ticker)
            feed = feedparser.parse(url)
            if feed.get("bozo") and not feed.entries:
                print(f"[RSS] Failed to parse {url}: {feed.get('bozo_exception')}")
                continue

            kept = 0
            for entry in feed.entries:
                title = str(entry.get("title", ""))
                summary = clean_html(str(entry.get("summary", "")))
                # Only keep articles that actually mention the ticker
                if ticker.lower() not in f"{title} {summary}".lower():
                    continue
                published = entry.get("published_parsed")
                created_at = calendar.timegm(published) if published else now
                posts.append(
                    RawPost(
                        text=f"{title}. {summary}",
                        created_at=created_at,
                        source=self.name,
                        channel=ticker,
                        source_weight=weight,
                        flair="News",
                        tickers=[ticker],
                    )
                )
                kept += 1
            print(f"[RSS] {ticker}: kept {kept} of {len(feed.entries)} headlines")

        return posts
