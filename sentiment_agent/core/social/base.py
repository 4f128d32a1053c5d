"""Abstract base class for social / market sentiment sources."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from sentiment_agent.activity import log_activity
from sentiment_agent.core.rate_limiter import RateLimiter
from sentiment_agent.errors import ProviderError
from sentiment_agent.signals.aggregator import aggregate_mentions
from sentiment_agent.signals.scorer import RawPost, SignalScorer
from sentiment_agent.state import Signal

_TIMEOUT = 10

# Credibility weight per source / subreddit, applied to every post's quality
SOURCE_WEIGHTS: Dict[str, float] = {
    "stocktwits": 0.85,
    "wallstreetbets": 0.6,
    "stocks": 0.9,
    "investing": 0.8,
    "options": 0.85,
    "news": 0.7,
    "quiver": 0.6,
    "congress": 0.9,
}
DEFAULT_SOURCE_WEIGHT = 0.7


def source_weight(name: str) -> float:
    return SOURCE_WEIGHTS.get(name.lower(), DEFAULT_SOURCE_WEIGHT)


def get_json(
    provider: str,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    """GET *url* and decode JSON.

    Raises:
        ProviderError: transport failure, non-2xx status or undecodable body
    """
    try:
        resp = requests.get(url, params=params, headers=headers, timeout=_TIMEOUT)
    except requests.RequestException as exc:
        raise ProviderError(provider, str(exc)) from exc
    if not resp.ok:
        raise ProviderError(provider, resp.text[:300], status=resp.status_code)
    try:
        return resp.json()
    except ValueError as exc:
        raise ProviderError(provider, f"invalid JSON: {exc}", status=resp.status_code) from exc


class SignalSource(ABC):
    """A feed that yields per-ticker Signals for one gather cycle.

    ``fetch`` never raises: any provider failure or malformed payload yields
    an empty list and an activity entry.
    """

    name: str = ""
    budget_key: str = ""

    @abstractmethod
    def collect(self, limiter: RateLimiter, now: float) -> List[Signal]:
        """Build this cycle's Signals, consuming ``budget_key`` once per request."""

    def fetch(self, limiter: RateLimiter, now: float) -> List[Signal]:
        try:
            return self.collect(limiter, now)
        except ProviderError as exc:
            log_activity(self.label, "error", message=str(exc))
            return []
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            log_activity(self.label, "malformed_response", message=str(exc))
            return []

    @property
    def label(self) -> str:
        return self.name.capitalize()

    def is_configured(self) -> bool:
        """Whether credentials needed by this source are present."""
        return True


class PostSource(SignalSource):
    """A feed of individual posts; scoring and aggregation are shared.

    Subclasses implement ``fetch_posts``.
    """

    def __init__(self, scorer: Optional[SignalScorer] = None):
        self.scorer = scorer or SignalScorer()

    @abstractmethod
    def fetch_posts(self, limiter: RateLimiter, now: float) -> List[RawPost]:
        """Fetch raw posts, consuming ``budget_key`` once per request."""

    def collect(self, limiter: RateLimiter, now: float) -> List[Signal]:
        posts = self.fetch_posts(limiter, now)
        mentions = [m for post in posts for m in self.scorer.score(post, now)]
        return aggregate_mentions(mentions, self.name, now)
