"""Reddit hot listings for the configured finance subreddits."""

from typing import List, Optional

from sentiment_agent.config import REDDIT_SUBREDDITS, REDDIT_USER_AGENT
from sentiment_agent.core.rate_limiter import RateLimiter
from sentiment_agent.signals.scorer import RawPost

from .base import PostSource, get_json, source_weight

REDDIT_BASE = "https://www.reddit.com"
POSTS_PER_SUBREDDIT = 50


class RedditSource(PostSource):
    """One ``hot.json`` request per subreddit; tickers come from title + body."""

    name = "reddit"
    budget_key = "reddit"

    def __init__(self, subreddits: Optional[List[str]] = None, scorer=None):
        super().__init__(scorer)
        self.subreddits = list(subreddits if subreddits is not None else REDDIT_SUBREDDITS)

    def fetch_posts(self, limiter: RateLimiter, now: float) -> List[RawPost]:
        posts: List[RawPost] = []
        for subreddit in self.subreddits:
            if not limiter.consume(self.budget_key):
                print(f"[REDDIT] Budget exhausted before r/{subreddit}")
                break
            data = get_json(
                self.name,
                f"{REDDIT_BASE}/r/{subreddit}/hot.json",
                params={"limit": POSTS_PER_SUBREDDIT},
                headers={"User-Agent": REDDIT_USER_AGENT},
            )
            children = ((data or {}).get("data") or {}).get("children") or []
            weight = source_weight(subreddit)
            for child in children:
                post = (child or {}).get("data") or {}
                if post.get("stickied"):
                    continue
                text = f"{post.get('title', '')}\n{post.get('selftext', '')}"
                posts.append(
                    RawPost(
                        text=text,
                        created_at=post.get("created_utc", now),
                        source=self.name,
                        channel=subreddit,
                        source_weight=weight,
                        upvotes=post.get("ups", 0),
                        comments=post.get("num_comments", 0),
                        flair=post.get("link_flair_text"),
                    )
                )
        return posts
