"""
Central configuration for the sentiment trading agent.
Credentials, provider selection, paths and per-cycle budgets live here so
they're easy to find and override via env vars.

Runtime trading thresholds (sentiment floors, take-profit, sizing …) are part
of the persisted AgentConfig in sentiment_agent.state and can be changed
while the agent is running.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ── Paths ────────────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent     # project root
DATA_DIR = Path(os.getenv("AGENT_DATA_DIR", str(BASE_DIR / "data")))
STATE_FILE = DATA_DIR / "agent_state.json"

# ── Scheduler ────────────────────────────────────────────────────────────────
TICK_INTERVAL_SECONDS = int(os.getenv("TICK_INTERVAL_SECONDS", "30"))
ACTIVITY_LOG_LIMIT = int(os.getenv("ACTIVITY_LOG_LIMIT", "500"))

# ── LLM ──────────────────────────────────────────────────────────────────────
# One of: "langchain" | "openai-raw" | "openrouter" | "cloudflare-gateway"
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "langchain").strip().lower()
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
LLM_ANALYST_MODEL = os.getenv("LLM_ANALYST_MODEL", "gpt-4o")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.3"))

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "")
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "")

CLOUDFLARE_AI_GATEWAY_ACCOUNT_ID = os.getenv("CLOUDFLARE_AI_GATEWAY_ACCOUNT_ID", "")
CLOUDFLARE_AI_GATEWAY_ID = os.getenv("CLOUDFLARE_AI_GATEWAY_ID", "")
CLOUDFLARE_AI_GATEWAY_TOKEN = os.getenv("CLOUDFLARE_AI_GATEWAY_TOKEN", "")

# ── Alpaca ───────────────────────────────────────────────────────────────────
ALPACA_API_KEY = os.getenv("ALPACA_API_KEY", "")
ALPACA_SECRET_KEY = os.getenv("ALPACA_SECRET_KEY", "")
ALPACA_BASE_URL = os.getenv("ALPACA_BASE_URL", "https://paper-api.alpaca.markets")
ALPACA_DATA_URL = os.getenv("ALPACA_DATA_URL", "https://data.alpaca.markets")
USE_YFINANCE_FALLBACK = os.getenv("USE_YFINANCE_FALLBACK", "true").lower() == "true"

# ── Signal sources ───────────────────────────────────────────────────────────
FINNHUB_API_KEY = os.getenv("FINNHUB_API_KEY", "")
QUIVER_API_TOKEN = os.getenv("QUIVER_API_TOKEN", "")
REDDIT_USER_AGENT = os.getenv("REDDIT_USER_AGENT", "sentiment-agent/0.1")

# Comma-separated subreddits scanned every gather cycle
REDDIT_SUBREDDITS = [
    s.strip()
    for s in os.getenv("REDDIT_SUBREDDITS", "wallstreetbets,stocks,investing,options").split(",")
    if s.strip()
]

# Tickers whose headline RSS feeds are scored as the "news" source
NEWS_TICKERS = [
    t.strip().upper()
    for t in os.getenv("NEWS_TICKERS", "AAPL,MSFT,NVDA,TSLA").split(",")
    if t.strip()
]
NEWS_FEED_TEMPLATE = os.getenv(
    "NEWS_FEED_TEMPLATE",
    "https://feeds.finance.yahoo.com/rss/2.0/headline?s={ticker}&region=US&lang=en-US",
)

# ── Per-cycle API budgets ────────────────────────────────────────────────────
# Finnhub free tier is 60/min → 30 per 30s tick; Quiver and Alpaca are softer.
RATE_LIMIT_BUDGETS: dict[str, int] = {
    "finnhub": int(os.getenv("BUDGET_FINNHUB", "30")),
    "quiver": int(os.getenv("BUDGET_QUIVER", "20")),
    "alpaca": int(os.getenv("BUDGET_ALPACA", "50")),
    "stocktwits": int(os.getenv("BUDGET_STOCKTWITS", "20")),
    "reddit": int(os.getenv("BUDGET_REDDIT", "10")),
}

# ── Discord ──────────────────────────────────────────────────────────────────
DISCORD_WEBHOOK_URL = os.getenv("DISCORD_WEBHOOK_URL", "")
