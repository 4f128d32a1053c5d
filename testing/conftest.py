import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from sentiment_agent.activity import ActivityFeed, set_feed
from sentiment_agent.state import AgentState


@pytest.fixture(autouse=True)
def feed():
    """Fresh activity feed per test."""
    fresh = ActivityFeed()
    set_feed(fresh)
    return fresh


@pytest.fixture
def state():
    return AgentState(enabled=True)
