"""
File persistence for the agent state snapshot.
"""

import json
import os
from pathlib import Path
from typing import Optional

from sentiment_agent.config import STATE_FILE
from sentiment_agent.state import AgentState


def load_state(path: Optional[Path] = None) -> AgentState:
    """Load the persisted AgentState, or defaults if missing / unreadable."""
    path = Path(path or STATE_FILE)
    if path.exists():
        try:
            with open(path, "r") as f:
                return AgentState.from_dict(json.load(f))
        except (OSError, ValueError, TypeError) as exc:
            print(f"[STATE] Failed to load {path}: {exc} – starting from defaults")
    return AgentState()


def save_state(state: AgentState, path: Optional[Path] = None) -> None:
    """Write the state snapshot atomically (temp file + rename)."""
    path = Path(path or STATE_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w") as f:
        json.dump(state.to_dict(), f, indent=2, default=str)
    os.replace(tmp_path, path)
