"""
Main entry point for the sentiment trading agent.

• Loads the persisted agent state (or starts fresh, disabled).
• Ticks on a fixed interval (TICK_INTERVAL_SECONDS, default 30s).
• Each tick:  gather social signals → research candidates (data interval)
              manage exits → research buys → analyst pass (market open)
"""

import argparse
import sys
from pathlib import Path

# Ensure the package root is importable when launched as a script
_ROOT = Path(__file__).resolve().parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from sentiment_agent import create_agent
from sentiment_agent.config import TICK_INTERVAL_SECONDS


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the sentiment trading agent.")
    parser.add_argument("--enable", action="store_true", help="enable the agent before starting")
    parser.add_argument("--once", action="store_true", help="run a single tick and exit")
    parser.add_argument("--state", type=Path, default=None, help="path to the state JSON file")
    args = parser.parse_args()

    agent = create_agent(args.state)
    if args.enable:
        agent.enable()

    status = agent.status()
    print("🚀 Sentiment Agent started")
    print(f"   Enabled: {status['enabled']}")
    print(f"   LLM: {'configured' if status['llm_enabled'] else 'not configured (trading disabled)'}")
    print(f"   Tick interval: {TICK_INTERVAL_SECONDS}s")
    print()

    if args.once:
        agent.trigger()
        return

    try:
        agent.scheduler.run_forever()
    except KeyboardInterrupt:
        print("\n👋 Interrupted, saving state…")
        agent.scheduler.stop()
        agent.scheduler.persist()


if __name__ == "__main__":
    main()
