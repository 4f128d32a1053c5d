"""
Timer-driven control loop.

Every TICK_INTERVAL_SECONDS the scheduler runs one tick: reset the per-cycle
rate limits, invoke the cycle graph, persist the state. Exactly one tick runs
at a time; admin calls on TradingAgent take the same lock.
"""

import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from sentiment_agent.activity import get_feed, log_activity
from sentiment_agent.config import TICK_INTERVAL_SECONDS
from sentiment_agent.graph.graph import build_cycle_graph
from sentiment_agent.graph.pipeline import CyclePipeline
from sentiment_agent.state import AgentState
from sentiment_agent.storage import save_state


class Scheduler:
    def __init__(
        self,
        state: AgentState,
        pipeline: CyclePipeline,
        state_path: Optional[Path] = None,
        interval_s: float = TICK_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
        graph=None,
    ):
        self.state = state
        self.pipeline = pipeline
        self.state_path = state_path
        self.interval_s = interval_s
        self.clock = clock
        self.lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.graph = graph if graph is not None else build_cycle_graph(pipeline)

        # persisted activity survives restarts
        if state.logs and not get_feed().snapshot():
            get_feed().restore(state.logs)

    # ── One tick ─────────────────────────────────────────────────────────────

    def tick(self) -> bool:
        """Run one cycle. Returns False when the agent is disabled (nothing ran).

        Never raises: failures inside the cycle are logged to the activity
        feed, and the state is persisted whether or not the cycle completed.
        """
        with self.lock:
            if not self.state.enabled:
                return False

            self.pipeline.limiter.reset()
            now = self.clock()
            print(f"\n⏰ Tick: {datetime.fromtimestamp(now, timezone.utc).isoformat()}")
            try:
                self.graph.invoke({"agent_state": self.state, "now": now})
            except Exception as exc:
                log_activity("System", "tick_error", error=f"{type(exc).__name__}: {exc}")
            finally:
                self.persist()
            return True

    def persist(self) -> None:
        with self.lock:
            self.state.logs = get_feed().snapshot()
            try:
                save_state(self.state, self.state_path)
            except OSError as exc:
                print(f"[STATE] ❌ Failed to persist state: {exc}")

    # ── Loop control ─────────────────────────────────────────────────────────

    def run_forever(self) -> None:
        """Tick now, then every ``interval_s`` until ``stop()``."""
        print(f"🚀 Scheduler started (tick every {self.interval_s:g}s)")
        self._stop.clear()
        while not self._stop.is_set():
            self.tick()
            self._stop.wait(self.interval_s)
        print("🛑 Scheduler stopped")

    def start(self) -> threading.Thread:
        """Run the loop on a daemon thread."""
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self.run_forever, name="scheduler", daemon=True)
            self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
