"""
Runtime configuration for Vibe Viewer.

Buffer capacities are kept as named constants so they can be tuned per run
from the command line.
"""

from __future__ import annotations

from dataclasses import dataclass

# Buffer capacities
PRICE_HISTORY_CAPACITY = 50
TRANSACTION_LOG_CAPACITY = 50
SCAN_LOG_CAPACITY = 10

# Initial state before the first Init arrives
INITIAL_PRICE = 0.0
INITIAL_SENTIMENT = "Connecting..."
INITIAL_STATUS = "IDLE"

# Feed endpoint (Socket.IO over raw websocket, Engine.IO v4)
DEFAULT_FEED_URL = "ws://localhost:3001/socket.io/?EIO=4&transport=websocket"

# Reconnect backoff (seconds)
RECONNECT_BASE_SEC = 1.0
RECONNECT_FACTOR = 2.0
RECONNECT_MAX_SEC = 30.0

# UI snapshot queue - small, newest wins
SNAPSHOT_QUEUE_SIZE = 5

# Simulated feed cadence
DEFAULT_TICK_INTERVAL_MS = 2000


@dataclass(frozen=True)
class FeedSettings:
    """Settings for one dashboard run."""

    url: str = DEFAULT_FEED_URL
    history_capacity: int = PRICE_HISTORY_CAPACITY
    tx_log_capacity: int = TRANSACTION_LOG_CAPACITY
    scan_log_capacity: int = SCAN_LOG_CAPACITY
    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS
    reconnect_base_sec: float = RECONNECT_BASE_SEC
    reconnect_max_sec: float = RECONNECT_MAX_SEC
    snapshot_queue_size: int = SNAPSHOT_QUEUE_SIZE

    def reconnect_delay(self, attempt: int) -> float:
        """Exponential backoff delay for the given attempt (0-based), capped."""
        delay = self.reconnect_base_sec * (RECONNECT_FACTOR ** max(0, attempt))
        return min(delay, self.reconnect_max_sec)
