"""
Shared plumbing for feed sources.

A feed delivers events to the synchronizer in arrival order and, after every
applied event, pushes the fresh snapshot to the UI queue.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from ..config import FeedSettings
from ..engine.synchronizer import StreamSynchronizer
from ..types import StateView

logger = logging.getLogger(__name__)


class FeedBase:
    """
    Common state for websocket and simulated feeds.

    Subclasses implement run() and call _deliver() for each decoded event.
    """

    def __init__(self, synchronizer: StreamSynchronizer, settings: FeedSettings | None = None) -> None:
        self.settings = settings or FeedSettings()
        self.synchronizer = synchronizer
        self._running = False
        self._connected = False

        # Rolling event rate tracking
        self._event_count: int = 0
        self._event_count_last: int = 0
        self._rate_calc_time: float = time.perf_counter()
        self._events_per_sec: float = 0.0

        # Output queue for UI - newest snapshot wins when the UI lags
        self.snapshot_queue: asyncio.Queue[StateView] = asyncio.Queue(
            maxsize=self.settings.snapshot_queue_size
        )

    @property
    def running(self) -> bool:
        return self._running

    @property
    def connected(self) -> bool:
        """True while the feed is attached to its source."""
        return self._connected

    @property
    def events_per_sec(self) -> float:
        """Rolling event rate. Reading it also decays the rate when the feed is quiet."""
        self._update_rate()
        return self._events_per_sec

    def _deliver(self, event: Any) -> bool:
        """Apply one event and publish the resulting snapshot."""
        applied = self.synchronizer.apply(event)
        if applied:
            self._event_count += 1
            self._update_rate()
            self._publish(self.synchronizer.snapshot())
        return applied

    def _update_rate(self) -> None:
        now = time.perf_counter()
        elapsed = now - self._rate_calc_time
        if elapsed >= 1.0:
            self._events_per_sec = (self._event_count - self._event_count_last) / elapsed
            self._event_count_last = self._event_count
            self._rate_calc_time = now

    def _publish(self, view: StateView) -> None:
        """Non-blocking put, dropping the oldest snapshot if the queue is full."""
        try:
            self.snapshot_queue.put_nowait(view)
        except asyncio.QueueFull:
            self.snapshot_queue.get_nowait()
            self.snapshot_queue.put_nowait(view)

    async def run(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        """Signal the feed to stop."""
        self._running = False
