"""
Stream state synchronizer.

HOT PATH: apply() is called for every inbound event.

Owns the display state (price series, transaction log, scan log and three
last-write-wins scalars) and is its only mutator. Each apply() is a single
state transition: new values are built first and committed together, so a
snapshot never observes half an event.

Unknown or malformed input is dropped. apply() does not raise.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from ..config import (
    INITIAL_PRICE,
    INITIAL_SENTIMENT,
    INITIAL_STATUS,
    PRICE_HISTORY_CAPACITY,
    SCAN_LOG_CAPACITY,
    TRANSACTION_LOG_CAPACITY,
)
from ..types import (
    Init,
    PricePoint,
    PriceTick,
    ScanNotice,
    SentimentUpdate,
    StateView,
    Transaction,
)
from .buffers import LogBuffer, SeriesBuffer

logger = logging.getLogger(__name__)


def _to_point(point: Any) -> PricePoint:
    """Accept a PricePoint or a (time, price) pair. Anything else is malformed."""
    if not isinstance(point, (PricePoint, tuple, list)) or len(point) != 2:
        raise TypeError(f"not a price point: {point!r}")
    time_label, price = point
    if not isinstance(time_label, str) or isinstance(price, bool) or not isinstance(price, (int, float)):
        raise TypeError(f"not a price point: {point!r}")
    return PricePoint(time_label, float(price))


class StreamSynchronizer:
    """
    Maintains bounded, display-ready state from a stream of typed events.

    Thread-safety: apply(), reset() and snapshot() share one lock, so the
    feed may run in a background thread while the UI thread reads.
    """

    __slots__ = (
        '_lock', '_history', '_transactions', '_scans',
        '_price', '_sentiment', '_status',
        'applied_count', 'dropped_count',
    )

    def __init__(
        self,
        history_capacity: int = PRICE_HISTORY_CAPACITY,
        tx_log_capacity: int = TRANSACTION_LOG_CAPACITY,
        scan_log_capacity: int = SCAN_LOG_CAPACITY,
    ) -> None:
        self._lock = threading.Lock()

        self._history: SeriesBuffer[PricePoint] = SeriesBuffer(history_capacity)
        self._transactions: LogBuffer[Transaction] = LogBuffer(tx_log_capacity)
        self._scans: LogBuffer[str] = LogBuffer(scan_log_capacity)

        self._price: float = INITIAL_PRICE
        self._sentiment: str = INITIAL_SENTIMENT
        self._status: str = INITIAL_STATUS

        # Counters for the status line
        self.applied_count: int = 0
        self.dropped_count: int = 0

    def apply(self, event: Any) -> bool:
        """
        Apply one event to the state.

        Returns True if the event was recognized and applied, False if it was
        dropped. Never raises.
        """
        with self._lock:
            applied = self._dispatch(event)
            if applied:
                self.applied_count += 1
            else:
                self.dropped_count += 1
                logger.debug("Dropped unrecognized event: %r", event)
            return applied

    def _dispatch(self, event: Any) -> bool:
        """Route by event type. Caller holds the lock."""
        match event:
            case Init():
                return self._apply_init(event)
            case PriceTick(time=time_label, price=price, status=status):
                self._price = price
                self._status = status
                self._history.append(PricePoint(time_label, price))
                return True
            case Transaction():
                self._transactions.prepend(event)
                return True
            case SentimentUpdate(text=text):
                self._sentiment = text
                return True
            case ScanNotice(message=message):
                self._scans.prepend(message)
                return True
            case _:
                return False

    def _apply_init(self, event: Init) -> bool:
        # Build the replacement series first, commit only if that succeeds
        staged: SeriesBuffer[PricePoint] = SeriesBuffer(self._history.capacity)
        try:
            staged.replace(_to_point(point) for point in event.history)
        except (TypeError, ValueError):
            return False

        self._history = staged
        self._price = event.price
        self._sentiment = event.sentiment
        return True

    def snapshot(self) -> StateView:
        """Immutable view of the current state. Does not mutate."""
        with self._lock:
            return StateView(
                price_history=self._history.to_tuple(),
                transaction_log=self._transactions.to_tuple(),
                scan_log=self._scans.to_tuple(),
                current_price=self._price,
                sentiment=self._sentiment,
                engine_status=self._status,
            )

    def reset(self) -> None:
        """Return to the initial empty state (used on reconnect)."""
        with self._lock:
            self._history.clear()
            self._transactions.clear()
            self._scans.clear()
            self._price = INITIAL_PRICE
            self._sentiment = INITIAL_SENTIMENT
            self._status = INITIAL_STATUS
