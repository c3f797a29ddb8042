"""
Data types for Vibe Viewer.

Performance notes:
- Using NamedTuple for immutable, memory-efficient structures
- Inbound events and the rendered state view are both plain values
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Union


class TxKind(str, Enum):
    """Transaction side as sent on the wire."""
    BUY = "buy"
    SELL = "sell"


class PricePoint(NamedTuple):
    """Single point of the price series."""
    time: str     # Display label, arrival order is authoritative
    price: float


class Init(NamedTuple):
    """
    Full-state seed, sent once per connection.

    Replaces price history, current price and sentiment. Logs are untouched.
    """
    history: tuple[PricePoint, ...]
    price: float
    sentiment: str


class PriceTick(NamedTuple):
    """Incremental price update."""
    time: str
    price: float
    status: str   # Engine status line


class Transaction(NamedTuple):
    """Single transaction. Stored as-is in the transaction log."""
    kind: TxKind
    amount: float
    price: float
    hash: str
    timestamp: str


class SentimentUpdate(NamedTuple):
    text: str


class ScanNotice(NamedTuple):
    message: str


Event = Union[Init, PriceTick, Transaction, SentimentUpdate, ScanNotice]


class StateView(NamedTuple):
    """
    Immutable read of the synchronizer state.

    This is what the UI consumes. Sequences are tuples so a view can be
    handed across threads without copying.
    """
    price_history: tuple[PricePoint, ...]        # Oldest first
    transaction_log: tuple[Transaction, ...]     # Newest first
    scan_log: tuple[str, ...]                    # Newest first
    current_price: float
    sentiment: str
    engine_status: str
