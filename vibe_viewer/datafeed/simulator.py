"""
Simulated trading feed for offline use.

Emits the same event mix as the live server: an Init seed, a price tick per
interval following a noisy random walk, random buy/sell transactions that
nudge the price, sentiment lines on momentum changes and occasional launch
notices from the global scanner.

Usage:
    feed = SimulatedFeed(StreamSynchronizer(), seed=7)
    asyncio.create_task(feed.run())
"""

from __future__ import annotations

import asyncio
import random
import time
from typing import AsyncIterator

from ..config import FeedSettings
from ..engine.synchronizer import StreamSynchronizer
from ..types import (
    Event,
    Init,
    PriceTick,
    ScanNotice,
    SentimentUpdate,
    Transaction,
    TxKind,
)
from .base import FeedBase

BASE_PRICE = 0.000020
BUY_IMPACT = 1.005
SELL_IMPACT = 0.992
BUY_PROBABILITY = 0.55
TX_PROBABILITY = 0.6
SCAN_PROBABILITY = 0.15
PUMP_STREAK = 3          # Consecutive buys before the engine enters
POSITION_SIZE_SOL = 0.1

SENTIMENT_LINES = {
    "intro": "Neural link online. Watching order flow...",
    "pump": "Buy pressure building. Momentum is real, riding it.",
    "dump": "Sellers stepping in. Locking it down.",
}

_HEX = "0123456789abcdef"


class PaperPosition:
    """Single simulated position used to produce the engine status line."""

    def __init__(self) -> None:
        self.in_position = False
        self.entry_price = 0.0
        self.tokens = 0.0

    def buy(self, price: float, sol_amount: float) -> None:
        if self.in_position or price <= 0:
            return
        self.in_position = True
        self.entry_price = price
        self.tokens = sol_amount / price

    def sell(self) -> None:
        self.in_position = False
        self.entry_price = 0.0
        self.tokens = 0.0

    def status(self, price: float) -> str:
        if not self.in_position:
            return "IDLE"
        pnl = (price - self.entry_price) * self.tokens
        sign = "+" if pnl >= 0 else ""
        return f"HOLDING | Entry: {self.entry_price:.8f}\nPnL: {sign}{pnl:.4f} SOL"


def _fake_signature(rng: random.Random) -> str:
    return "".join(rng.choice(_HEX) for _ in range(64))


def _time_label() -> str:
    return time.strftime("%H:%M:%S")


async def event_stream(
    rng: random.Random | None = None,
    interval_ms: int = 2000,
    base_price: float = BASE_PRICE,
    max_ticks: int | None = None,
) -> AsyncIterator[Event]:
    """
    Yield simulated feed events.

    One Init first, then per tick: optional Transaction (+ SentimentUpdate on
    a momentum change), optional ScanNotice, and always a PriceTick.
    Stops after max_ticks ticks if given.
    """
    rng = rng or random.Random()
    price = base_price
    position = PaperPosition()
    consecutive_buys = 0

    yield Init(history=(), price=price, sentiment=SENTIMENT_LINES["intro"])

    tick = 0
    while max_ticks is None or tick < max_ticks:
        tick += 1
        price = max(1e-12, price + (rng.random() - 0.5) * base_price * 0.005)

        if rng.random() < TX_PROBABILITY:
            is_buy = rng.random() < BUY_PROBABILITY
            amount = float(rng.randint(1000, 51000))

            if is_buy:
                price *= BUY_IMPACT
                consecutive_buys += 1
                if consecutive_buys >= PUMP_STREAK:
                    position.buy(price, POSITION_SIZE_SOL)
                    yield SentimentUpdate(SENTIMENT_LINES["pump"])
            else:
                price *= SELL_IMPACT
                consecutive_buys = 0
                position.sell()
                yield SentimentUpdate(SENTIMENT_LINES["dump"])

            yield Transaction(
                kind=TxKind.BUY if is_buy else TxKind.SELL,
                amount=amount,
                price=price,
                hash=_fake_signature(rng),
                timestamp=_time_label(),
            )

        if rng.random() < SCAN_PROBABILITY:
            sig = _fake_signature(rng)
            yield ScanNotice(f"NEW LAUNCH DETECTED! Sig: {sig[:8]}...")

        yield PriceTick(time=_time_label(), price=price, status=position.status(price))

        if interval_ms > 0:
            await asyncio.sleep(interval_ms / 1000.0)


class SimulatedFeed(FeedBase):
    """Drop-in replacement for FeedClient that needs no server."""

    def __init__(
        self,
        synchronizer: StreamSynchronizer,
        settings: FeedSettings | None = None,
        seed: int | None = None,
        max_ticks: int | None = None,
    ) -> None:
        super().__init__(synchronizer, settings)
        self._rng = random.Random(seed)
        self._max_ticks = max_ticks

    async def run(self) -> None:
        self._running = True
        self._connected = True
        stream = event_stream(
            rng=self._rng,
            interval_ms=self.settings.tick_interval_ms,
            max_ticks=self._max_ticks,
        )
        try:
            async for event in stream:
                if not self._running:
                    break
                self._deliver(event)
        finally:
            await stream.aclose()
            self._running = False
            self._connected = False
