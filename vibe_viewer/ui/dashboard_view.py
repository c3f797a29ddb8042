"""
Trading dashboard TUI using Textual.

Displays:
- Top: Current price, engine status, feed rate
- Left: Price chart over the buffered history, live transaction feed
- Right: Sentiment panel, global scan log

The view only reads StateView snapshots from the feed queue; it never
touches the synchronizer.

Performance notes:
- One refresh per snapshot, snapshots are coalesced by the queue
- Chart resampling is vectorized with numpy
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Sequence

import numpy as np
from rich.console import RenderableType
from rich.panel import Panel
from rich.text import Text

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Static

if TYPE_CHECKING:
    from ..datafeed.base import FeedBase
    from ..types import StateView, Transaction

# Color scheme (terminal green)
BUY_COLOR = "#22c55e"
SELL_COLOR = "#ef4444"
CHART_COLOR = "#00ff41"
PRICE_COLOR = "#f8fafc"
BORDER_COLOR = "#14532d"
SCAN_COLOR = "#a855f7"

BLOCKS = " ▁▂▃▄▅▆▇█"
HASH_PREFIX = 8


def format_price(price: float) -> str:
    """Format price with 8 decimals, the feed quotes in SOL."""
    return f"{price:.8f} SOL"


def format_tx_line(tx: Transaction) -> str:
    """One transaction row: side, amount, shortened hash."""
    return f"[{tx.kind.value.upper()}] {tx.amount:,.0f} Tokens  {tx.hash[:HASH_PREFIX]}..."


def render_chart(prices: Sequence[float], width: int, height: int) -> list[str]:
    """
    Render a price series as rows of block characters, top row first.

    Series longer than width are resampled to width columns. A flat series
    draws at half height.
    """
    if not prices or width <= 0 or height <= 0:
        return []

    values = np.asarray(prices, dtype=float)
    if len(values) > width:
        x = np.linspace(0, len(values) - 1, width)
        values = np.interp(x, np.arange(len(values)), values)

    lo, hi = values.min(), values.max()
    if hi > lo:
        norm = (values - lo) / (hi - lo)
    else:
        norm = np.full(len(values), 0.5)

    # Eighths of a cell, at least one so the line never disappears
    fill = np.maximum(1, np.round(norm * height * 8)).astype(int)

    rows: list[str] = []
    for row in range(height - 1, -1, -1):
        cells = np.clip(fill - row * 8, 0, 8)
        rows.append("".join(BLOCKS[c] for c in cells))
    return rows


class StatusBar(Static):
    """Status bar showing price, engine status and feed rate."""

    DEFAULT_CSS = """
    StatusBar {
        dock: top;
        height: 3;
        padding: 0 2;
        background: #000000;
    }
    """

    def __init__(self, feed: FeedBase | None = None) -> None:
        super().__init__()
        self._feed = feed
        self._snapshot: StateView | None = None

    def update_snapshot(self, snapshot: StateView) -> None:
        self._snapshot = snapshot
        self.refresh()

    def render(self) -> RenderableType:
        if self._snapshot is None:
            return Text("Connecting...", style="dim")

        view = self._snapshot
        status_line = view.engine_status.replace("\n", "  ")
        parts = [
            Text(" VIBE CURVE ", style="bold black on #22c55e"),
            Text("  "),
            Text(format_price(view.current_price), style=f"bold {PRICE_COLOR}"),
            Text("  │  ", style="dim"),
            Text("Engine: ", style="dim"),
            Text(status_line, style="yellow"),
        ]
        if self._feed is not None:
            link, link_style = ("ONLINE", BUY_COLOR) if self._feed.connected else ("OFFLINE", SELL_COLOR)
            parts += [
                Text("  │  ", style="dim"),
                Text("Feed: ", style="dim"),
                Text(link, style=link_style),
                Text("  │  ", style="dim"),
                Text("Events/s: ", style="dim"),
                Text(f"{self._feed.events_per_sec:.1f}", style="cyan"),
            ]

        result = Text()
        for p in parts:
            result.append(p)
        return result


class PriceChart(Static):
    """Price history chart."""

    DEFAULT_CSS = """
    PriceChart {
        height: 1fr;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._snapshot: StateView | None = None

    def update_snapshot(self, snapshot: StateView) -> None:
        self._snapshot = snapshot
        self.refresh()

    def render(self) -> RenderableType:
        if self._snapshot is None or not self._snapshot.price_history:
            body: RenderableType = Text("Waiting for data...", style="dim")
        else:
            prices = [p.price for p in self._snapshot.price_history]
            # Panel border and padding take 4 columns and 2 rows
            rows = render_chart(prices, max(1, self.size.width - 4), max(1, self.size.height - 2))
            body = Text("\n".join(rows), style=CHART_COLOR)
        return Panel(body, title="PRICE", border_style=BORDER_COLOR)


class TransactionFeed(Static):
    """Live transaction feed, newest on top."""

    DEFAULT_CSS = """
    TransactionFeed {
        height: 1fr;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._snapshot: StateView | None = None

    def update_snapshot(self, snapshot: StateView) -> None:
        self._snapshot = snapshot
        self.refresh()

    def render(self) -> RenderableType:
        body = Text()
        if self._snapshot is not None:
            for i, tx in enumerate(self._snapshot.transaction_log):
                if i:
                    body.append("\n")
                color = BUY_COLOR if tx.kind.value == "buy" else SELL_COLOR
                body.append(format_tx_line(tx), style=color)
        return Panel(body, title="LIVE FEED", border_style=BORDER_COLOR)


class SentimentPanel(Static):
    """Latest sentiment text."""

    def __init__(self) -> None:
        super().__init__()
        self._snapshot: StateView | None = None

    def update_snapshot(self, snapshot: StateView) -> None:
        self._snapshot = snapshot
        self.refresh()

    def render(self) -> RenderableType:
        text = self._snapshot.sentiment if self._snapshot is not None else "Connecting..."
        return Panel(Text(text, style=PRICE_COLOR), title="AI ANALYSIS", border_style=BORDER_COLOR)


class ScanFeed(Static):
    """Global scan notices, newest on top."""

    def __init__(self) -> None:
        super().__init__()
        self._snapshot: StateView | None = None

    def update_snapshot(self, snapshot: StateView) -> None:
        self._snapshot = snapshot
        self.refresh()

    def render(self) -> RenderableType:
        lines = self._snapshot.scan_log if self._snapshot is not None else ()
        body = Text("\n".join(lines), style=SCAN_COLOR) if lines else Text("Scanning...", style="dim")
        return Panel(body, title="GLOBAL SCAN", border_style=BORDER_COLOR)


class DashboardApp(App):
    """Main dashboard application."""

    CSS = """
    Screen {
        background: #000000;
    }

    #left {
        width: 2fr;
    }

    #right {
        width: 1fr;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, feed: FeedBase) -> None:
        super().__init__()
        self.feed = feed
        self.snapshot_queue = feed.snapshot_queue
        self._panels: list[StatusBar | PriceChart | TransactionFeed | SentimentPanel | ScanFeed] = []

    def compose(self) -> ComposeResult:
        status_bar = StatusBar(self.feed)
        chart = PriceChart()
        tx_feed = TransactionFeed()
        sentiment = SentimentPanel()
        scans = ScanFeed()
        self._panels = [status_bar, chart, tx_feed, sentiment, scans]

        yield status_bar
        with Horizontal():
            with Vertical(id="left"):
                yield chart
                yield tx_feed
            with Vertical(id="right"):
                yield sentiment
                yield scans
        yield Footer()

    async def on_mount(self) -> None:
        """Start the snapshot consumer task."""
        self.run_worker(self._consume_snapshots(), exclusive=True)

    async def _consume_snapshots(self) -> None:
        """Consume snapshots from the queue and update UI."""
        while True:
            try:
                view = await asyncio.wait_for(self.snapshot_queue.get(), timeout=1.0)
            except asyncio.TimeoutError:
                # Quiet feed, still refresh link state and event rate
                for widget in self._panels:
                    if isinstance(widget, StatusBar):
                        widget.refresh()
                continue

            for widget in self._panels:
                widget.update_snapshot(view)


async def run_ui(feed: FeedBase) -> None:
    """Run the TUI application."""
    app = DashboardApp(feed)
    await app.run_async()
