#!/usr/bin/env python3
"""
Vibe Viewer - Real-time trading feed dashboard.

Usage:
    python -m vibe_viewer.main --url ws://localhost:3001/socket.io/?EIO=4&transport=websocket

    Or without a server:
    python -m vibe_viewer.main --simulate --interval 500

Controls:
    q - Quit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import (
    DEFAULT_FEED_URL,
    DEFAULT_TICK_INTERVAL_MS,
    PRICE_HISTORY_CAPACITY,
    SCAN_LOG_CAPACITY,
    TRANSACTION_LOG_CAPACITY,
    FeedSettings,
)

LOG_FORMAT = "%(asctime)s | %(name)s | %(message)s"


def setup_logging(level: str, log_file: str | None = None) -> None:
    """Configure root logging once. Logs go to a file while the TUI owns the terminal."""
    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, "%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))


async def main(settings: FeedSettings, simulate: bool = False, seed: int | None = None) -> None:
    """Main entry point - runs data feed and UI concurrently."""

    # Import here to avoid slow startup for --help
    from .datafeed.feed_client import FeedClient
    from .datafeed.simulator import SimulatedFeed
    from .engine.synchronizer import StreamSynchronizer
    from .ui.dashboard_view import run_ui

    source = "simulated feed" if simulate else settings.url
    print(f"Starting Vibe Viewer on {source}...")
    print(f"  History: {settings.history_capacity} points")
    print(f"  Logs: {settings.tx_log_capacity} tx / {settings.scan_log_capacity} scans")
    print()

    synchronizer = StreamSynchronizer(
        history_capacity=settings.history_capacity,
        tx_log_capacity=settings.tx_log_capacity,
        scan_log_capacity=settings.scan_log_capacity,
    )
    if simulate:
        feed = SimulatedFeed(synchronizer, settings, seed=seed)
    else:
        feed = FeedClient(synchronizer, settings)

    async def run_feed() -> None:
        try:
            await feed.run()
        except asyncio.CancelledError:
            raise
        except Exception:
            logging.getLogger(__name__).exception("Feed error")

    feed_task = asyncio.create_task(run_feed())

    try:
        # Run UI (blocks until quit)
        await run_ui(feed)
    finally:
        feed.stop()
        feed_task.cancel()
        try:
            await feed_task
        except asyncio.CancelledError:
            pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vibe-viewer",
        description="Vibe Viewer - Real-time trading feed dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m vibe_viewer.main
    python -m vibe_viewer.main --url ws://10.0.0.5:3001/socket.io/?EIO=4&transport=websocket
    python -m vibe_viewer.main --simulate --interval 250 --history 120
        """
    )

    parser.add_argument(
        "--url",
        default=DEFAULT_FEED_URL,
        help=f"Feed websocket URL (default: {DEFAULT_FEED_URL})"
    )

    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Use the built-in simulated feed instead of a server"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the simulated feed"
    )

    parser.add_argument(
        "--interval",
        type=int,
        default=DEFAULT_TICK_INTERVAL_MS,
        help=f"Simulated tick interval in ms (default: {DEFAULT_TICK_INTERVAL_MS})"
    )

    parser.add_argument(
        "--history",
        type=int,
        default=PRICE_HISTORY_CAPACITY,
        help=f"Price history points kept (default: {PRICE_HISTORY_CAPACITY})"
    )

    parser.add_argument(
        "--tx-log",
        type=int,
        default=TRANSACTION_LOG_CAPACITY,
        help=f"Transactions kept in the feed (default: {TRANSACTION_LOG_CAPACITY})"
    )

    parser.add_argument(
        "--scan-log",
        type=int,
        default=SCAN_LOG_CAPACITY,
        help=f"Scan notices kept (default: {SCAN_LOG_CAPACITY})"
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--log-file",
        default=None,
        help="Write logs to this file instead of stderr"
    )

    return parser


def settings_from_args(args: argparse.Namespace) -> FeedSettings:
    return FeedSettings(
        url=args.url,
        history_capacity=args.history,
        tx_log_capacity=args.tx_log,
        scan_log_capacity=args.scan_log,
        tick_interval_ms=args.interval,
    )


def cli(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    for name in ("history", "tx_log", "scan_log"):
        if getattr(args, name) < 1:
            parser.error(f"--{name.replace('_', '-')} must be at least 1")

    setup_logging(args.log_level, args.log_file)

    try:
        asyncio.run(main(settings_from_args(args), simulate=args.simulate, seed=args.seed))
    except KeyboardInterrupt:
        print("\nShutdown requested.")
        sys.exit(0)


if __name__ == "__main__":
    cli()
