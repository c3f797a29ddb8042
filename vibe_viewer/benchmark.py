#!/usr/bin/env python3
"""
Micro-benchmark for Vibe Viewer performance.

Tests:
1. Synchronizer apply() throughput on a mixed event stream
2. Snapshot latency with full buffers
3. Wire frame decoding throughput
4. Chart rendering speed

Usage:
    python -m vibe_viewer.benchmark
"""

from __future__ import annotations

import random
import time
from statistics import mean, stdev

from .datafeed.codec import decode_frame, encode_event, event_to_wire, to_event
from .engine.synchronizer import StreamSynchronizer
from .types import Event, Init, PricePoint, PriceTick, ScanNotice, SentimentUpdate, Transaction, TxKind
from .ui.dashboard_view import render_chart


def generate_mock_events(count: int, base_price: float = 0.00002, seed: int = 1) -> list[Event]:
    """Generate a mixed event stream: mostly ticks and transactions."""
    rng = random.Random(seed)
    events: list[Event] = []
    price = base_price

    for i in range(count):
        price *= 1.0 + rng.uniform(-0.01, 0.01)
        roll = rng.random()
        label = f"t{i}"

        if roll < 0.5:
            events.append(PriceTick(label, price, "IDLE"))
        elif roll < 0.85:
            kind = TxKind.BUY if rng.random() > 0.45 else TxKind.SELL
            events.append(Transaction(kind, float(rng.randint(1000, 51000)), price, f"{i:064x}", label))
        elif roll < 0.95:
            events.append(ScanNotice(f"NEW LAUNCH DETECTED! Sig: {i:08x}..."))
        elif roll < 0.99:
            events.append(SentimentUpdate(f"sentiment {i}"))
        else:
            history = tuple(PricePoint(f"h{j}", price) for j in range(50))
            events.append(Init(history, price, "reseeded"))

    return events


def benchmark_apply(iterations: int = 100000) -> float:
    """Benchmark synchronizer apply throughput. Returns events/sec."""
    print("\n=== Synchronizer Apply Benchmark ===")

    sync = StreamSynchronizer()
    events = generate_mock_events(iterations)

    # Warm up
    for e in events[:100]:
        sync.apply(e)

    start = time.perf_counter()
    for e in events:
        sync.apply(e)
    elapsed = time.perf_counter() - start

    rate = iterations / elapsed
    print(f"  Events applied: {iterations:,}")
    print(f"  Time: {elapsed*1000:.1f}ms")
    print(f"  Rate: {rate:,.0f} events/sec")
    print(f"  Per event: {elapsed/iterations*1_000_000:.2f}µs")
    return rate


def benchmark_snapshot(iterations: int = 10000) -> float:
    """Benchmark snapshot() with full buffers. Returns avg time in ms."""
    print("\n=== Snapshot Benchmark ===")

    sync = StreamSynchronizer()
    for e in generate_mock_events(1000):
        sync.apply(e)

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        sync.snapshot()
        times.append(time.perf_counter() - start)

    avg_time = mean(times) * 1000
    std_time = stdev(times) * 1000 if len(times) > 1 else 0.0

    print(f"  Iterations: {iterations}")
    print(f"  Avg time: {avg_time:.4f}ms")
    print(f"  Std dev: {std_time:.4f}ms")
    return avg_time


def benchmark_decode(iterations: int = 50000) -> float:
    """Benchmark frame decoding + event mapping. Returns frames/sec."""
    print("\n=== Frame Decode Benchmark ===")

    frames = [encode_event(*event_to_wire(e)) for e in generate_mock_events(iterations)]

    start = time.perf_counter()
    for raw in frames:
        frame = decode_frame(raw)
        to_event(frame.name, frame.payload)
    elapsed = time.perf_counter() - start

    rate = iterations / elapsed
    print(f"  Frames decoded: {iterations:,}")
    print(f"  Time: {elapsed*1000:.1f}ms")
    print(f"  Rate: {rate:,.0f} frames/sec")
    return rate


def benchmark_chart(iterations: int = 1000) -> float:
    """Benchmark chart rendering for a full history. Returns avg time in ms."""
    print("\n=== Chart Render Benchmark ===")

    prices = [0.00002 * (1 + random.uniform(-0.05, 0.05)) for _ in range(50)]

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        render_chart(prices, 80, 12)
        times.append(time.perf_counter() - start)

    avg_time = mean(times) * 1000
    std_time = stdev(times) * 1000 if len(times) > 1 else 0.0

    print(f"  Iterations: {iterations}")
    print(f"  Avg time: {avg_time:.3f}ms")
    print(f"  Std dev: {std_time:.3f}ms")
    print(f"  Max FPS possible: {1000/avg_time:,.0f}")
    return avg_time


def main() -> None:
    """Run all benchmarks."""
    print("=" * 60)
    print("Vibe Viewer Performance Benchmark")
    print("=" * 60)

    benchmark_apply()
    benchmark_snapshot()
    benchmark_decode()
    benchmark_chart()

    print("\n" + "=" * 60)
    print("Benchmark complete.")
    print("=" * 60)


if __name__ == "__main__":
    main()
