from __future__ import annotations

import threading

import pytest

from vibe_viewer.config import INITIAL_SENTIMENT, INITIAL_STATUS
from vibe_viewer.engine.synchronizer import StreamSynchronizer
from vibe_viewer.types import (
    Init,
    PricePoint,
    PriceTick,
    ScanNotice,
    SentimentUpdate,
    StateView,
    Transaction,
    TxKind,
)


def _tx(n: int, kind: TxKind = TxKind.BUY) -> Transaction:
    return Transaction(kind, float(n), 0.002, f"hash{n}", f"t{n}")


def test_initial_state() -> None:
    view = StreamSynchronizer().snapshot()

    assert view == StateView(
        price_history=(),
        transaction_log=(),
        scan_log=(),
        current_price=0.0,
        sentiment=INITIAL_SENTIMENT,
        engine_status=INITIAL_STATUS,
    )
    assert view.sentiment == "Connecting..."


def test_price_tick_updates_price_status_and_history() -> None:
    sync = StreamSynchronizer()

    assert sync.apply(PriceTick("t1", 1.5, "BUYING")) is True

    view = sync.snapshot()
    assert view.current_price == 1.5
    assert view.engine_status == "BUYING"
    assert view.price_history == (PricePoint("t1", 1.5),)


def test_price_history_is_arrival_ordered_not_time_sorted() -> None:
    sync = StreamSynchronizer()
    sync.apply(PriceTick("b", 2.0, "IDLE"))
    sync.apply(PriceTick("a", 1.0, "IDLE"))

    assert [p.time for p in sync.snapshot().price_history] == ["b", "a"]


def test_price_history_is_capped() -> None:
    sync = StreamSynchronizer(history_capacity=50)
    for i in range(1, 61):
        sync.apply(PriceTick(f"t{i}", float(i), "IDLE"))

    history = sync.snapshot().price_history
    assert len(history) == 50
    assert history[0] == PricePoint("t11", 11.0)
    assert history[-1] == PricePoint("t60", 60.0)


def test_init_replaces_history_instead_of_merging() -> None:
    sync = StreamSynchronizer()
    for i in range(5):
        sync.apply(PriceTick(f"t{i}", float(i), "IDLE"))

    p1, p2 = PricePoint("p1", 1.0), PricePoint("p2", 2.0)
    sync.apply(Init(history=(p1, p2), price=5.0, sentiment="x"))

    view = sync.snapshot()
    assert view.price_history == (p1, p2)
    assert view.current_price == 5.0
    assert view.sentiment == "x"


def test_init_leaves_logs_and_status_alone() -> None:
    sync = StreamSynchronizer()
    sync.apply(PriceTick("t0", 1.0, "HOLDING"))
    sync.apply(_tx(1))
    sync.apply(ScanNotice("launch"))

    sync.apply(Init(history=(), price=2.0, sentiment="fresh"))

    view = sync.snapshot()
    assert view.transaction_log == (_tx(1),)
    assert view.scan_log == ("launch",)
    assert view.engine_status == "HOLDING"


def test_oversized_init_keeps_newest_points() -> None:
    sync = StreamSynchronizer(history_capacity=3)
    history = tuple(PricePoint(f"t{i}", float(i)) for i in range(6))

    sync.apply(Init(history=history, price=5.0, sentiment="s"))

    assert sync.snapshot().price_history == history[3:]


def test_transaction_only_changes_transaction_log() -> None:
    sync = StreamSynchronizer()
    sync.apply(Init(history=(PricePoint("t0", 1.0),), price=1.0, sentiment="s"))
    sync.apply(_tx(1))
    before = sync.snapshot()

    sync.apply(_tx(2, TxKind.SELL))
    after = sync.snapshot()

    assert after.transaction_log[0] == _tx(2, TxKind.SELL)
    assert after.transaction_log[1:] == before.transaction_log
    assert after._replace(transaction_log=before.transaction_log) == before


def test_transaction_log_is_newest_first_and_capped() -> None:
    sync = StreamSynchronizer(tx_log_capacity=50)
    for i in range(1, 56):
        sync.apply(_tx(i))

    log = sync.snapshot().transaction_log
    assert len(log) == 50
    assert log[0] == _tx(55)
    assert log[-1] == _tx(6)


def test_scan_log_is_newest_first_and_capped() -> None:
    sync = StreamSynchronizer()
    for i in range(1, 16):
        sync.apply(ScanNotice(f"j{i}"))

    assert sync.snapshot().scan_log == tuple(f"j{i}" for i in range(15, 5, -1))


def test_sentiment_is_last_write_wins() -> None:
    sync = StreamSynchronizer()
    sync.apply(SentimentUpdate("first"))
    sync.apply(SentimentUpdate("second"))

    assert sync.snapshot().sentiment == "second"


@pytest.mark.parametrize(
    "event",
    [
        None,
        42,
        "price-update",
        {"type": "buy", "amount": 1},
        ("t1", 1.0, "IDLE"),
        PricePoint("t1", 1.0),
        Init(history=(("only-one-field",),), price=1.0, sentiment="bad"),
        Init(history=None, price=1.0, sentiment="bad"),
        Init(history=({"time": "t1", "price": 2.0},), price=2.0, sentiment="bad"),
        Init(history="ab", price=2.0, sentiment="bad"),
        Init(history=(("t1", "2.0"),), price=2.0, sentiment="bad"),
        Init(history=(PricePoint("t0", 1.0), (1, 2.0)), price=2.0, sentiment="bad"),
    ],
)
def test_unknown_or_malformed_event_is_a_no_op(event: object) -> None:
    sync = StreamSynchronizer()
    sync.apply(Init(history=(PricePoint("t0", 1.0),), price=1.0, sentiment="s"))
    sync.apply(_tx(1))
    sync.apply(ScanNotice("scan"))
    before = sync.snapshot()

    assert sync.apply(event) is False

    assert sync.snapshot() == before
    assert sync.dropped_count == 1


def test_snapshot_does_not_mutate() -> None:
    sync = StreamSynchronizer()
    sync.apply(PriceTick("t1", 1.0, "IDLE"))

    assert sync.snapshot() == sync.snapshot()
    assert sync.applied_count == 1


def test_reset_returns_to_initial_state() -> None:
    sync = StreamSynchronizer()
    sync.apply(Init(history=(PricePoint("t0", 1.0),), price=1.0, sentiment="s"))
    sync.apply(PriceTick("t1", 2.0, "HOLDING"))
    sync.apply(_tx(1))
    sync.apply(ScanNotice("scan"))

    sync.reset()

    assert sync.snapshot() == StreamSynchronizer().snapshot()


def test_end_to_end_scenario() -> None:
    sync = StreamSynchronizer()

    sync.apply(Init(history=(), price=0.001, sentiment="booting"))
    sync.apply(PriceTick(time="t1", price=0.002, status="BUYING"))
    sync.apply(Transaction(TxKind.BUY, 1000, 0.002, "abc123", "t1"))

    view = sync.snapshot()
    assert view.current_price == 0.002
    assert view.engine_status == "BUYING"
    assert view.price_history == (PricePoint("t1", 0.002),)
    assert view.transaction_log == (Transaction(TxKind.BUY, 1000, 0.002, "abc123", "t1"),)
    assert view.sentiment == "booting"
    assert view.scan_log == ()


def test_concurrent_apply_keeps_bounds() -> None:
    sync = StreamSynchronizer(history_capacity=20, tx_log_capacity=20)

    def worker(offset: int) -> None:
        for i in range(500):
            sync.apply(PriceTick(f"{offset}-{i}", float(i), "IDLE"))
            sync.apply(_tx(offset * 1000 + i))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    view = sync.snapshot()
    assert len(view.price_history) == 20
    assert len(view.transaction_log) == 20
    assert sync.applied_count == 4000


@pytest.mark.parametrize("field", ["history_capacity", "tx_log_capacity", "scan_log_capacity"])
def test_invalid_capacity_is_rejected(field: str) -> None:
    with pytest.raises(ValueError):
        StreamSynchronizer(**{field: 0})


def test_init_accepts_plain_time_price_pairs() -> None:
    sync = StreamSynchronizer()

    assert sync.apply(Init(history=(("t1", 1), ["t2", 2.5]), price=2.5, sentiment="s")) is True

    assert sync.snapshot().price_history == (PricePoint("t1", 1.0), PricePoint("t2", 2.5))
