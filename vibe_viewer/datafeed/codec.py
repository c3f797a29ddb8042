"""
Wire codec for the trading feed.

The feed server speaks Socket.IO over a raw websocket (Engine.IO v4 text
packets). Relevant packet shapes:

    0{"sid": ...}            open
    2                        ping (client must answer 3)
    3                        pong
    40 / 40{...}             namespace connect
    41                       namespace disconnect
    42["event-name", data]   event

Plain JSON feeds sending {"event": name, "data": payload} are accepted too.

Decoding never raises: anything unusable comes back as an UNKNOWN frame or a
None event, and the caller drops it.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, NamedTuple

import orjson

from ..types import (
    Event,
    Init,
    PricePoint,
    PriceTick,
    ScanNotice,
    SentimentUpdate,
    Transaction,
    TxKind,
)

# Wire event names
EVENT_INIT = "init-data"
EVENT_PRICE = "price-update"
EVENT_TX = "new-tx"
EVENT_SENTIMENT = "ai-update"
EVENT_SCAN = "global-scan"

# Engine.IO control packets sent by the client
PONG_PACKET = "3"
CONNECT_PACKET = "40"


class FrameKind(Enum):
    OPEN = "open"
    PING = "ping"
    PONG = "pong"
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    EVENT = "event"
    UNKNOWN = "unknown"


class Frame(NamedTuple):
    """Decoded transport frame."""
    kind: FrameKind
    name: str = ""       # Event name (EVENT only)
    payload: Any = None  # Event data or open handshake


_UNKNOWN = Frame(FrameKind.UNKNOWN)


def _loads(text: str) -> Any:
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError:
        return None


def decode_frame(raw: str | bytes) -> Frame:
    """
    Decode one websocket text message into a Frame.

    HOT PATH - called for every message.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return _UNKNOWN

    if not raw:
        return _UNKNOWN

    # Plain JSON object feed
    if raw[0] == "{":
        data = _loads(raw)
        if isinstance(data, dict) and isinstance(data.get("event"), str):
            return Frame(FrameKind.EVENT, data["event"], data.get("data"))
        return _UNKNOWN

    packet = raw[0]
    if packet == "0":
        return Frame(FrameKind.OPEN, payload=_loads(raw[1:]) if len(raw) > 1 else None)
    if packet == "2":
        return Frame(FrameKind.PING)
    if packet == "3":
        return Frame(FrameKind.PONG)
    if packet != "4" or len(raw) < 2:
        return _UNKNOWN

    # Socket.IO packet inside an Engine.IO message
    sio_type = raw[1]
    if sio_type == "0":
        return Frame(FrameKind.CONNECT)
    if sio_type == "1":
        return Frame(FrameKind.DISCONNECT)
    if sio_type != "2":
        return _UNKNOWN

    # Optional namespace ("/ns,") and ack id digits before the JSON array
    body = raw[2:]
    if body.startswith("/"):
        _, _, body = body.partition(",")
    body = body.lstrip("0123456789")

    data = _loads(body)
    if not isinstance(data, list) or not data or not isinstance(data[0], str):
        return _UNKNOWN
    return Frame(FrameKind.EVENT, data[0], data[1] if len(data) > 1 else None)


def encode_event(name: str, payload: Any) -> str:
    """Encode a Socket.IO event packet."""
    return "42" + orjson.dumps([name, payload]).decode("utf-8")


def _parse_init(data: dict) -> Init:
    history = tuple(
        PricePoint(str(point["time"]), float(point["price"]))
        for point in data.get("history") or ()
    )
    return Init(
        history=history,
        price=float(data["price"]),
        sentiment=str(data.get("ai", data.get("sentiment", ""))),
    )


def _parse_price(data: dict) -> PriceTick:
    return PriceTick(
        time=str(data["time"]),
        price=float(data["price"]),
        status=str(data["status"]),
    )


def _parse_tx(data: dict) -> Transaction:
    return Transaction(
        kind=TxKind(str(data["type"]).lower()),
        amount=float(data["amount"]),
        price=float(data["price"]),
        hash=str(data["hash"]),
        timestamp=str(data["timestamp"]),
    )


def _parse_sentiment(data: Any) -> SentimentUpdate:
    # Server sends the bare string, tolerate {"text": ...} as well
    if isinstance(data, dict):
        data = data["text"]
    if not isinstance(data, str):
        raise TypeError("sentiment payload must be a string")
    return SentimentUpdate(data)


def _parse_scan(data: dict) -> ScanNotice:
    return ScanNotice(str(data["message"]))


_PARSERS: dict[str, Callable[[Any], Event]] = {
    EVENT_INIT: _parse_init,
    EVENT_PRICE: _parse_price,
    EVENT_TX: _parse_tx,
    EVENT_SENTIMENT: _parse_sentiment,
    EVENT_SCAN: _parse_scan,
}


def to_event(name: str, payload: Any) -> Event | None:
    """Map a named wire event to an Event Envelope, or None if unusable."""
    parser = _PARSERS.get(name)
    if parser is None:
        return None
    try:
        return parser(payload)
    except (KeyError, TypeError, ValueError, AttributeError):
        return None


def event_to_wire(event: Event) -> tuple[str, Any]:
    """Inverse of to_event: (name, JSON-ready payload) for an event."""
    if isinstance(event, Init):
        return EVENT_INIT, {
            "history": [{"time": p.time, "price": p.price} for p in event.history],
            "price": event.price,
            "ai": event.sentiment,
        }
    if isinstance(event, PriceTick):
        return EVENT_PRICE, {"time": event.time, "price": event.price, "status": event.status}
    if isinstance(event, Transaction):
        return EVENT_TX, {
            "type": event.kind.value,
            "amount": event.amount,
            "price": event.price,
            "hash": event.hash,
            "timestamp": event.timestamp,
        }
    if isinstance(event, SentimentUpdate):
        return EVENT_SENTIMENT, event.text
    if isinstance(event, ScanNotice):
        return EVENT_SCAN, {"message": event.message}
    raise TypeError(f"not an event: {event!r}")
