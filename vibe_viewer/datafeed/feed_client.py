"""
Websocket feed client with reconnect.

Handles:
1. Engine.IO handshake (open -> namespace connect) and ping/pong keepalive
2. Decoding Socket.IO event packets into typed events
3. Reconnect with exponential backoff, resetting state for the next Init

Performance notes:
- orjson for JSON parsing (inside the codec)
- Minimal logging in hot path
- All I/O is non-blocking (pure asyncio)
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from ..config import FeedSettings
from ..engine.synchronizer import StreamSynchronizer
from .base import FeedBase
from .codec import CONNECT_PACKET, PONG_PACKET, FrameKind, decode_frame, to_event

logger = logging.getLogger(__name__)


class FeedClient(FeedBase):
    """
    Async websocket client for the trading feed.

    Usage:
        client = FeedClient(StreamSynchronizer(), FeedSettings(url=...))
        asyncio.create_task(client.run())
        view = await client.snapshot_queue.get()
    """

    def __init__(self, synchronizer: StreamSynchronizer, settings: FeedSettings | None = None) -> None:
        super().__init__(synchronizer, settings)
        self.url = self.settings.url
        self.reconnects: int = 0

    async def run(self) -> None:
        """
        Main run loop. Connects, processes messages, reconnects on failure.

        Returns after stop() is called.
        """
        self._running = True
        attempt = 0

        async with aiohttp.ClientSession() as session:
            while self._running:
                try:
                    await self._session_loop(session)
                    attempt = 0
                except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
                    logger.info("[WS] Connection failed: %s", e)
                finally:
                    self._connected = False

                if not self._running:
                    break

                delay = self.settings.reconnect_delay(attempt)
                attempt += 1
                self.reconnects += 1
                logger.info("[WS] Reconnecting in %.1fs", delay)
                await asyncio.sleep(delay)

                # Fresh Init is expected, stale history is not carried over
                self.synchronizer.reset()
                self._publish(self.synchronizer.snapshot())

    async def _session_loop(self, session: aiohttp.ClientSession) -> None:
        """Run one websocket connection until it closes."""
        async with session.ws_connect(self.url, heartbeat=None) as ws:
            logger.info("[WS] Connected to %s", self.url)
            self._connected = True

            async for msg in ws:
                if not self._running:
                    break

                if msg.type == aiohttp.WSMsgType.TEXT:
                    reply = self.handle_message(msg.data)
                    if reply is not None:
                        await ws.send_str(reply)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    logger.info("[WS] Error frame: %s", ws.exception())
                    break

            logger.info("[WS] Disconnected")

    def handle_message(self, raw: str) -> str | None:
        """
        Handle one incoming text message.

        HOT PATH - called for every message.

        Returns the control packet to send back, if any.
        """
        frame = decode_frame(raw)

        if frame.kind is FrameKind.EVENT:
            event = to_event(frame.name, frame.payload)
            if event is None:
                logger.debug("[WS] Undecodable event %r", frame.name)
                return None
            self._deliver(event)
            return None

        if frame.kind is FrameKind.PING:
            return PONG_PACKET
        if frame.kind is FrameKind.OPEN:
            return CONNECT_PACKET
        if frame.kind is FrameKind.UNKNOWN:
            logger.debug("[WS] Unknown frame: %.80r", raw)
        return None
