"""Socket connection handles used by the realtime gateways."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol
from uuid import uuid4

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything the gateways can push frames to."""

    id: str
    user_id: str | None

    def send(self, event: str, data: Any) -> bool:
        """Queue a frame for delivery; return False when it was dropped."""
        ...


class QueueConnection:
    """Connection backed by a bounded asyncio queue.

    Gateways call :meth:`send` from service code; the WebSocket endpoint runs
    :meth:`frames` in a sender task and writes each frame to the socket. When
    the queue is full the frame is dropped: delivery is best-effort and
    at-most-once, with no replay.
    """

    def __init__(
        self,
        user_id: str | None,
        *,
        maxsize: int = 256,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.id = uuid4().hex
        self.user_id = user_id
        self._loop = loop or asyncio.get_running_loop()
        self._queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    def send(self, event: str, data: Any) -> bool:
        if self._closed:
            return False
        frame = {"event": event, "data": data}
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            return self._enqueue(frame)
        self._loop.call_soon_threadsafe(self._enqueue, frame)
        return True

    def _enqueue(self, frame: dict[str, Any] | None) -> bool:
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            logger.warning("Dropping %s frame for connection %s: queue full", frame, self.id)
            return False
        return True

    def close(self) -> None:
        """Stop accepting frames and wake the sender so it can exit."""
        if self._closed:
            return
        self._closed = True
        while True:
            try:
                self._queue.put_nowait(None)
                return
            except asyncio.QueueFull:
                # Undelivered frames are lost on close anyway.
                self._queue.get_nowait()

    async def frames(self):
        """Yield queued frames until the connection is closed."""
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame

    @property
    def pending(self) -> int:
        return self._queue.qsize()
