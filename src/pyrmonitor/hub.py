"""Broadcast hub: fans every event out to all subscriber sessions.

Each subscriber gets its own bounded queue drained by its own writer task,
so a slow subscriber never delays the others or the upstream ingest. A
subscriber whose queue fills up is dropped.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Iterable
from typing import Any, Protocol

from pyrmonitor.models._base import WireEvent

_logger = logging.getLogger(__name__)

_session_ids = itertools.count(1)


class SubscriberChannel(Protocol):
    """Structural interface of a subscriber connection.

    ``aiohttp.web.WebSocketResponse`` satisfies it; tests pass doubles.
    """

    @property
    def closed(self) -> bool: ...

    async def send_str(self, data: str) -> None: ...

    async def close(self) -> Any: ...


class SubscriberSession:
    """One connected subscriber and its outbound buffer."""

    def __init__(
        self,
        channel: SubscriberChannel,
        *,
        queue_size: int,
        initial: Iterable[str] = (),
    ) -> None:
        self.id = next(_session_ids)
        self._channel = channel
        self._initial = list(initial)
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._writer: asyncio.Task[None] | None = None
        self.alive = True

    def __repr__(self) -> str:
        return f"<SubscriberSession id={self.id} alive={self.alive}>"

    @property
    def backlog(self) -> int:
        return self._queue.qsize()

    def start(self, hub: BroadcastHub) -> None:
        self._writer = asyncio.get_running_loop().create_task(
            self._drain(hub), name=f"subscriber-{self.id}-writer"
        )

    def offer(self, message: str) -> bool:
        """Queue *message* without waiting. ``False`` means the subscriber can't keep up."""
        if not self.alive:
            return False
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            return False
        return True

    async def _drain(self, hub: BroadcastHub) -> None:
        try:
            for message in self._initial:
                await self._send(message)
            self._initial.clear()
            while True:
                message = await self._queue.get()
                await self._send(message)
        except Exception:
            _logger.debug("Send to subscriber %s failed", self.id, exc_info=True)
            hub.drop(self, reason="send failed")

    async def _send(self, message: str) -> None:
        if self._channel.closed:
            raise ConnectionResetError("subscriber channel closed")
        await self._channel.send_str(message)

    async def close(self) -> None:
        self.alive = False
        writer = self._writer
        self._writer = None
        if writer is not None and writer is not asyncio.current_task():
            writer.cancel()
            try:
                await writer
            except asyncio.CancelledError:
                pass
        if not self._channel.closed:
            try:
                await self._channel.close()
            except Exception:
                _logger.debug("Closing subscriber %s failed", self.id, exc_info=True)


class BroadcastHub:
    """The set of subscriber sessions and the publish fan-out."""

    def __init__(self, *, queue_size: int) -> None:
        self._queue_size = queue_size
        self._sessions: dict[int, SubscriberSession] = {}
        self._closing: set[asyncio.Task[None]] = set()

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def sessions(self) -> list[SubscriberSession]:
        return list(self._sessions.values())

    def join(self, channel: SubscriberChannel, snapshot: Iterable[WireEvent] = ()) -> SubscriberSession:
        """Register a subscriber; *snapshot* is sent to it before any live event."""
        session = SubscriberSession(
            channel,
            queue_size=self._queue_size,
            initial=[event.to_wire() for event in snapshot],
        )
        self._sessions[session.id] = session
        session.start(self)
        _logger.info("Subscriber %s joined (%d connected)", session.id, len(self._sessions))
        return session

    async def leave(self, session: SubscriberSession) -> None:
        if self._sessions.pop(session.id, None) is not None:
            _logger.info("Subscriber %s left (%d connected)", session.id, len(self._sessions))
        await session.close()

    def publish(self, event: WireEvent) -> int:
        """Deliver *event* to every subscriber. Returns how many accepted it."""
        message = event.to_wire()
        delivered = 0
        for session in list(self._sessions.values()):
            if session.offer(message):
                delivered += 1
            else:
                self.drop(session, reason=f"backlog of {session.backlog} messages")
        return delivered

    def drop(self, session: SubscriberSession, *, reason: str) -> None:
        """Remove a subscriber that cannot keep up, closing it in the background."""
        if self._sessions.pop(session.id, None) is None:
            return
        session.alive = False
        _logger.warning("Dropping subscriber %s: %s", session.id, reason)
        task = asyncio.get_running_loop().create_task(session.close())
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def close(self) -> None:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        await asyncio.gather(*(session.close() for session in sessions), return_exceptions=True)
        if self._closing:
            await asyncio.gather(*self._closing, return_exceptions=True)
