"""Upstream transport: one listener, datagram or stream.

The datagram kind binds a local socket on the feed port and treats every
datagram as one line. The stream kind opens a TCP connection and frames
the byte stream on line terminators with :class:`LineFramer`.

``disconnect()`` closes the socket and forgets it, so the next
``connect()`` always binds or dials a fresh one.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from pyrmonitor.exceptions import RMonitorTransportError
from pyrmonitor.state.connection import TransportKind

_logger = logging.getLogger(__name__)

#: Longest partial line kept across reads before it is discarded.
MAX_PENDING_LINE = 64 * 1024

LineHandler = Callable[[str], None]
LinkLostHandler = Callable[[Exception | None], None]


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


class LineFramer:
    """Reassembles lines from arbitrarily chunked stream reads.

    Lines end at ``\\n``; a trailing ``\\r`` is dropped. Incomplete trailing
    data is retained until the terminator arrives.
    """

    def __init__(self, max_pending: int = MAX_PENDING_LINE) -> None:
        self._buffer = bytearray()
        self._max_pending = max_pending

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def feed(self, data: bytes) -> list[str]:
        self._buffer.extend(data)
        lines: list[str] = []
        while True:
            idx = self._buffer.find(b"\n")
            if idx < 0:
                break
            raw = bytes(self._buffer[:idx])
            del self._buffer[: idx + 1]
            lines.append(_decode(raw).rstrip("\r"))
        if len(self._buffer) > self._max_pending:
            _logger.warning("Discarding %d bytes of unterminated stream data", len(self._buffer))
            self._buffer.clear()
        return lines

    def reset(self) -> None:
        self._buffer.clear()


class _Link:
    """One upstream socket. Callbacks stop flowing once it is deactivated.

    ``released`` resolves when the event loop has actually closed the
    socket, which happens a loop iteration after ``transport.close()``.
    """

    def __init__(self, listener: UpstreamListener) -> None:
        self._listener = listener
        self.active = True
        self.transport: asyncio.BaseTransport | None = None
        self.released: asyncio.Future[None] = asyncio.get_running_loop().create_future()

    def deliver(self, line: str) -> None:
        if self.active:
            self._listener._on_line(line)

    def mark_released(self) -> None:
        if not self.released.done():
            self.released.set_result(None)

    def lost(self, exc: Exception | None) -> None:
        if not self.active:
            return
        self._listener._link_lost(self, exc)

    def close(self) -> None:
        self.active = False
        if self.transport is not None and not self.transport.is_closing():
            self.transport.close()


class _DatagramProtocol(asyncio.DatagramProtocol):
    def __init__(self, link: _Link) -> None:
        self._link = link

    def datagram_received(self, data: bytes, addr: Any) -> None:
        self._link.deliver(_decode(data))

    def error_received(self, exc: Exception) -> None:
        self._link.lost(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        self._link.mark_released()
        self._link.lost(exc)


class _StreamProtocol(asyncio.Protocol):
    def __init__(self, link: _Link) -> None:
        self._link = link
        self._framer = LineFramer()

    def data_received(self, data: bytes) -> None:
        for line in self._framer.feed(data):
            self._link.deliver(line)

    def eof_received(self) -> bool:
        return False

    def connection_lost(self, exc: Exception | None) -> None:
        # A partial trailing line never becomes a packet.
        self._framer.reset()
        self._link.mark_released()
        self._link.lost(exc)


class UpstreamListener:
    """Owns the single upstream socket and delivers lines in arrival order."""

    def __init__(
        self,
        kind: TransportKind,
        *,
        on_line: LineHandler,
        on_link_lost: LinkLostHandler,
        udp_bind_host: str = "0.0.0.0",
        connect_timeout: float = 5.0,
    ) -> None:
        self.kind = TransportKind(kind)
        self._on_line = on_line
        self._on_link_lost = on_link_lost
        self._udp_bind_host = udp_bind_host
        self._connect_timeout = connect_timeout
        self._link: _Link | None = None
        # Last closed link whose socket may not be released yet.
        self._closing: _Link | None = None

    @property
    def is_open(self) -> bool:
        return self._link is not None

    @property
    def local_address(self) -> tuple[str, int] | None:
        """``(host, port)`` of the bound local socket, if any."""
        link = self._link
        if link is None or link.transport is None:
            return None
        sockname = link.transport.get_extra_info("sockname")
        if not sockname:
            return None
        return sockname[0], sockname[1]

    async def connect(self, host: str, port: int) -> None:
        """Open a new link to *host*:*port*, closing any previous one first.

        Raises
        ------
        RMonitorTransportError
            When the socket cannot be bound, the connection fails, or the
            link is closed by ``disconnect()`` before it comes up.
        """
        self.disconnect()
        loop = asyncio.get_running_loop()
        link = _Link(self)
        self._link = link

        try:
            async with asyncio.timeout(self._connect_timeout):
                previous = self._closing
                if previous is not None:
                    # The feed port stays bound until the old socket is released.
                    await asyncio.shield(previous.released)
                    if self._closing is previous:
                        self._closing = None
                if self.kind == TransportKind.UDP:
                    _logger.debug("Binding datagram socket on %s:%s", self._udp_bind_host, port)
                    transport, _ = await loop.create_datagram_endpoint(
                        lambda: _DatagramProtocol(link),
                        local_addr=(self._udp_bind_host, port),
                        allow_broadcast=True,
                    )
                else:
                    _logger.debug("Opening stream to %s:%s", host, port)
                    transport, _ = await loop.create_connection(
                        lambda: _StreamProtocol(link),
                        host,
                        port,
                    )
        except TimeoutError as exc:
            self._forget(link)
            raise RMonitorTransportError(
                f"Timed out after {self._connect_timeout:g}s connecting to {host}:{port}",
                host=host,
                port=port,
                kind=self.kind.value,
            ) from exc
        except OSError as exc:
            self._forget(link)
            verb = "bind" if self.kind == TransportKind.UDP else "connect to"
            raise RMonitorTransportError(
                f"Could not {verb} {host}:{port}: {exc.strerror or exc}",
                host=host,
                port=port,
                kind=self.kind.value,
            ) from exc

        link.transport = transport
        if link is not self._link:
            # Superseded by a disconnect while the socket was opening.
            self._release(link)
            raise RMonitorTransportError(
                f"Link to {host}:{port} was closed while connecting",
                host=host,
                port=port,
                kind=self.kind.value,
            )

    def disconnect(self) -> bool:
        """Close the current link, if any. Returns whether one was open."""
        link = self._link
        self._link = None
        if link is None:
            return False
        self._release(link)
        _logger.debug("Closed %s upstream link", self.kind.value)
        return True

    def _release(self, link: _Link) -> None:
        link.close()
        if link.transport is not None and not link.released.done():
            self._closing = link

    def _forget(self, link: _Link) -> None:
        link.active = False
        if self._link is link:
            self._link = None

    def _link_lost(self, link: _Link, exc: Exception | None) -> None:
        self._forget(link)
        self._release(link)
        self._on_link_lost(exc)
