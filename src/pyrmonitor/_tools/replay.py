"""Replay captured RMonitor lines as a live feed.

Used by ``scripts/replay_feed.py`` and the tests to stand in for a timing
system: datagrams are sent to a listening relay, or a TCP server hands the
capture to every client that dials in.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator

_logger = logging.getLogger(__name__)

LINE_END = b"\r\n"


def iter_capture_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield feed lines from a capture, skipping blanks and ``#`` comments."""
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        yield line


async def replay_udp(
    lines: Iterable[str],
    host: str,
    port: int,
    *,
    interval: float = 0.0,
) -> int:
    """Send each line as one datagram to *host*:*port*. Returns the count sent."""
    loop = asyncio.get_running_loop()
    transport, _ = await loop.create_datagram_endpoint(
        asyncio.DatagramProtocol,
        remote_addr=(host, port),
        allow_broadcast=True,
    )
    sent = 0
    try:
        for line in iter_capture_lines(lines):
            transport.sendto(line.encode("utf-8"))
            sent += 1
            if interval:
                await asyncio.sleep(interval)
    finally:
        transport.close()
    _logger.debug("Replayed %d datagrams to %s:%s", sent, host, port)
    return sent


async def serve_tcp(
    lines: Iterable[str],
    host: str = "127.0.0.1",
    port: int = 0,
    *,
    interval: float = 0.0,
    chunk_size: int | None = None,
) -> asyncio.Server:
    """Start a TCP server that streams the capture to each client.

    *chunk_size* splits the byte stream into writes of that size regardless
    of line boundaries, mimicking how a real feed fragments across reads.
    """
    payload_lines = list(iter_capture_lines(lines))

    async def _handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        _logger.debug("Replay client connected from %s", peer)
        try:
            for line in payload_lines:
                data = line.encode("utf-8") + LINE_END
                step = chunk_size or len(data)
                for start in range(0, len(data), step):
                    writer.write(data[start : start + step])
                    await writer.drain()
                    if chunk_size:
                        await asyncio.sleep(0)
                if interval:
                    await asyncio.sleep(interval)
            # Hold the connection open until the client leaves.
            await reader.read()
        except ConnectionError:
            _logger.debug("Replay client %s went away", peer)
        finally:
            writer.close()

    return await asyncio.start_server(_handle, host, port)
