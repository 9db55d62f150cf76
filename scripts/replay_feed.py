#!/usr/bin/env python3
"""Replay an RMonitor capture file against a relay.

Examples::

    # Datagrams to a relay listening on UDP 50000
    python scripts/replay_feed.py capture.txt --port 50000 --interval 0.5

    # Serve the capture over TCP for a relay started with --transport tcp
    python scripts/replay_feed.py capture.txt --tcp --port 50000 --loop
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

# pylint: disable=wrong-import-position
from pyrmonitor._tools.replay import replay_udp, serve_tcp  # noqa: E402

LOG = logging.getLogger("replay_feed")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay an RMonitor capture as a live feed.")
    parser.add_argument("capture", type=Path, help="Text file with one RMonitor line per row")
    parser.add_argument("--host", default="127.0.0.1", help="Target (UDP) or listen (TCP) host")
    parser.add_argument("--port", type=int, default=50000, help="Target (UDP) or listen (TCP) port")
    parser.add_argument("--tcp", action="store_true", help="Serve over TCP instead of sending datagrams")
    parser.add_argument("--interval", type=float, default=0.5, help="Seconds between lines")
    parser.add_argument("--loop", action="store_true", help="Repeat the capture until interrupted (UDP)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args()


async def run(args: argparse.Namespace) -> None:
    lines = args.capture.read_text(encoding="utf-8").splitlines()

    if args.tcp:
        server = await serve_tcp(lines, args.host, args.port, interval=args.interval)
        LOG.info("Serving %s on %s:%s", args.capture, args.host, args.port)
        async with server:
            await server.serve_forever()
        return

    while True:
        sent = await replay_udp(lines, args.host, args.port, interval=args.interval)
        LOG.info("Sent %d lines to %s:%s", sent, args.host, args.port)
        if not args.loop:
            break


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        LOG.info("Interrupted")


if __name__ == "__main__":
    main()
