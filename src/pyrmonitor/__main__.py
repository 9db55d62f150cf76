"""Command-line entry point: ``pyrmonitor-relay`` / ``python -m pyrmonitor``."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Any

from aiohttp import web

from pyrmonitor.config import RelayConfig
from pyrmonitor.exceptions import RMonitorConfigError
from pyrmonitor.server import create_app

_logger = logging.getLogger("pyrmonitor")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Relay an RMonitor timing feed to WebSocket subscribers.",
        epilog="Unset options fall back to RMONITOR_* environment variables.",
    )
    parser.add_argument("--host", dest="upstream_host", help="Default RMonitor host")
    parser.add_argument("--port", dest="upstream_port", type=int, help="Default RMonitor port")
    parser.add_argument("--transport", choices=["udp", "tcp"], help="Upstream transport kind")
    parser.add_argument("--ws-host", dest="ws_host", help="Subscriber server interface")
    parser.add_argument("--ws-port", dest="ws_port", type=int, help="Subscriber server port")
    parser.add_argument("--ws-path", dest="ws_path", help="WebSocket route path")
    parser.add_argument(
        "--liveness-timeout",
        dest="liveness_timeout",
        type=float,
        help="Seconds without a packet before the upstream is reset",
    )
    parser.add_argument(
        "--auto-connect",
        dest="auto_connect",
        action="store_true",
        default=None,
        help="Connect to the default upstream on startup",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=os.environ.get("RMONITOR_LOG_LEVEL", "INFO").strip().upper(),
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args(argv)
    # argparse does not check defaults against choices.
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid RMONITOR_LOG_LEVEL {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")
    return args


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, Any] = {
        key: value
        for key, value in vars(args).items()
        if key != "log_level" and value is not None
    }
    try:
        config = RelayConfig.from_env(**overrides)
    except RMonitorConfigError as exc:
        _logger.error("Invalid configuration: %s", exc)
        return 2

    _logger.info("WebSocket server listening on %s:%s%s", config.ws_host, config.ws_port, config.ws_path)
    _logger.info("Ready to connect to RMonitor at %s:%s", config.upstream_host, config.upstream_port)
    web.run_app(create_app(config), host=config.ws_host, port=config.ws_port, print=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
