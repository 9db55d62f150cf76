"""aiohttp application exposing the subscriber WebSocket channel."""

from __future__ import annotations

import logging

from aiohttp import WSMsgType, web

from pyrmonitor.config import RelayConfig
from pyrmonitor.relay import RelaySession

_logger = logging.getLogger(__name__)

RELAY_KEY = web.AppKey("relay", RelaySession)

#: Seconds between WebSocket pings; unanswered pings close the subscriber.
WS_HEARTBEAT = 30.0


async def handle_subscriber(request: web.Request) -> web.WebSocketResponse:
    relay = request.app[RELAY_KEY]
    ws = web.WebSocketResponse(heartbeat=WS_HEARTBEAT)
    await ws.prepare(request)

    session = relay.subscriber_joined(ws)
    try:
        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                await relay.handle_control(msg.data)
            elif msg.type == WSMsgType.ERROR:
                _logger.debug("Subscriber %s socket error: %s", session.id, ws.exception())
    finally:
        await relay.subscriber_left(session)
    return ws


async def handle_health(request: web.Request) -> web.Response:
    relay = request.app[RELAY_KEY]
    return web.json_response(relay.health())


async def _on_startup(app: web.Application) -> None:
    relay = app[RELAY_KEY]
    if relay.config.auto_connect:
        await relay.connect()


async def _on_cleanup(app: web.Application) -> None:
    await app[RELAY_KEY].close()


def create_app(config: RelayConfig | None = None, *, relay: RelaySession | None = None) -> web.Application:
    """Build the web application around a relay session.

    When *relay* is omitted a new one is created from *config*. The
    application closes the relay on cleanup either way.
    """
    if relay is None:
        relay = RelaySession(config)
    app = web.Application()
    app[RELAY_KEY] = relay
    app.router.add_get("/health", handle_health)
    app.router.add_get(relay.config.ws_path, handle_subscriber)
    app.on_startup.append(_on_startup)
    app.on_cleanup.append(_on_cleanup)
    return app
