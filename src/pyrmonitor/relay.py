"""The relay session: one upstream feed, N subscribers.

:class:`RelaySession` owns the race state store, the connection state, the
upstream listener, the liveness supervisor and the broadcast hub. All of
them are mutated only from the event loop the session runs on.

Usage::

    async with RelaySession(RelayConfig.from_env()) as relay:
        await relay.connect()
        ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, assert_never

from pydantic import ValidationError

from pyrmonitor._constants import liveness_diagnostic
from pyrmonitor._transport import UpstreamListener
from pyrmonitor.config import RelayConfig
from pyrmonitor.exceptions import RMonitorTransportError
from pyrmonitor.hub import BroadcastHub, SubscriberChannel, SubscriberSession
from pyrmonitor.ingestion.apply import apply_packet
from pyrmonitor.ingestion.parse import parse_line
from pyrmonitor.models.control import ConnectRequest, DisconnectRequest, parse_control_message
from pyrmonitor.models.events import (
    ConnectionStatusEvent,
    OutboundEvent,
    PassingEvent,
    RaceStatusEvent,
)
from pyrmonitor.state.connection import ConnectionState
from pyrmonitor.state.store import RaceStateStore
from pyrmonitor.supervisor import LivenessSupervisor

_logger = logging.getLogger(__name__)


class RelaySession:
    """Ingest one RMonitor feed and relay derived events to subscribers."""

    def __init__(self, config: RelayConfig | None = None) -> None:
        self._config = config or RelayConfig()
        self.store = RaceStateStore()
        self.connection = ConnectionState()
        self.hub = BroadcastHub(queue_size=self._config.subscriber_queue_size)
        self._listener = UpstreamListener(
            self._config.transport,
            on_line=self.handle_line,
            on_link_lost=self._on_link_lost,
            udp_bind_host=self._config.udp_bind_host,
            connect_timeout=self._config.connect_timeout,
        )
        self._supervisor = LivenessSupervisor(
            self.connection,
            timeout=self._config.liveness_timeout,
            on_expired=self._on_liveness_expired,
        )
        self._lock = asyncio.Lock()
        self._closed = False

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RelaySession:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Cancel the deadline, close the upstream link and every subscriber."""
        if self._closed:
            return
        self._closed = True
        self._supervisor.cancel()
        self._listener.disconnect()
        self.connection.mark_disconnected()
        await self.hub.close()

    @property
    def config(self) -> RelayConfig:
        return self._config

    @property
    def listener(self) -> UpstreamListener:
        return self._listener

    @property
    def supervisor(self) -> LivenessSupervisor:
        return self._supervisor

    # ------------------------------------------------------------------
    # Upstream control
    # ------------------------------------------------------------------

    async def connect(self, host: str | None = None, port: int | None = None) -> bool:
        """Connect to *host*:*port* (configured defaults when omitted).

        Any existing link is torn down first. A failure is published as a
        ``CONNECTION_STATUS`` event with ``connected=false``; it is not retried.
        Returns whether the link is up.
        """
        async with self._lock:
            if self._closed:
                return False
            host = host or self._config.upstream_host
            port = port or self._config.upstream_port

            self._supervisor.cancel()
            self._listener.disconnect()
            self.connection.begin(host, port)
            _logger.info("Connecting to RMonitor at %s:%s over %s", host, port, self._listener.kind.value)

            try:
                await self._listener.connect(host, port)
            except RMonitorTransportError as exc:
                self.connection.mark_disconnected()
                if self._closed:
                    _logger.debug("Connect to %s:%s abandoned, session closed", host, port)
                    return False
                _logger.warning("RMonitor connection failed: %s", exc)
                self.hub.publish(ConnectionStatusEvent(connected=False, host=host, port=port, error=str(exc)))
                return False

            local = self._listener.local_address
            if port == 0 and local is not None:
                # Datagram bind on an OS-assigned port.
                self.connection.port = port = local[1]
            self.connection.mark_connected()
            self._supervisor.arm()
            _logger.info("Listening for RMonitor on %s:%s", host, port)
            self.hub.publish(ConnectionStatusEvent(connected=True, host=host, port=port))
            return True

    async def disconnect(self) -> None:
        """Close the upstream link on request and clear all race state."""
        async with self._lock:
            _logger.info("Disconnecting from RMonitor")
            self._reset()
            self.hub.publish(ConnectionStatusEvent(connected=False))

    def _reset(self) -> None:
        self._supervisor.cancel()
        self._listener.disconnect()
        self.store.clear()
        self.connection.reset()

    def _on_liveness_expired(self) -> None:
        self._reset()
        self.hub.publish(
            ConnectionStatusEvent(
                connected=False,
                error=liveness_diagnostic(self._config.liveness_timeout),
            )
        )

    def _on_link_lost(self, exc: Exception | None) -> None:
        # Race state survives a transport error; only a timeout clears it.
        self._supervisor.cancel()
        self.connection.mark_disconnected()
        if exc is None:
            message = "Upstream closed the connection"
        else:
            message = str(exc) or type(exc).__name__
        _logger.warning("RMonitor link lost: %s", message)
        self.hub.publish(
            ConnectionStatusEvent(
                connected=False,
                host=self.connection.host,
                port=self.connection.port,
                error=message,
            )
        )

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    def handle_line(self, line: str) -> OutboundEvent | None:
        """Parse, apply and publish one upstream line.

        Unrecognized lines are dropped silently and do not count as liveness.
        """
        packet = parse_line(line)
        if packet is None:
            _logger.debug("Ignoring unrecognized line %r", line[:80])
            return None
        self._supervisor.packet_received()
        event = apply_packet(self.store, packet)
        _logger.debug("RMonitor message: %s", event.type)
        self.hub.publish(event)
        return event

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------

    def connection_status(self) -> ConnectionStatusEvent:
        state = self.connection
        return ConnectionStatusEvent(
            connected=state.is_connected,
            host=state.host or self._config.upstream_host,
            port=state.port if state.port is not None else self._config.upstream_port,
        )

    def snapshot(self) -> list[OutboundEvent]:
        """Events that bring a new subscriber up to the current state."""
        events: list[OutboundEvent] = [self.connection_status()]
        if len(self.store):
            events.append(PassingEvent(all_laps=self.store.competitors()))
        status = self.store.status
        if status is not None:
            events.append(RaceStatusEvent.from_record(status))
        return events

    def subscriber_joined(self, channel: SubscriberChannel) -> SubscriberSession:
        return self.hub.join(channel, self.snapshot())

    async def subscriber_left(self, session: SubscriberSession) -> None:
        await self.hub.leave(session)

    async def handle_control(self, text: str | bytes) -> None:
        """Apply a CONNECT or DISCONNECT request; anything else is logged and ignored."""
        try:
            message = parse_control_message(text)
        except ValidationError as exc:
            _logger.warning(
                "Ignoring malformed control message %r (%d errors)",
                text[:200],
                exc.error_count(),
            )
            return

        match message:
            case ConnectRequest():
                await self.connect(message.host, message.port)
            case DisconnectRequest():
                await self.disconnect()
            case _:
                assert_never(message)

    def health(self) -> dict[str, Any]:
        since = self.connection.seconds_since_last_packet()
        return {
            "phase": self.connection.phase.value,
            "connected": self.connection.is_connected,
            "host": self.connection.host,
            "port": self.connection.port,
            "transport": self._listener.kind.value,
            "seconds_since_last_packet": round(since, 3) if since is not None else None,
            "liveness_armed": self._supervisor.armed,
            "competitors": len(self.store),
            "subscribers": len(self.hub),
        }
