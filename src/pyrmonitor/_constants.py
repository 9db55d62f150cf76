"""Internal constants shared across the library."""

SENTINEL = "$"
DELIMITER = ","
QUOTE = '"'

DEFAULT_UPSTREAM_HOST = "127.0.0.1"
DEFAULT_UPSTREAM_PORT = 50000
DEFAULT_WS_HOST = "0.0.0.0"
DEFAULT_WS_PORT = 8080
DEFAULT_WS_PATH = "/"
DEFAULT_UDP_BIND_HOST = "0.0.0.0"

#: Seconds without a parsed packet before the upstream is presumed dead.
DEFAULT_LIVENESS_TIMEOUT: float = 10.0

#: Seconds allowed for binding or dialing the upstream socket.
DEFAULT_CONNECT_TIMEOUT: float = 5.0

#: Outbound messages buffered per subscriber before it is dropped.
DEFAULT_SUBSCRIBER_QUEUE_SIZE = 256

DEFAULT_FLAG = "GREEN"

# ------------------------------------------------------------------
# Wire tags
# ------------------------------------------------------------------

TAG_COMPETITION = "COMP"
TAG_RACE_STATUS = "RACE"
TAG_PASSING = "PASSING"
TAG_HEARTBEAT = "HEARTBEAT"
TAG_FLAG_SUMMARY = "F"


def liveness_diagnostic(timeout: float) -> str:
    """Human-readable reason attached to a liveness-timeout disconnect."""
    return (
        f"No data received from RMonitor server within {timeout:g} seconds. "
        "Check if the server is broadcasting and the IP/port are correct."
    )
