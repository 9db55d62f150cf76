from __future__ import annotations

import pytest

from pyrmonitor.config import RelayConfig
from pyrmonitor.exceptions import RMonitorConfigError
from pyrmonitor.state.connection import TransportKind


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "RMONITOR_HOST",
        "RMONITOR_PORT",
        "RMONITOR_TRANSPORT",
        "RMONITOR_WS_PORT",
        "RMONITOR_LIVENESS_TIMEOUT",
        "RMONITOR_CONNECT_TIMEOUT",
        "RMONITOR_AUTO_CONNECT",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    config = RelayConfig.from_env()

    assert config.upstream_host == "127.0.0.1"
    assert config.upstream_port == 50000
    assert config.ws_port == 8080
    assert config.transport == TransportKind.UDP
    assert config.liveness_timeout == 10.0
    assert config.auto_connect is False


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("RMONITOR_HOST", "192.168.1.20")
    monkeypatch.setenv("RMONITOR_PORT", "50001")
    monkeypatch.setenv("RMONITOR_TRANSPORT", "TCP")
    monkeypatch.setenv("RMONITOR_WS_PORT", "9000")
    monkeypatch.setenv("RMONITOR_LIVENESS_TIMEOUT", "2.5")
    monkeypatch.setenv("RMONITOR_AUTO_CONNECT", "yes")

    config = RelayConfig.from_env()

    assert config.upstream_host == "192.168.1.20"
    assert config.upstream_port == 50001
    assert config.transport == TransportKind.TCP
    assert config.ws_port == 9000
    assert config.liveness_timeout == 2.5
    assert config.auto_connect is True


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("RMONITOR_PORT", "not-a-number")
    monkeypatch.setenv("RMONITOR_HOST", "192.168.1.20")

    config = RelayConfig.from_env(upstream_port=50002, upstream_host="10.0.0.1")

    assert config.upstream_port == 50002
    assert config.upstream_host == "10.0.0.1"


def test_invalid_env_number_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("RMONITOR_LIVENESS_TIMEOUT", "soon")

    with pytest.raises(RMonitorConfigError):
        RelayConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"transport": "serial"},
        {"upstream_port": 70000},
        {"ws_port": -1},
        {"ws_path": "ws"},
        {"liveness_timeout": 0},
        {"subscriber_queue_size": 0},
        {"upstream_host": ""},
    ],
)
def test_invalid_values_rejected(kwargs: dict) -> None:
    with pytest.raises(RMonitorConfigError):
        RelayConfig(**kwargs)
