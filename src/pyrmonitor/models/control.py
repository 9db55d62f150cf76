"""Inbound control requests sent by subscribers."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import ConfigDict, Field, TypeAdapter, field_validator

from pyrmonitor.models._base import RMonitorBaseModel


class _ControlModel(RMonitorBaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class ConnectRequest(_ControlModel):
    """Connect the relay to an upstream feed.

    ``host``/``port`` left unset (or sent as ``""``/``0``/``null``) fall back
    to the relay's configured upstream target.
    """

    type: Literal["CONNECT"]
    host: str | None = None
    port: int | None = Field(default=None, ge=1, le=65535)

    @field_validator("host", mode="before")
    @classmethod
    def _blank_host(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("port", mode="before")
    @classmethod
    def _blank_port(cls, value: Any) -> Any:
        if value in (None, "", 0, "0"):
            return None
        return value


class DisconnectRequest(_ControlModel):
    type: Literal["DISCONNECT"]


ControlMessage = Annotated[ConnectRequest | DisconnectRequest, Field(discriminator="type")]

_CONTROL_ADAPTER: TypeAdapter[ControlMessage] = TypeAdapter(ControlMessage)


def parse_control_message(text: str | bytes) -> ControlMessage:
    """Validate one inbound JSON frame.

    Raises
    ------
    pydantic.ValidationError
        For invalid JSON, an unknown ``type`` or out-of-range fields.
    """
    return _CONTROL_ADAPTER.validate_json(text)
