"""Base models shared by the relay's records and wire events.

Every model inherits from :class:`RMonitorBaseModel`, which maps
snake_case fields to the camelCase keys subscribers expect via
``alias_generator=to_camel``. Wire events additionally inherit from
:class:`WireEvent`, which knows how to serialise itself.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RMonitorBaseModel(BaseModel):
    """Base for relay models (camelCase on the wire, snake_case in Python)."""

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class WireEvent(RMonitorBaseModel):
    """Base for outbound events sent to subscribers."""

    model_config = ConfigDict(frozen=True)

    def to_wire(self) -> str:
        """Serialise to the JSON text frame sent to subscribers.

        Optional fields that are unset are omitted rather than sent as ``null``.
        """
        return self.model_dump_json(by_alias=True, exclude_none=True)
