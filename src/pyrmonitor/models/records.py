"""Race state records held by the store."""

from __future__ import annotations

from pydantic import ConfigDict, Field

from pyrmonitor.models._base import RMonitorBaseModel


class CompetitorRecord(RMonitorBaseModel):
    """Latest known lap/position for one competitor.

    The store mutates records in place; anything leaving the store is a copy.
    """

    number: str
    """Competitor number. An identifier, not assumed numeric."""

    laps: int = Field(default=0, ge=0)
    position: int = Field(default=0, ge=0)
    """Current position, ``0`` when unknown."""

    last_time: str = ""
    """Passing timestamp exactly as the feed sent it."""


class RaceStatusRecord(RMonitorBaseModel):
    """The latest race status. Replaced wholesale, never merged."""

    model_config = ConfigDict(frozen=True)

    time: str = ""
    total_laps: str = ""
    flag: str = "GREEN"
    time_to_go: str | None = None
    time_of_day: str | None = None
