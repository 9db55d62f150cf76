"""In-memory race state store.

Holds the competitor table and the latest race status. Only the ingestion
layer mutates it; readers get copies.
"""

from __future__ import annotations

from pyrmonitor.models.records import CompetitorRecord, RaceStatusRecord


class RaceStateStore:
    """Competitor table keyed by competitor number plus a single status slot."""

    def __init__(self) -> None:
        self._competitors: dict[str, CompetitorRecord] = {}
        self._status: RaceStatusRecord | None = None

    def upsert_passing(self, number: str, *, lap: int, position: int, time: str) -> CompetitorRecord:
        """Record a passing for *number*, overwriting its previous values."""
        record = self._competitors.get(number)
        if record is None:
            record = CompetitorRecord(number=number)
            self._competitors[number] = record
        record.laps = lap
        record.position = position
        record.last_time = time
        return record.model_copy()

    def replace_status(self, record: RaceStatusRecord) -> None:
        """Replace the stored status. Fields are never merged with the old one."""
        self._status = record

    @property
    def status(self) -> RaceStatusRecord | None:
        return self._status

    def competitor(self, number: str) -> CompetitorRecord | None:
        record = self._competitors.get(number)
        return record.model_copy() if record is not None else None

    def competitors(self) -> dict[str, CompetitorRecord]:
        """Copy of the full competitor table in first-seen order."""
        return {number: record.model_copy() for number, record in self._competitors.items()}

    def __len__(self) -> int:
        return len(self._competitors)

    @property
    def is_empty(self) -> bool:
        return not self._competitors and self._status is None

    def clear(self) -> None:
        self._competitors.clear()
        self._status = None
