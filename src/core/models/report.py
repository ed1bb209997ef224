"""Pydantic models summarising a fare-check run."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from core.errors import ErrorCode


class TripStatus(str, Enum):
    NOTIFIED = "notified"
    NO_MATCH = "no_match"
    SKIPPED = "skipped"
    FAILED = "failed"


class TripResult(BaseModel):
    trip_id: str
    status: TripStatus
    min_fare: float | None = None
    snapshot_recorded: bool = False
    notified_alert_ids: list[str] = []
    stale_tokens: list[str] = []
    error_code: ErrorCode | None = None


class RunReport(BaseModel):
    started_at: datetime
    finished_at: datetime
    results: list[TripResult] = []

    def count(self, status: TripStatus) -> int:
        return sum(1 for result in self.results if result.status == status)

    @property
    def notified_alerts(self) -> int:
        return sum(len(result.notified_alert_ids) for result in self.results)

    def summary(self) -> str:
        return (
            f"Fare check: {len(self.results)} trips, "
            f"{self.count(TripStatus.NOTIFIED)} notified, "
            f"{self.count(TripStatus.NO_MATCH)} no match, "
            f"{self.count(TripStatus.SKIPPED)} skipped, "
            f"{self.count(TripStatus.FAILED)} failed, "
            f"{self.notified_alerts} alerts marked"
        )
