from abc import ABC, abstractmethod
from datetime import date

from core.models import FareSnapshot, Trip


class AlertStore(ABC):
    @abstractmethod
    def fetch_pending_trips(self, today: date) -> list[Trip]:
        """Trips travelling on or after ``today`` with at least one un-notified alert."""

    @abstractmethod
    def record_snapshot(self, snapshot: FareSnapshot) -> None: ...

    @abstractmethod
    def mark_notified(self, alert_ids: list[str]) -> int:
        """Set notified for every id in one write; returns the number of rows changed."""
