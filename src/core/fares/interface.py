from abc import ABC, abstractmethod
from datetime import date

from core.models import FareQuote


_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_travel_date(travel_date: date) -> str:
    # strftime's %b is locale dependent; the search API only accepts English months.
    return f"{travel_date.day:02d}-{_MONTHS[travel_date.month - 1]}-{travel_date.year:04d}"


class FareSource(ABC):
    @abstractmethod
    def search(self, origin_code: str, destination_code: str, travel_date: str) -> list[FareQuote]:
        """Return every fare quote for the route on ``travel_date`` (``DD-Mon-YYYY``).

        Raises SourceUnavailableError when the lookup fails. An empty list means
        the source answered but had nothing to sell.
        """


def get_fare_source() -> FareSource:
    from core.config import get_config

    config = get_config()

    from core.fares.redbus_source import RedbusFareSource

    return RedbusFareSource(
        base_url=config.fare_source_url,
        timeout=config.fare_source_timeout,
    )
