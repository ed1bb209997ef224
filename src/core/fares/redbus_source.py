"""redbus search API adapter: one quote per fare class per bus."""

import logging
from typing import Any

import requests
from pydantic import ValidationError

from core.clients import get_http_session
from core.errors import SourceUnavailableError
from core.models import FareQuote

from .interface import FareSource

logger = logging.getLogger(__name__)

# Fixed flags the search page sends on its initial load.
_SEARCH_FLAGS: dict[str, str] = {
    "limit": "25",
    "offset": "0",
    "meta": "true",
    "groupId": "0",
    "sectionId": "0",
    "sort": "0",
    "sortOrder": "0",
    "from": "initialLoad",
    "getUuid": "true",
    "bT": "1",
}


class RedbusFareSource(FareSource):
    def __init__(self, base_url: str, session: requests.Session | None = None, timeout: float = 15.0):
        self._base_url = base_url
        self._session = session
        self._timeout = timeout

    def _http(self) -> requests.Session:
        return self._session if self._session is not None else get_http_session()

    def search(self, origin_code: str, destination_code: str, travel_date: str) -> list[FareQuote]:
        logger.info("Fetching buses for %s to %s on %s", origin_code, destination_code, travel_date)
        params = {"fromCity": origin_code, "toCity": destination_code, "DOJ": travel_date, **_SEARCH_FLAGS}
        try:
            response = self._http().post(self._base_url, params=params, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise SourceUnavailableError(f"Fare search failed for {origin_code}->{destination_code}: {e}") from e
        except ValueError as e:
            raise SourceUnavailableError(f"Fare search returned a non-JSON body: {e}") from e

        return self._parse_inventories(payload)

    def _parse_inventories(self, payload: Any) -> list[FareQuote]:
        try:
            inventories = payload["data"]["inventories"] or []
        except (KeyError, TypeError) as e:
            raise SourceUnavailableError(f"Fare search response missing inventories: {e}") from e

        quotes: list[FareQuote] = []
        for bus in inventories:
            if not isinstance(bus, dict):
                logger.warning("Ignoring malformed inventory entry %r", bus)
                continue
            operator = str(bus.get("travelsName") or bus.get("operatorId") or "unknown")
            fares = bus.get("fareList") or []
            if not isinstance(fares, list):
                logger.warning("Ignoring non-list fareList %r from %s", fares, operator)
                continue
            for fare in fares:
                try:
                    quotes.append(
                        FareQuote(
                            operator=operator,
                            fare=fare,
                            bus_type=bus.get("busType"),
                            departure_time=bus.get("departureTime"),
                        )
                    )
                except ValidationError:
                    logger.warning("Ignoring invalid fare %r from %s", fare, operator)
        return quotes
