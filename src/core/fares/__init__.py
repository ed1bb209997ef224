"""Fare source abstraction layer."""

from core.fares.interface import FareSource, format_travel_date, get_fare_source
from core.fares.redbus_source import RedbusFareSource

__all__ = ["FareSource", "RedbusFareSource", "format_travel_date", "get_fare_source"]
