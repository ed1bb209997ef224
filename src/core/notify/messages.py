"""Human-readable fare alert payloads."""

from datetime import date

from core.models import PushMessage, Trip

FARE_ALERT_TITLE = "New Bus Available"

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _format_fare(fare: float) -> str:
    return str(int(fare)) if float(fare).is_integer() else f"{fare:.2f}"


def _format_day(day: date) -> str:
    # Fixed English names, as strftime follows the process locale.
    return f"{_WEEKDAYS[day.weekday()]} {_MONTHS[day.month - 1]} {day.day:02d} {day.year:04d}"


def build_fare_alert(trip: Trip, fare: float) -> PushMessage:
    """One message per trip, shared by every recipient in the dispatch batch."""
    fare_text = _format_fare(fare)
    return PushMessage(
        title=FARE_ALERT_TITLE,
        body=(
            f"{trip.origin_name} ➝ {trip.destination_name} | ₹{fare_text} | "
            f"{_format_day(trip.travel_date)}"
        ),
        data={
            "type": "bus_alert",
            "tripId": trip.trip_id,
            "source": trip.origin_name,
            "destination": trip.destination_name,
            "fare": fare_text,
            "date": trip.travel_date.isoformat(),
        },
    )
