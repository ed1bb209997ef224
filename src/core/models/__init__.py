"""
Pydantic models for FareWatch.
"""

from core.models.fare import FareQuote, FareSnapshot
from core.models.notification import DeliveryOutcome, DeliveryStatus, DispatchBatch, PushMessage
from core.models.report import RunReport, TripResult, TripStatus
from core.models.trip import Alert, Trip

__all__ = [
    "Alert",
    "DeliveryOutcome",
    "DeliveryStatus",
    "DispatchBatch",
    "FareQuote",
    "FareSnapshot",
    "PushMessage",
    "RunReport",
    "Trip",
    "TripResult",
    "TripStatus",
]
