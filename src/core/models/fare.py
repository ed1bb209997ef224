"""Pydantic models for fare quotes and persisted fare history."""

from datetime import datetime

from pydantic import BaseModel, Field


class FareQuote(BaseModel):
    operator: str
    fare: float = Field(..., gt=0)
    bus_type: str | None = None
    departure_time: str | None = None


class FareSnapshot(BaseModel):
    trip_id: str
    fare: float = Field(..., gt=0)
    recorded_at: datetime
