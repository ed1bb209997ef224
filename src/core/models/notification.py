"""Pydantic models for push messages and per-token delivery outcomes."""

from enum import Enum

from pydantic import BaseModel, Field


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    REJECTED_PERMANENT = "rejected_permanent"
    REJECTED_TRANSIENT = "rejected_transient"
    UNKNOWN = "unknown"


class PushMessage(BaseModel):
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    data: dict[str, str] = {}


class DeliveryOutcome(BaseModel):
    token: str
    status: DeliveryStatus
    error: str | None = None


class DispatchBatch(BaseModel):
    """Deduplicated tokens for one trip and the alerts each token stands for."""

    tokens: list[str] = []
    alert_ids_by_token: dict[str, list[str]] = {}
    skipped_alert_ids: list[str] = []

    def alert_ids_for(self, tokens: list[str]) -> list[str]:
        return [alert_id for token in tokens for alert_id in self.alert_ids_by_token.get(token, [])]
