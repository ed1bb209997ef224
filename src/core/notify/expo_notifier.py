"""Expo push service adapter."""

import logging
from typing import Any

import requests

from core.clients import get_http_session
from core.errors import NotificationError
from core.models import DeliveryOutcome, DeliveryStatus, PushMessage

from .interface import Notifier

logger = logging.getLogger(__name__)

EXPO_MAX_BATCH_SIZE = 100

# Ticket errors that will never succeed for this token.
_PERMANENT_ERRORS = frozenset({"DeviceNotRegistered"})


class ExpoNotifier(Notifier):
    def __init__(
        self,
        push_url: str,
        session: requests.Session | None = None,
        access_token: str = "",
        batch_size: int = EXPO_MAX_BATCH_SIZE,
        timeout: float = 30.0,
    ):
        if not 1 <= batch_size <= EXPO_MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {EXPO_MAX_BATCH_SIZE}")
        self._push_url = push_url
        self._session = session
        self._access_token = access_token
        self._timeout = timeout
        self.max_batch_size = batch_size

    def _http(self) -> requests.Session:
        return self._session if self._session is not None else get_http_session()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    def send(self, tokens: list[str], message: PushMessage) -> list[DeliveryOutcome]:
        if not tokens:
            return []
        if len(tokens) > self.max_batch_size:
            raise NotificationError(f"{len(tokens)} tokens exceed the batch limit of {self.max_batch_size}")

        payload = [
            {
                "to": token,
                "sound": "default",
                "title": message.title,
                "body": message.body,
                "data": message.data,
                "channelId": "bus_alerts",
                "priority": "high",
            }
            for token in tokens
        ]

        try:
            response = self._http().post(self._push_url, json=payload, headers=self._headers(), timeout=self._timeout)
            response.raise_for_status()
            tickets = response.json()["data"]
        except (requests.RequestException, ValueError, KeyError, TypeError) as e:
            # The request went out; whether Expo accepted it is unknown.
            logger.error("Error sending push chunk of %d tokens: %s", len(tokens), e)
            return [DeliveryOutcome(token=token, status=DeliveryStatus.UNKNOWN, error=str(e)) for token in tokens]

        outcomes = [self._to_outcome(token, ticket) for token, ticket in zip(tokens, tickets)]
        # Expo returns tickets in request order; any shortfall is unaccounted for.
        for token in tokens[len(outcomes):]:
            outcomes.append(DeliveryOutcome(token=token, status=DeliveryStatus.UNKNOWN, error="missing ticket"))

        delivered = sum(1 for outcome in outcomes if outcome.status == DeliveryStatus.DELIVERED)
        logger.info("Push chunk sent: %d accepted, %d not accepted", delivered, len(outcomes) - delivered)
        return outcomes

    @staticmethod
    def _to_outcome(token: str, ticket: dict[str, Any]) -> DeliveryOutcome:
        if ticket.get("status") == "ok":
            return DeliveryOutcome(token=token, status=DeliveryStatus.DELIVERED)

        details = ticket.get("details") or {}
        error = details.get("error") or ticket.get("message") or "unknown error"
        status = (
            DeliveryStatus.REJECTED_PERMANENT
            if details.get("error") in _PERMANENT_ERRORS
            else DeliveryStatus.REJECTED_TRANSIENT
        )
        logger.warning("Token %s failed: %s", token, ticket.get("message") or error)
        return DeliveryOutcome(token=token, status=status, error=str(error))
