"""Recipient token normalization and per-trip dispatch batching."""

import logging
import re

from core.errors import MalformedTokenError
from core.models import Alert, DispatchBatch

logger = logging.getLogger(__name__)

PUSH_TOKEN_PREFIX = "ExponentPushToken["
_WRAPPED_PREFIXES = (PUSH_TOKEN_PREFIX, "ExpoPushToken[")
_PUSH_TOKEN_RE = re.compile(r"^Expo(?:nent)?PushToken\[[^\[\]\s]+\]$")


def is_push_token(token: str) -> bool:
    return bool(_PUSH_TOKEN_RE.match(token))


def require_push_token(raw: str | None) -> str:
    """Normalize ``raw`` into a deliverable push token or raise MalformedTokenError."""
    if raw is None or not raw.strip():
        raise MalformedTokenError("Recipient has no push token")

    token = raw.strip()
    if not token.startswith(_WRAPPED_PREFIXES):
        token = f"{PUSH_TOKEN_PREFIX}{token}]"
    if not is_push_token(token):
        raise MalformedTokenError(f"Invalid push token {token!r}")
    return token


def normalize_token(raw: str | None) -> str | None:
    try:
        return require_push_token(raw)
    except MalformedTokenError:
        return None


def build_dispatch_batch(alerts: list[Alert]) -> DispatchBatch:
    """Resolve each alert's token and collapse duplicates by token string.

    Alerts whose recipient has no usable token land in ``skipped_alert_ids`` and
    are never part of the batch.
    """
    batch = DispatchBatch()
    for alert in alerts:
        try:
            token = require_push_token(alert.token)
        except MalformedTokenError as e:
            logger.info("Skipping alert %s for user %s: %s", alert.alert_id, alert.user_id, e.message)
            batch.skipped_alert_ids.append(alert.alert_id)
            continue

        if token not in batch.alert_ids_by_token:
            batch.tokens.append(token)
            batch.alert_ids_by_token[token] = []
        batch.alert_ids_by_token[token].append(alert.alert_id)
    return batch
