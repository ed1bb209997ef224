"""Scheduled fare check: runs one DispatchOrchestrator pass."""

import logging
from typing import Any

from pydantic import ValidationError

from core.config import get_config
from core.db import PostgresAlertStore
from core.errors import ConfigurationError, FareWatchError
from core.fares import get_fare_source
from core.notify import get_notifier
from core.services.dispatch import DispatchOrchestrator

logger = logging.getLogger(__name__)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    """Check fares for every pending trip and notify matching alerts.

    Per-trip failures are part of the report and still return 200. Only a run
    that cannot start or cannot read its candidate trips returns 500; the next
    scheduled invocation retries it.
    """
    try:
        config = get_config()
        logging.getLogger().setLevel(config.log_level.upper())
    except (ValidationError, ValueError) as e:
        error = ConfigurationError(f"Invalid fare check configuration: {e}")
        logger.error("Fare check aborted: %s", error.message)
        return {"statusCode": 500, "body": error.summary}

    try:
        with PostgresAlertStore(config) as store:
            orchestrator = DispatchOrchestrator(
                store=store,
                fare_source=get_fare_source(),
                notifier=get_notifier(),
                max_workers=config.fare_check_workers,
            )
            report = orchestrator.run_once()
    except FareWatchError as e:
        logger.error("Fare check aborted: %s", e.message)
        return {"statusCode": 500, "body": e.summary}
    except Exception:
        logger.exception("Fare check aborted")
        return {"statusCode": 500, "body": "Fare check failed"}

    return {"statusCode": 200, "body": report.summary()}
