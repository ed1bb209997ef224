"""Fare-check run: look up fares per trip, push to satisfied alerts, record the outcome.

Alerts are marked notified once a push attempt that included their token has
been made, not when the push service confirms delivery. Each trip is handled
on its own; a failure on one trip is recorded in the run report and never
stops the remaining trips.
"""

import logging
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from core.db.interface import AlertStore
from core.errors import ConfigurationError, ErrorCode, FareWatchError, SourceUnavailableError, StoreWriteError
from core.fares.interface import FareSource, format_travel_date
from core.models import DeliveryStatus, DispatchBatch, FareSnapshot, RunReport, Trip, TripResult, TripStatus
from core.notify.interface import Notifier
from core.notify.messages import build_fare_alert
from core.services.fare_evaluator import lowest_fare
from core.services.recipients import build_dispatch_batch

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _chunked(tokens: list[str], size: int | None) -> Iterator[list[str]]:
    if not size:
        yield tokens
        return
    for start in range(0, len(tokens), size):
        yield tokens[start : start + size]


class DispatchOrchestrator:
    def __init__(
        self,
        store: AlertStore,
        fare_source: FareSource,
        notifier: Notifier,
        max_workers: int = 1,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if store is None or fare_source is None or notifier is None:
            raise ConfigurationError("Fare check needs an alert store, a fare source and a notifier")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._store = store
        self._fare_source = fare_source
        self._notifier = notifier
        self._max_workers = max_workers
        self._clock = clock

    def run_once(self) -> RunReport:
        started_at = self._clock()
        today = started_at.astimezone(timezone.utc).date()
        trips = self._store.fetch_pending_trips(today)
        logger.info("Checking fares for %d trips travelling on or after %s", len(trips), today)

        if self._max_workers > 1 and len(trips) > 1:
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(trips))) as executor:
                results = list(executor.map(self._process_trip, trips))
        else:
            results = [self._process_trip(trip) for trip in trips]

        report = RunReport(started_at=started_at, finished_at=self._clock(), results=results)
        logger.info(report.summary())
        return report

    def _process_trip(self, trip: Trip) -> TripResult:
        try:
            return self._check_trip(trip)
        except FareWatchError as e:
            logger.error("Trip %s failed: %s", trip.trip_id, e.message)
            return TripResult(trip_id=trip.trip_id, status=TripStatus.FAILED, error_code=e.code)
        except Exception:
            logger.exception("Unexpected error checking trip %s", trip.trip_id)
            return TripResult(trip_id=trip.trip_id, status=TripStatus.FAILED, error_code=ErrorCode.INTERNAL_ERROR)

    def _check_trip(self, trip: Trip) -> TripResult:
        travel_date = format_travel_date(trip.travel_date)
        try:
            quotes = self._fare_source.search(trip.origin_code, trip.destination_code, travel_date)
        except SourceUnavailableError as e:
            logger.warning("Skipping trip %s: %s", trip.trip_id, e.message)
            return TripResult(trip_id=trip.trip_id, status=TripStatus.SKIPPED, error_code=e.code)

        if not quotes:
            logger.warning(
                "Skipping trip %s: no fares for %s to %s on %s",
                trip.trip_id,
                trip.origin_code,
                trip.destination_code,
                travel_date,
            )
            return TripResult(trip_id=trip.trip_id, status=TripStatus.SKIPPED, error_code=ErrorCode.SOURCE_UNAVAILABLE)

        min_fare = lowest_fare(quotes)
        try:
            self._store.record_snapshot(FareSnapshot(trip_id=trip.trip_id, fare=min_fare, recorded_at=self._clock()))
        except StoreWriteError as e:
            logger.error("Trip %s failed: fare snapshot not recorded, dispatch skipped: %s", trip.trip_id, e.message)
            return TripResult(trip_id=trip.trip_id, status=TripStatus.FAILED, min_fare=min_fare, error_code=e.code)

        satisfied = [alert for alert in trip.pending_alerts() if min_fare <= alert.target_price]
        batch = build_dispatch_batch(satisfied)
        if not batch.tokens:
            return TripResult(
                trip_id=trip.trip_id, status=TripStatus.NO_MATCH, min_fare=min_fare, snapshot_recorded=True
            )

        attempted, stale_tokens = self._dispatch(trip, min_fare, batch)
        alert_ids = batch.alert_ids_for(attempted)
        result = TripResult(
            trip_id=trip.trip_id,
            status=TripStatus.FAILED,
            min_fare=min_fare,
            snapshot_recorded=True,
            stale_tokens=stale_tokens,
            error_code=ErrorCode.DISPATCH_FAILED,
        )
        if not alert_ids:
            return result

        try:
            self._store.mark_notified(alert_ids)
        except StoreWriteError as e:
            logger.error(
                "Trip %s failed: push attempted for %d tokens but %d alerts were not marked notified: %s",
                trip.trip_id,
                len(attempted),
                len(alert_ids),
                e.message,
            )
            result.error_code = e.code
            return result

        result.status = TripStatus.NOTIFIED
        result.notified_alert_ids = alert_ids
        # A partially attempted batch still reports the chunks that never went out.
        result.error_code = ErrorCode.DISPATCH_FAILED if len(attempted) < len(batch.tokens) else None
        logger.info("Trip %s: min fare %s, %d alerts notified", trip.trip_id, min_fare, len(alert_ids))
        return result

    def _dispatch(self, trip: Trip, min_fare: float, batch: DispatchBatch) -> tuple[list[str], list[str]]:
        """Send one message for the trip; return (attempted tokens, permanently rejected tokens)."""
        message = build_fare_alert(trip, min_fare)
        attempted: list[str] = []
        stale_tokens: list[str] = []
        for chunk in _chunked(batch.tokens, self._notifier.max_batch_size):
            try:
                outcomes = self._notifier.send(chunk, message)
            except Exception:
                logger.exception(
                    "Push dispatch failed for %d tokens on trip %s; their alerts stay pending",
                    len(chunk),
                    trip.trip_id,
                )
                continue
            attempted.extend(chunk)
            for outcome in outcomes:
                if outcome.status == DeliveryStatus.REJECTED_PERMANENT:
                    logger.warning("Token %s is no longer registered: %s", outcome.token, outcome.error)
                    stale_tokens.append(outcome.token)
        return attempted, stale_tokens
