"""Shared test fixtures for FareWatch."""

import os
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file for test configuration
load_dotenv()

# Unset AWS_PROFILE for local testing (Secrets Manager is never reached in tests)
if "AWS_PROFILE" in os.environ:
    del os.environ["AWS_PROFILE"]

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from core.db.interface import AlertStore  # noqa: E402
from core.errors import StoreWriteError  # noqa: E402
from core.fares.interface import FareSource  # noqa: E402
from core.models import Alert, DeliveryOutcome, DeliveryStatus, FareQuote, Trip  # noqa: E402
from core.notify.interface import Notifier  # noqa: E402

FROZEN_NOW = datetime(2025, 12, 20, 6, 30, tzinfo=timezone.utc)


# In-memory collaborators
class InMemoryAlertStore(AlertStore):
    """Applies the same pending-trip filter as the Postgres read model."""

    def __init__(self, trips: list[Trip]):
        self.trips = trips
        self.snapshots = []
        self.mark_calls: list[list[str]] = []
        self.fail_snapshot_for: set[str] = set()
        self.fail_mark_for: set[str] = set()

    def fetch_pending_trips(self, today: date) -> list[Trip]:
        return [
            trip.model_copy(deep=True)
            for trip in self.trips
            if trip.travel_date >= today and trip.pending_alerts()
        ]

    def record_snapshot(self, snapshot) -> None:
        if snapshot.trip_id in self.fail_snapshot_for:
            raise StoreWriteError(f"insert failed for {snapshot.trip_id}")
        self.snapshots.append(snapshot)

    def mark_notified(self, alert_ids: list[str]) -> int:
        owners = {alert.alert_id: trip.trip_id for trip in self.trips for alert in trip.alerts}
        if any(owners.get(alert_id) in self.fail_mark_for for alert_id in alert_ids):
            raise StoreWriteError("update failed")
        self.mark_calls.append(list(alert_ids))
        changed = 0
        for trip in self.trips:
            for alert in trip.alerts:
                if alert.alert_id in alert_ids and not alert.notified:
                    alert.notified = True
                    changed += 1
        return changed

    def notified_ids(self) -> set[str]:
        return {alert.alert_id for trip in self.trips for alert in trip.alerts if alert.notified}


class FakeFareSource(FareSource):
    """Fares keyed by (origin, destination); an exception value is raised instead."""

    def __init__(self, fares: dict[tuple[str, str], object] | None = None):
        self.fares = fares or {}
        self.calls: list[tuple[str, str, str]] = []

    def search(self, origin_code: str, destination_code: str, travel_date: str) -> list[FareQuote]:
        self.calls.append((origin_code, destination_code, travel_date))
        result = self.fares.get((origin_code, destination_code), [])
        if isinstance(result, Exception):
            raise result
        return [FareQuote(operator=f"Operator {i}", fare=fare) for i, fare in enumerate(result)]


class FakeNotifier(Notifier):
    def __init__(self, max_batch_size: int | None = None):
        self.max_batch_size = max_batch_size
        self.calls = []
        self.statuses: dict[str, DeliveryStatus] = {}
        self.fail_on_call: set[int] = set()

    def send(self, tokens, message):
        call_index = len(self.calls)
        self.calls.append((list(tokens), message))
        if call_index in self.fail_on_call:
            raise ConnectionError("push service unreachable")
        return [
            DeliveryOutcome(token=token, status=self.statuses.get(token, DeliveryStatus.DELIVERED))
            for token in tokens
        ]


def build_trip(trip_id="trip-1", origin="HYD", destination="BLR", travel_date=date(2025, 12, 25), alerts=()):
    return Trip(
        trip_id=trip_id,
        origin_code=origin,
        origin_name={"HYD": "Hyderabad", "BLR": "Bangalore"}.get(origin, origin),
        destination_code=destination,
        destination_name={"HYD": "Hyderabad", "BLR": "Bangalore"}.get(destination, destination),
        travel_date=travel_date,
        alerts=[Alert(**alert) for alert in alerts],
    )


@pytest.fixture
def make_trip():
    return build_trip


@pytest.fixture
def make_store():
    return InMemoryAlertStore


@pytest.fixture
def fare_source():
    return FakeFareSource()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def make_notifier():
    return FakeNotifier


@pytest.fixture
def frozen_clock():
    return lambda: FROZEN_NOW


# PostgreSQL fixtures
@pytest.fixture
def pg_connection():
    """Provide a PostgreSQL connection for integration tests."""
    import psycopg
    from core.config import _reset_config, get_config

    _reset_config()
    config = get_config()
    conn_str = (
        f"host={config.database_host} port={config.database_port} "
        f"dbname={config.database_name} user={config.database_user} "
        f"password={config.database_password}"
    )

    try:
        conn = psycopg.connect(conn_str, connect_timeout=3)
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not available: {e}")
    yield conn

    # Rollback any uncommitted changes
    conn.rollback()
    conn.close()


@pytest.fixture
def pg_schema(pg_connection):
    """Create the FareWatch tables and empty them after the test."""
    from sqlalchemy import create_engine
    from sqlalchemy.engine import URL

    from core.config import get_config
    from core.db import Base

    config = get_config()
    engine = create_engine(
        URL.create(
            "postgresql+psycopg",
            username=config.database_user,
            password=config.database_password,
            host=config.database_host,
            port=config.database_port,
            database=config.database_name,
        )
    )
    Base.metadata.create_all(engine)
    yield pg_connection

    # Cleanup: delete every row created during the test
    pg_connection.rollback()
    with pg_connection.cursor() as cur:
        for table in reversed(Base.metadata.sorted_tables):
            cur.execute(f"DELETE FROM {table.name}")
    pg_connection.commit()
    engine.dispose()
