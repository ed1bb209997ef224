"""PostgreSQL alert store: pending-trip read model and fare-check write-back."""

import json
import logging
from datetime import date
from typing import Any

import psycopg
from pydantic import ValidationError

from core.clients import get_secrets_client
from core.config import Config
from core.errors import FareWatchError, StoreReadError, StoreWriteError
from core.models import Alert, FareSnapshot, Trip

from .interface import AlertStore

logger = logging.getLogger(__name__)

# Every alert of each candidate trip is returned, notified or not; callers filter.
_PENDING_TRIPS_SQL = """
    SELECT t.trip_id, src.code, src.name, dst.code, dst.name, t.travel_date,
           a.alert_id, a.user_id, a.target_price, a.notified, u.token
    FROM trips t
    JOIN cities src ON src.city_id = t.source_id
    JOIN cities dst ON dst.city_id = t.destination_id
    JOIN alerts a ON a.trip_id = t.trip_id
    JOIN users u ON u.user_id = a.user_id
    WHERE t.travel_date >= %s
      AND EXISTS (
          SELECT 1 FROM alerts pending
          WHERE pending.trip_id = t.trip_id AND NOT pending.notified
      )
    ORDER BY t.travel_date, t.trip_id, a.alert_id
"""

_INSERT_SNAPSHOT_SQL = """
    INSERT INTO fare_snapshots (trip_id, fare, created_at)
    VALUES (%s, %s, %s)
"""

_MARK_NOTIFIED_SQL = """
    UPDATE alerts SET notified = TRUE
    WHERE alert_id = ANY(%s::uuid[]) AND NOT notified
"""


class PostgresAlertStore(AlertStore):
    def __init__(self, config: Config) -> None:
        self._config = config
        self._conn: psycopg.Connection | None = None
        self._secret_cache: dict[str, str] | None = None

    def _get_credentials(self) -> dict[str, str]:
        if self._config.database_secret_arn:
            if self._secret_cache is None:
                secret = get_secrets_client().get_secret_value(SecretId=self._config.database_secret_arn)
                self._secret_cache = json.loads(secret["SecretString"])
            return self._secret_cache
        return {
            "host": self._config.database_host,
            "port": str(self._config.database_port),
            "dbname": self._config.database_name,
            "user": self._config.database_user,
            "password": self._config.database_password,
        }

    def connect(self) -> None:
        creds = self._get_credentials()
        # Autocommit: each snapshot insert and notified update commits on its own.
        self._conn = psycopg.connect(
            host=creds.get("host", self._config.database_host),
            port=int(creds.get("port", self._config.database_port)),
            dbname=creds.get("dbname", self._config.database_name),
            user=creds.get("username", creds.get("user", self._config.database_user)),
            password=creds.get("password", self._config.database_password),
            autocommit=True,
        )

    def disconnect(self) -> None:
        if self._conn and not self._conn.closed:
            self._conn.close()
        self._conn = None

    def _require_connection(self) -> psycopg.Connection:
        """Return the active connection or raise if not connected."""
        if self._conn is None or self._conn.closed:
            raise FareWatchError("PostgresAlertStore is not connected. Call connect() first.")
        return self._conn

    def fetch_pending_trips(self, today: date) -> list[Trip]:
        conn = self._require_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(_PENDING_TRIPS_SQL, (today,))
                rows = cur.fetchall()
        except psycopg.Error as e:
            raise StoreReadError(f"Pending trip query failed: {e}") from e

        return _group_trips(rows)

    def record_snapshot(self, snapshot: FareSnapshot) -> None:
        conn = self._require_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(_INSERT_SNAPSHOT_SQL, (snapshot.trip_id, snapshot.fare, snapshot.recorded_at))
        except psycopg.Error as e:
            raise StoreWriteError(f"Fare snapshot insert failed for trip {snapshot.trip_id}: {e}") from e

    def mark_notified(self, alert_ids: list[str]) -> int:
        if not alert_ids:
            return 0
        conn = self._require_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(_MARK_NOTIFIED_SQL, (list(alert_ids),))
                return cur.rowcount
        except psycopg.Error as e:
            raise StoreWriteError(f"Marking {len(alert_ids)} alerts notified failed: {e}") from e

    def __enter__(self) -> "PostgresAlertStore":
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.disconnect()


def _group_trips(rows: list[tuple[Any, ...]]) -> list[Trip]:
    grouped: dict[str, list[tuple[Any, ...]]] = {}
    for row in rows:
        grouped.setdefault(str(row[0]), []).append(row)

    trips: list[Trip] = []
    for trip_id, trip_rows in grouped.items():
        try:
            trips.append(_build_trip(trip_id, trip_rows))
        except ValidationError as e:
            logger.error("Skipping trip %s with invalid stored data: %s", trip_id, e)
    return trips


def _build_trip(trip_id: str, rows: list[tuple[Any, ...]]) -> Trip:
    first = rows[0]
    return Trip(
        trip_id=trip_id,
        origin_code=first[1],
        origin_name=first[2],
        destination_code=first[3],
        destination_name=first[4],
        travel_date=first[5],
        alerts=[
            Alert(
                alert_id=str(row[6]),
                user_id=str(row[7]),
                target_price=float(row[8]),
                notified=row[9],
                token=row[10],
            )
            for row in rows
        ],
    )
