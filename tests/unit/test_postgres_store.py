"""Unit tests for PostgresAlertStore with a mocked psycopg connection."""

import json
from datetime import date, datetime, timezone
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from core.config import Config
from core.db import PostgresAlertStore
from core.errors import FareWatchError, StoreReadError, StoreWriteError
from core.models import FareSnapshot

CONFIG = Config(
    aws_region="ap-south-1",
    database_host="localhost",
    database_port=5432,
    database_name="farewatch",
    database_user="farewatch",
    database_password="localdev",
    environment="test",
)


@pytest.fixture
def mock_conn():
    conn = MagicMock()
    conn.closed = False
    cursor = conn.cursor.return_value.__enter__.return_value
    return conn, cursor


@pytest.fixture
def store(mock_conn):
    conn, _ = mock_conn
    with patch("core.db.postgres.psycopg.connect", return_value=conn) as mock_connect:
        store = PostgresAlertStore(CONFIG)
        store.connect()
    store.mock_connect = mock_connect
    return store


def test_connect_uses_config_credentials_in_autocommit(store):
    kwargs = store.mock_connect.call_args.kwargs
    assert kwargs["host"] == "localhost"
    assert kwargs["port"] == 5432
    assert kwargs["dbname"] == "farewatch"
    assert kwargs["user"] == "farewatch"
    assert kwargs["autocommit"] is True


def test_connect_reads_secret_when_arn_configured():
    config = CONFIG.model_copy(update={"database_secret_arn": "arn:aws:secretsmanager:db"})
    secret = {"host": "db.internal", "port": 6543, "dbname": "prod", "username": "svc", "password": "pw"}
    secrets = MagicMock()
    secrets.get_secret_value.return_value = {"SecretString": json.dumps(secret)}

    with (
        patch("core.db.postgres.get_secrets_client", return_value=secrets),
        patch("core.db.postgres.psycopg.connect") as mock_connect,
    ):
        PostgresAlertStore(config).connect()

    kwargs = mock_connect.call_args.kwargs
    assert kwargs["host"] == "db.internal"
    assert kwargs["port"] == 6543
    assert kwargs["user"] == "svc"
    secrets.get_secret_value.assert_called_once_with(SecretId="arn:aws:secretsmanager:db")


def test_operations_require_connection():
    with pytest.raises(FareWatchError, match="not connected"):
        PostgresAlertStore(CONFIG).fetch_pending_trips(date(2025, 12, 20))


def test_fetch_pending_trips_groups_alerts_by_trip(store, mock_conn):
    _, cursor = mock_conn
    cursor.fetchall.return_value = [
        ("t1", "HYD", "Hyderabad", "BLR", "Bangalore", date(2025, 12, 25), "a1", "u1", 500.0, False, "abc"),
        ("t1", "HYD", "Hyderabad", "BLR", "Bangalore", date(2025, 12, 25), "a2", "u2", 650.0, True, None),
        ("t2", "BLR", "Bangalore", "HYD", "Hyderabad", date(2025, 12, 28), "a3", "u1", 700.0, False, "abc"),
    ]

    trips = store.fetch_pending_trips(date(2025, 12, 20))

    assert cursor.execute.call_args.args[1] == (date(2025, 12, 20),)
    assert [t.trip_id for t in trips] == ["t1", "t2"]
    assert trips[0].origin_name == "Hyderabad"
    assert [a.alert_id for a in trips[0].alerts] == ["a1", "a2"]
    assert trips[0].alerts[1].notified is True
    assert trips[0].alerts[1].token is None
    assert [a.alert_id for a in trips[0].pending_alerts()] == ["a1"]
    assert trips[1].alerts[0].target_price == 700.0


def test_fetch_pending_trips_drops_only_invalid_trips(store, mock_conn, caplog):
    _, cursor = mock_conn
    cursor.fetchall.return_value = [
        ("t1", "HYD", "Hyderabad", "BLR", "Bangalore", date(2025, 12, 25), "a1", "u1", 500.0, False, "abc"),
        ("t2", "7", "Nowhere", "HYD", "Hyderabad", date(2025, 12, 28), "a2", "u1", 700.0, False, "abc"),
        ("t3", "BLR", "Bangalore", "HYD", "Hyderabad", date(2025, 12, 29), "a3", "u2", -5.0, False, "def"),
    ]

    with caplog.at_level("ERROR", logger="core.db.postgres"):
        trips = store.fetch_pending_trips(date(2025, 12, 20))

    assert [t.trip_id for t in trips] == ["t1"]
    assert "t2" in caplog.text
    assert "t3" in caplog.text


def test_fetch_pending_trips_wraps_database_errors(store, mock_conn):
    _, cursor = mock_conn
    cursor.execute.side_effect = psycopg.OperationalError("server closed the connection")

    with pytest.raises(StoreReadError, match="server closed"):
        store.fetch_pending_trips(date(2025, 12, 20))


def test_record_snapshot_inserts_row(store, mock_conn):
    _, cursor = mock_conn
    recorded_at = datetime(2025, 12, 20, 6, 30, tzinfo=timezone.utc)

    store.record_snapshot(FareSnapshot(trip_id="t1", fare=480, recorded_at=recorded_at))

    sql, params = cursor.execute.call_args.args
    assert "INSERT INTO fare_snapshots" in sql
    assert params == ("t1", 480.0, recorded_at)


def test_record_snapshot_failure_raises_store_write_error(store, mock_conn):
    _, cursor = mock_conn
    cursor.execute.side_effect = psycopg.errors.ForeignKeyViolation("trip missing")

    with pytest.raises(StoreWriteError, match="t1"):
        store.record_snapshot(FareSnapshot(trip_id="t1", fare=480, recorded_at=datetime.now(timezone.utc)))


def test_mark_notified_is_one_update(store, mock_conn):
    _, cursor = mock_conn
    cursor.rowcount = 2

    changed = store.mark_notified(["a1", "a2"])

    assert changed == 2
    assert cursor.execute.call_count == 1
    sql, params = cursor.execute.call_args.args
    assert "UPDATE alerts SET notified = TRUE" in sql
    assert params == (["a1", "a2"],)


def test_mark_notified_with_no_ids_skips_query(store, mock_conn):
    _, cursor = mock_conn
    assert store.mark_notified([]) == 0
    cursor.execute.assert_not_called()


def test_mark_notified_failure_raises_store_write_error(store, mock_conn):
    _, cursor = mock_conn
    cursor.execute.side_effect = psycopg.OperationalError("deadlock detected")

    with pytest.raises(StoreWriteError, match="deadlock"):
        store.mark_notified(["a1"])


def test_context_manager_closes_connection(mock_conn):
    conn, _ = mock_conn
    with patch("core.db.postgres.psycopg.connect", return_value=conn):
        with PostgresAlertStore(CONFIG) as store:
            assert store._require_connection() is conn
    conn.close.assert_called_once()
