"""
Alert store interface, PostgreSQL client and ORM models for FareWatch.

Importing this package registers all models on Base.metadata, which the
local table bootstrap script and integration tests use to create tables.
"""

from core.db.interface import AlertStore
from core.db.postgres import PostgresAlertStore
from core.db.schemas.base import Base
from core.db.schemas.city import City
from core.db.schemas.trip import Alert, FareSnapshot, Trip
from core.db.schemas.user import User

__all__ = ["Alert", "AlertStore", "Base", "City", "FareSnapshot", "PostgresAlertStore", "Trip", "User"]
