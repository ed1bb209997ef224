"""SQLAlchemy ORM models for trips, their alerts and fare history."""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Date, Float, ForeignKey, Index, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.db.schemas.base import Base


class Trip(Base):
    __tablename__ = "trips"

    trip_id: Mapped[str] = mapped_column(UUID, primary_key=True, server_default=text("gen_random_uuid()"))
    source_id: Mapped[str] = mapped_column(UUID, ForeignKey("cities.city_id"), nullable=False)
    destination_id: Mapped[str] = mapped_column(UUID, ForeignKey("cities.city_id"), nullable=False)
    travel_date = mapped_column(Date, nullable=False)

    alerts: Mapped[list["Alert"]] = relationship(back_populates="trip", cascade="all, delete-orphan")
    snapshots: Mapped[list["FareSnapshot"]] = relationship(back_populates="trip", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("source_id", "destination_id", "travel_date", name="uq_trips_route_date"),
        Index("idx_trips_travel_date", "travel_date"),
    )


class Alert(Base):
    __tablename__ = "alerts"

    alert_id: Mapped[str] = mapped_column(UUID, primary_key=True, server_default=text("gen_random_uuid()"))
    user_id: Mapped[str] = mapped_column(UUID, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    trip_id: Mapped[str] = mapped_column(UUID, ForeignKey("trips.trip_id", ondelete="CASCADE"), nullable=False)
    target_price: Mapped[float] = mapped_column(Float, nullable=False)
    notified: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    created_at = mapped_column(TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()"))

    trip: Mapped[Trip] = relationship(back_populates="alerts")

    __table_args__ = (
        CheckConstraint("target_price > 0", name="chk_alerts_target_price"),
        UniqueConstraint("user_id", "trip_id", name="uq_alerts_user_trip"),
        Index("idx_alerts_trip_pending", "trip_id", postgresql_where=text("NOT notified")),
    )


class FareSnapshot(Base):
    __tablename__ = "fare_snapshots"

    snapshot_id: Mapped[str] = mapped_column(UUID, primary_key=True, server_default=text("gen_random_uuid()"))
    trip_id: Mapped[str] = mapped_column(UUID, ForeignKey("trips.trip_id", ondelete="CASCADE"), nullable=False)
    fare: Mapped[float] = mapped_column(Float, nullable=False)
    created_at = mapped_column(TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()"))

    trip: Mapped[Trip] = relationship(back_populates="snapshots")

    __table_args__ = (Index("idx_fare_snapshots_trip_created", "trip_id", "created_at"),)
