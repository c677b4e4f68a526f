"""SQLAlchemy ORM models for trips, series, bookings, offers and profiles.

Column types are kept portable (no dialect-specific JSONB/UUID) so the same
tables run on PostgreSQL and on SQLite for tests.
"""

from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TripRow(Base):
    """Trip instance table - driver offers and passenger requests."""

    __tablename__ = "trip"
    __table_args__ = (
        Index("idx_trip_owner", "owner_id"),
        Index("idx_trip_recurrence", "recurrence_id"),
        Index("idx_trip_departure", "kind", "departure_date"),
    )

    trip_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    owner_name: Mapped[str] = mapped_column(Text, nullable=False)
    owner_phone: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    origin: Mapped[str] = mapped_column(Text, nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    departure_date: Mapped[date] = mapped_column(Date, nullable=False)
    departure_time: Mapped[str] = mapped_column(String(5), nullable=False)
    seats_offered: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    car_model: Mapped[str | None] = mapped_column(Text, nullable=True)
    car_color: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Recurrence definition, duplicated on every instance of a series
    recurrence_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    recurrence_weekdays: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    recurrence_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    recurrence_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    publish_days_before: Mapped[int | None] = mapped_column(Integer, nullable=True)


class BookingRow(Base):
    """Booking table - seats requested on a trip instance."""

    __tablename__ = "booking"
    __table_args__ = (
        Index("idx_booking_trip", "trip_id"),
        Index("idx_booking_passenger", "passenger_id"),
    )

    booking_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    trip_id: Mapped[str] = mapped_column(String(64), nullable=False)
    recurrence_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    passenger_id: Mapped[str] = mapped_column(String(128), nullable=False)
    passenger_name: Mapped[str] = mapped_column(Text, nullable=False)
    passenger_phone: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    seats: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class OfferRow(Base):
    """Driver offer table - answers to passenger requests."""

    __tablename__ = "driver_offer"
    __table_args__ = (
        Index("idx_offer_request", "request_id"),
        Index("idx_offer_driver", "driver_id"),
    )

    offer_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    request_id: Mapped[str] = mapped_column(String(64), nullable=False)
    driver_id: Mapped[str] = mapped_column(String(128), nullable=False)
    driver_name: Mapped[str] = mapped_column(Text, nullable=False)
    driver_phone: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    price: Mapped[float] = mapped_column(Float, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    car_model: Mapped[str | None] = mapped_column(Text, nullable=True)
    car_color: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    origin: Mapped[str] = mapped_column(Text, nullable=False, default="")
    destination: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class SeriesRow(Base):
    """Recurring series definition table."""

    __tablename__ = "trip_series"
    __table_args__ = (
        Index("idx_series_owner", "owner_id"),
        Index("idx_series_status", "status"),
    )

    series_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    owner_name: Mapped[str] = mapped_column(Text, nullable=False)
    owner_phone: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    origin: Mapped[str] = mapped_column(Text, nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    departure_time: Mapped[str] = mapped_column(String(5), nullable=False)
    seats_offered: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    car_model: Mapped[str | None] = mapped_column(Text, nullable=True)
    car_color: Mapped[str | None] = mapped_column(Text, nullable=True)
    weekdays: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    publish_days_before: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published_through: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ProfileRow(Base):
    """User profile table."""

    __tablename__ = "profile"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    picture_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
