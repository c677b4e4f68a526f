"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from bondicar.recurrence.weekdays import Weekday
from bondicar.utils.contact import digits_only

__all__ = [
    "Weekday",
    "TripKind",
    "TripStatus",
    "BookingStatus",
    "OfferStatus",
    "ContactInfo",
]


class TripKind(str, Enum):
    """Type of publication."""

    driver_offer = "driver_offer"
    passenger_request = "passenger_request"


class TripStatus(str, Enum):
    """Trip instance status."""

    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class BookingStatus(str, Enum):
    """Seat booking status."""

    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    cancelled = "cancelled"


class OfferStatus(str, Enum):
    """Driver offer status."""

    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    cancelled = "cancelled"


class ContactInfo(BaseModel):
    """Public contact details copied onto trips, bookings and offers."""

    name: str = Field(..., min_length=1)
    phone: str = ""

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: str) -> str:
        return digits_only(value)
