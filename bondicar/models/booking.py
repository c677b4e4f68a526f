"""Booking and driver offer models."""

from datetime import datetime

from pydantic import BaseModel, Field, computed_field

from bondicar.models.common import BookingStatus, ContactInfo, OfferStatus
from bondicar.utils.contact import offer_message, whatsapp_link


class Booking(BaseModel):
    """Seats requested by a passenger on one trip instance."""

    id: str
    trip_id: str
    recurrence_id: str | None = None
    passenger_id: str
    passenger: ContactInfo
    seats: int = Field(..., ge=1)
    status: BookingStatus = BookingStatus.pending
    created_at: datetime = Field(default_factory=datetime.now)


class BookingDraft(BaseModel):
    """Request body for booking seats; ``passenger`` defaults to the caller's profile."""

    seats: int = Field(1, ge=1, le=8)
    passenger: ContactInfo | None = None


class BookingStatusUpdate(BaseModel):
    """Request body for accepting, rejecting or cancelling a booking."""

    status: BookingStatus


class DriverOffer(BaseModel):
    """A driver's answer to a passenger request."""

    id: str
    request_id: str
    driver_id: str
    driver: ContactInfo
    price: float = Field(..., ge=0)
    available_seats: int = Field(..., ge=1)
    car_model: str | None = None
    car_color: str | None = None
    description: str | None = None
    status: OfferStatus = OfferStatus.pending
    created_at: datetime = Field(default_factory=datetime.now)

    # Copied from the request for the contact message
    origin: str = ""
    destination: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def contact_url(self) -> str | None:
        """WhatsApp link to the driver, once the offer is accepted."""
        if self.status != OfferStatus.accepted:
            return None
        return whatsapp_link(
            self.driver.phone, offer_message(self.driver.name, self.origin, self.destination)
        )


class OfferDraft(BaseModel):
    """Request body for making an offer; ``driver`` defaults to the caller's profile."""

    driver: ContactInfo | None = None
    price: float = Field(..., ge=0)
    available_seats: int = Field(1, ge=1, le=8)
    car_model: str | None = None
    car_color: str | None = None
    description: str | None = None


class OfferStatusUpdate(BaseModel):
    """Request body for answering an offer."""

    status: OfferStatus
