"""Dashboard model - everything a signed-in user sees at a glance."""

from pydantic import BaseModel

from bondicar.models.booking import Booking, DriverOffer
from bondicar.models.trip import RecurringTripGroup, Trip


class Dashboard(BaseModel):
    """Per-user dashboard."""

    upcoming_trips: list[Trip]
    past_trips: list[Trip]
    active_series: list[RecurringTripGroup]
    inactive_series: list[RecurringTripGroup]
    my_bookings: list[Booking]
    incoming_bookings: list[Booking]
    offers_received: list[DriverOffer]
