"""Models package - re-exports for convenience."""

from bondicar.models.booking import (
    Booking,
    BookingDraft,
    BookingStatusUpdate,
    DriverOffer,
    OfferDraft,
    OfferStatusUpdate,
)
from bondicar.models.common import (
    BookingStatus,
    ContactInfo,
    OfferStatus,
    TripKind,
    TripStatus,
    Weekday,
)
from bondicar.models.dashboard import Dashboard
from bondicar.models.profile import Profile, ProfileUpdate
from bondicar.models.trip import (
    PublishResult,
    RecurrenceRule,
    RecurringSeries,
    RecurringTripGroup,
    SearchResults,
    Trip,
    TripDraft,
    TripFilters,
)

__all__ = [
    # Common
    "Weekday",
    "TripKind",
    "TripStatus",
    "BookingStatus",
    "OfferStatus",
    "ContactInfo",
    # Trips
    "RecurrenceRule",
    "Trip",
    "RecurringTripGroup",
    "RecurringSeries",
    "TripDraft",
    "TripFilters",
    "PublishResult",
    "SearchResults",
    # Bookings and offers
    "Booking",
    "BookingDraft",
    "BookingStatusUpdate",
    "DriverOffer",
    "OfferDraft",
    "OfferStatusUpdate",
    # Dashboard and profiles
    "Dashboard",
    "Profile",
    "ProfileUpdate",
]
