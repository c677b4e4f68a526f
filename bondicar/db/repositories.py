"""Repository protocol interfaces for the document data store."""

from collections.abc import Sequence
from datetime import date
from typing import Protocol

from bondicar.models.booking import Booking, DriverOffer
from bondicar.models.common import BookingStatus, OfferStatus, TripKind, TripStatus
from bondicar.models.profile import Profile
from bondicar.models.trip import RecurringSeries, Trip


class DuplicateKeyError(Exception):
    """A write batch contains an ID that already exists (or repeats)."""


class TripRepository(Protocol):
    """Repository for trip and passenger request instances."""

    def add_many(self, trips: Sequence[Trip]) -> None:
        """Persist a batch of instances atomically.

        Either every instance is written or none is.

        Raises:
            DuplicateKeyError: If an ID repeats or already exists
        """
        ...

    def get(self, trip_id: str) -> Trip | None:
        """Get an instance by ID."""
        ...

    def list_trips(
        self,
        *,
        kind: TripKind | None = None,
        owner_id: str | None = None,
        recurrence_id: str | None = None,
    ) -> list[Trip]:
        """List instances matching every given field, ordered by departure date."""
        ...

    def update_status(self, trip_id: str, status: TripStatus) -> Trip | None:
        """Set an instance's status; None if it does not exist."""
        ...

    def adjust_seats(self, trip_id: str, delta: int) -> Trip | None:
        """Add ``delta`` to available seats.

        Returns None, leaving the record untouched, if the instance does not
        exist or the result would leave ``[0, seats_offered]``.
        """
        ...

    def delete(self, trip_id: str) -> bool:
        """Delete one instance; False if it did not exist."""
        ...

    def delete_series(self, recurrence_id: str) -> int:
        """Delete every instance sharing ``recurrence_id`` atomically.

        Returns:
            Number of instances deleted
        """
        ...


class BookingRepository(Protocol):
    """Repository for seat bookings."""

    def add(self, booking: Booking) -> None:
        """Persist a new booking."""
        ...

    def get(self, booking_id: str) -> Booking | None:
        """Get a booking by ID."""
        ...

    def list_bookings(
        self,
        *,
        passenger_id: str | None = None,
        trip_ids: Sequence[str] | None = None,
    ) -> list[Booking]:
        """List bookings, newest first."""
        ...

    def update_status(self, booking_id: str, status: BookingStatus) -> Booking | None:
        """Set a booking's status; None if it does not exist."""
        ...

    def delete_for_trips(self, trip_ids: Sequence[str]) -> int:
        """Delete every booking on the given instances."""
        ...


class OfferRepository(Protocol):
    """Repository for driver offers on passenger requests."""

    def add(self, offer: DriverOffer) -> None:
        """Persist a new offer."""
        ...

    def get(self, offer_id: str) -> DriverOffer | None:
        """Get an offer by ID."""
        ...

    def list_offers(
        self,
        *,
        request_ids: Sequence[str] | None = None,
        driver_id: str | None = None,
    ) -> list[DriverOffer]:
        """List offers, newest first."""
        ...

    def update_status(self, offer_id: str, status: OfferStatus) -> DriverOffer | None:
        """Set an offer's status; None if it does not exist."""
        ...


class SeriesRepository(Protocol):
    """Repository for recurring series definitions."""

    def add(self, series: RecurringSeries) -> None:
        """Persist a new series definition.

        Raises:
            DuplicateKeyError: If the recurrence_id already exists
        """
        ...

    def get(self, series_id: str) -> RecurringSeries | None:
        """Get a series by recurrence_id."""
        ...

    def list_series(
        self,
        *,
        owner_id: str | None = None,
        status: TripStatus | None = None,
    ) -> list[RecurringSeries]:
        """List series matching every given field, oldest first."""
        ...

    def mark_published(self, series_id: str, through: date) -> RecurringSeries | None:
        """Record the latest materialized date; None if the series does not exist."""
        ...

    def delete(self, series_id: str) -> bool:
        """Delete a series definition; False if it did not exist."""
        ...


class ProfileRepository(Protocol):
    """Repository for user profiles, keyed by user_id."""

    def get(self, user_id: str) -> Profile | None:
        """Get a user's profile."""
        ...

    def upsert(self, profile: Profile) -> Profile:
        """Create or replace a user's profile."""
        ...
