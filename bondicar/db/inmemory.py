"""In-memory implementations of repository interfaces."""

from collections.abc import Sequence
from datetime import date

from bondicar.db.repositories import DuplicateKeyError
from bondicar.models.booking import Booking, DriverOffer
from bondicar.models.common import BookingStatus, OfferStatus, TripKind, TripStatus
from bondicar.models.profile import Profile
from bondicar.models.trip import RecurringSeries, Trip


class InMemoryTripRepository:
    """In-memory implementation of TripRepository."""

    def __init__(self) -> None:
        self._trips: dict[str, Trip] = {}

    def add_many(self, trips: Sequence[Trip]) -> None:
        """Persist a batch of instances atomically."""
        # Validate the whole batch before touching the store
        seen: set[str] = set()
        for trip in trips:
            if trip.id in seen or trip.id in self._trips:
                raise DuplicateKeyError(f"Trip {trip.id} already exists")
            seen.add(trip.id)

        for trip in trips:
            self._trips[trip.id] = trip.model_copy(deep=True)

    def get(self, trip_id: str) -> Trip | None:
        """Get an instance by ID."""
        trip = self._trips.get(trip_id)
        return trip.model_copy(deep=True) if trip else None

    def list_trips(
        self,
        *,
        kind: TripKind | None = None,
        owner_id: str | None = None,
        recurrence_id: str | None = None,
    ) -> list[Trip]:
        """List instances matching every given field."""
        results = [
            trip.model_copy(deep=True)
            for trip in self._trips.values()
            if (kind is None or trip.kind == kind)
            and (owner_id is None or trip.owner_id == owner_id)
            and (recurrence_id is None or trip.recurrence_id == recurrence_id)
        ]
        results.sort(key=lambda trip: (trip.departure_date, trip.departure_time, trip.id))
        return results

    def update_status(self, trip_id: str, status: TripStatus) -> Trip | None:
        """Set an instance's status."""
        trip = self._trips.get(trip_id)
        if trip is None:
            return None
        self._trips[trip_id] = trip.model_copy(update={"status": status})
        return self.get(trip_id)

    def adjust_seats(self, trip_id: str, delta: int) -> Trip | None:
        """Add delta to available seats within [0, seats_offered]."""
        trip = self._trips.get(trip_id)
        if trip is None:
            return None

        seats = trip.available_seats + delta
        if seats < 0 or seats > trip.seats_offered:
            return None

        self._trips[trip_id] = trip.model_copy(update={"available_seats": seats})
        return self.get(trip_id)

    def delete(self, trip_id: str) -> bool:
        """Delete one instance."""
        return self._trips.pop(trip_id, None) is not None

    def delete_series(self, recurrence_id: str) -> int:
        """Delete every instance of a series."""
        doomed = [
            trip_id
            for trip_id, trip in self._trips.items()
            if trip.recurrence_id == recurrence_id
        ]
        for trip_id in doomed:
            del self._trips[trip_id]
        return len(doomed)


class InMemoryBookingRepository:
    """In-memory implementation of BookingRepository."""

    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}

    def add(self, booking: Booking) -> None:
        """Persist a new booking."""
        if booking.id in self._bookings:
            raise DuplicateKeyError(f"Booking {booking.id} already exists")
        self._bookings[booking.id] = booking.model_copy(deep=True)

    def get(self, booking_id: str) -> Booking | None:
        """Get a booking by ID."""
        booking = self._bookings.get(booking_id)
        return booking.model_copy(deep=True) if booking else None

    def list_bookings(
        self,
        *,
        passenger_id: str | None = None,
        trip_ids: Sequence[str] | None = None,
    ) -> list[Booking]:
        """List bookings, newest first."""
        wanted = set(trip_ids) if trip_ids is not None else None
        results = [
            booking.model_copy(deep=True)
            for booking in self._bookings.values()
            if (passenger_id is None or booking.passenger_id == passenger_id)
            and (wanted is None or booking.trip_id in wanted)
        ]
        results.sort(key=lambda booking: booking.created_at, reverse=True)
        return results

    def update_status(self, booking_id: str, status: BookingStatus) -> Booking | None:
        """Set a booking's status."""
        booking = self._bookings.get(booking_id)
        if booking is None:
            return None
        self._bookings[booking_id] = booking.model_copy(update={"status": status})
        return self.get(booking_id)

    def delete_for_trips(self, trip_ids: Sequence[str]) -> int:
        """Delete every booking on the given instances."""
        wanted = set(trip_ids)
        doomed = [
            booking_id
            for booking_id, booking in self._bookings.items()
            if booking.trip_id in wanted
        ]
        for booking_id in doomed:
            del self._bookings[booking_id]
        return len(doomed)


class InMemoryOfferRepository:
    """In-memory implementation of OfferRepository."""

    def __init__(self) -> None:
        self._offers: dict[str, DriverOffer] = {}

    def add(self, offer: DriverOffer) -> None:
        """Persist a new offer."""
        if offer.id in self._offers:
            raise DuplicateKeyError(f"Offer {offer.id} already exists")
        self._offers[offer.id] = offer.model_copy(deep=True)

    def get(self, offer_id: str) -> DriverOffer | None:
        """Get an offer by ID."""
        offer = self._offers.get(offer_id)
        return offer.model_copy(deep=True) if offer else None

    def list_offers(
        self,
        *,
        request_ids: Sequence[str] | None = None,
        driver_id: str | None = None,
    ) -> list[DriverOffer]:
        """List offers, newest first."""
        wanted = set(request_ids) if request_ids is not None else None
        results = [
            offer.model_copy(deep=True)
            for offer in self._offers.values()
            if (wanted is None or offer.request_id in wanted)
            and (driver_id is None or offer.driver_id == driver_id)
        ]
        results.sort(key=lambda offer: offer.created_at, reverse=True)
        return results

    def update_status(self, offer_id: str, status: OfferStatus) -> DriverOffer | None:
        """Set an offer's status."""
        offer = self._offers.get(offer_id)
        if offer is None:
            return None
        self._offers[offer_id] = offer.model_copy(update={"status": status})
        return self.get(offer_id)


class InMemorySeriesRepository:
    """In-memory implementation of SeriesRepository."""

    def __init__(self) -> None:
        self._series: dict[str, RecurringSeries] = {}

    def add(self, series: RecurringSeries) -> None:
        """Persist a new series definition."""
        if series.id in self._series:
            raise DuplicateKeyError(f"Series {series.id} already exists")
        self._series[series.id] = series.model_copy(deep=True)

    def get(self, series_id: str) -> RecurringSeries | None:
        """Get a series by recurrence_id."""
        series = self._series.get(series_id)
        return series.model_copy(deep=True) if series else None

    def list_series(
        self,
        *,
        owner_id: str | None = None,
        status: TripStatus | None = None,
    ) -> list[RecurringSeries]:
        """List series matching every given field, oldest first."""
        results = [
            series.model_copy(deep=True)
            for series in self._series.values()
            if (owner_id is None or series.owner_id == owner_id)
            and (status is None or series.status == status)
        ]
        results.sort(key=lambda series: (series.created_at, series.id))
        return results

    def mark_published(self, series_id: str, through: date) -> RecurringSeries | None:
        """Record the latest materialized date."""
        series = self._series.get(series_id)
        if series is None:
            return None
        self._series[series_id] = series.model_copy(update={"published_through": through})
        return self.get(series_id)

    def delete(self, series_id: str) -> bool:
        """Delete a series definition."""
        return self._series.pop(series_id, None) is not None


class InMemoryProfileRepository:
    """In-memory implementation of ProfileRepository."""

    def __init__(self) -> None:
        self._profiles: dict[str, Profile] = {}

    def get(self, user_id: str) -> Profile | None:
        """Get a user's profile."""
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    def upsert(self, profile: Profile) -> Profile:
        """Create or replace a user's profile."""
        self._profiles[profile.user_id] = profile.model_copy(deep=True)
        return profile
