"""SQL implementations of repository interfaces."""

from collections.abc import Sequence
from datetime import date

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session
from sqlalchemy.orm.exc import FlushError

from bondicar.db.models import BookingRow, OfferRow, ProfileRow, SeriesRow, TripRow
from bondicar.db.repositories import DuplicateKeyError
from bondicar.models.booking import Booking, DriverOffer
from bondicar.models.common import BookingStatus, ContactInfo, OfferStatus, TripKind, TripStatus
from bondicar.models.profile import Profile
from bondicar.models.trip import RecurrenceRule, RecurringSeries, Trip


def trip_to_row(trip: Trip) -> TripRow:
    """Flatten a Trip into its table row."""
    rule = trip.recurrence
    return TripRow(
        trip_id=trip.id,
        kind=trip.kind.value,
        owner_id=trip.owner_id,
        owner_name=trip.owner.name,
        owner_phone=trip.owner.phone,
        origin=trip.origin,
        destination=trip.destination,
        departure_date=trip.departure_date,
        departure_time=trip.departure_time,
        seats_offered=trip.seats_offered,
        available_seats=trip.available_seats,
        price=trip.price,
        max_price=trip.max_price,
        description=trip.description,
        car_model=trip.car_model,
        car_color=trip.car_color,
        status=trip.status.value,
        created_at=trip.created_at,
        recurrence_id=trip.recurrence_id,
        recurrence_weekdays=[day.value for day in rule.weekdays] if rule else None,
        recurrence_start_date=rule.start_date if rule else None,
        recurrence_end_date=rule.end_date if rule else None,
        publish_days_before=rule.publish_days_before if rule else None,
    )


def row_to_trip(row: TripRow) -> Trip:
    """Rebuild a Trip from its table row."""
    rule = None
    if row.recurrence_weekdays and row.recurrence_start_date is not None:
        rule = RecurrenceRule(
            weekdays=row.recurrence_weekdays,
            start_date=row.recurrence_start_date,
            end_date=row.recurrence_end_date,
            publish_days_before=row.publish_days_before or 0,
        )

    return Trip(
        id=row.trip_id,
        kind=TripKind(row.kind),
        owner_id=row.owner_id,
        owner=ContactInfo(name=row.owner_name, phone=row.owner_phone),
        origin=row.origin,
        destination=row.destination,
        departure_date=row.departure_date,
        departure_time=row.departure_time,
        seats_offered=row.seats_offered,
        available_seats=row.available_seats,
        price=row.price,
        max_price=row.max_price,
        description=row.description,
        car_model=row.car_model,
        car_color=row.car_color,
        status=TripStatus(row.status),
        created_at=row.created_at,
        recurrence_id=row.recurrence_id,
        recurrence=rule,
    )


def series_to_row(series: RecurringSeries) -> SeriesRow:
    """Flatten a RecurringSeries into its table row."""
    rule = series.recurrence
    return SeriesRow(
        series_id=series.id,
        kind=series.kind.value,
        owner_id=series.owner_id,
        owner_name=series.owner.name,
        owner_phone=series.owner.phone,
        origin=series.origin,
        destination=series.destination,
        departure_time=series.departure_time,
        seats_offered=series.seats_offered,
        price=series.price,
        max_price=series.max_price,
        description=series.description,
        car_model=series.car_model,
        car_color=series.car_color,
        weekdays=[day.value for day in rule.weekdays],
        start_date=rule.start_date,
        end_date=rule.end_date,
        publish_days_before=rule.publish_days_before,
        published_through=series.published_through,
        status=series.status.value,
        created_at=series.created_at,
    )


def row_to_series(row: SeriesRow) -> RecurringSeries:
    """Rebuild a RecurringSeries from its table row."""
    return RecurringSeries(
        id=row.series_id,
        kind=TripKind(row.kind),
        owner_id=row.owner_id,
        owner=ContactInfo(name=row.owner_name, phone=row.owner_phone),
        origin=row.origin,
        destination=row.destination,
        departure_time=row.departure_time,
        seats_offered=row.seats_offered,
        price=row.price,
        max_price=row.max_price,
        description=row.description,
        car_model=row.car_model,
        car_color=row.car_color,
        recurrence=RecurrenceRule(
            weekdays=row.weekdays,
            start_date=row.start_date,
            end_date=row.end_date,
            publish_days_before=row.publish_days_before,
        ),
        status=TripStatus(row.status),
        created_at=row.created_at,
        published_through=row.published_through,
    )


def row_to_booking(row: BookingRow) -> Booking:
    """Rebuild a Booking from its table row."""
    return Booking(
        id=row.booking_id,
        trip_id=row.trip_id,
        recurrence_id=row.recurrence_id,
        passenger_id=row.passenger_id,
        passenger=ContactInfo(name=row.passenger_name, phone=row.passenger_phone),
        seats=row.seats,
        status=BookingStatus(row.status),
        created_at=row.created_at,
    )


def row_to_offer(row: OfferRow) -> DriverOffer:
    """Rebuild a DriverOffer from its table row."""
    return DriverOffer(
        id=row.offer_id,
        request_id=row.request_id,
        driver_id=row.driver_id,
        driver=ContactInfo(name=row.driver_name, phone=row.driver_phone),
        price=row.price,
        available_seats=row.available_seats,
        car_model=row.car_model,
        car_color=row.car_color,
        description=row.description,
        origin=row.origin,
        destination=row.destination,
        status=OfferStatus(row.status),
        created_at=row.created_at,
    )


class SqlTripRepository:
    """SQL implementation of TripRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _query(self) -> Query:
        return self._session.query(TripRow)

    def add_many(self, trips: Sequence[Trip]) -> None:
        """Persist a batch of instances in one transaction."""
        ids = [trip.id for trip in trips]
        if len(set(ids)) != len(ids):
            raise DuplicateKeyError("Batch repeats a trip ID")

        self._session.add_all([trip_to_row(trip) for trip in trips])
        try:
            self._session.commit()
        except (IntegrityError, FlushError) as e:
            self._session.rollback()
            raise DuplicateKeyError("Batch contains an existing trip ID") from e

    def get(self, trip_id: str) -> Trip | None:
        """Get an instance by ID."""
        row = self._session.get(TripRow, trip_id, populate_existing=True)
        return row_to_trip(row) if row else None

    def list_trips(
        self,
        *,
        kind: TripKind | None = None,
        owner_id: str | None = None,
        recurrence_id: str | None = None,
    ) -> list[Trip]:
        """List instances matching every given field."""
        query = self._query()
        if kind is not None:
            query = query.filter(TripRow.kind == kind.value)
        if owner_id is not None:
            query = query.filter(TripRow.owner_id == owner_id)
        if recurrence_id is not None:
            query = query.filter(TripRow.recurrence_id == recurrence_id)

        rows = query.order_by(
            TripRow.departure_date, TripRow.departure_time, TripRow.trip_id
        ).all()
        return [row_to_trip(row) for row in rows]

    def update_status(self, trip_id: str, status: TripStatus) -> Trip | None:
        """Set an instance's status."""
        row = self._session.get(TripRow, trip_id, populate_existing=True)
        if row is None:
            return None

        row.status = status.value
        self._session.commit()
        return row_to_trip(row)

    def adjust_seats(self, trip_id: str, delta: int) -> Trip | None:
        """Add delta to available seats within [0, seats_offered], in one statement."""
        new_seats = TripRow.available_seats + delta
        result = self._session.execute(
            update(TripRow)
            .where(TripRow.trip_id == trip_id)
            .where(new_seats >= 0)
            .where(new_seats <= TripRow.seats_offered)
            .values(available_seats=new_seats)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            self._session.rollback()
            return None

        self._session.commit()
        return self.get(trip_id)

    def delete(self, trip_id: str) -> bool:
        """Delete one instance."""
        deleted = self._query().filter(TripRow.trip_id == trip_id).delete(
            synchronize_session="fetch"
        )
        self._session.commit()
        return deleted > 0

    def delete_series(self, recurrence_id: str) -> int:
        """Delete every instance of a series in one transaction."""
        try:
            deleted = self._query().filter(TripRow.recurrence_id == recurrence_id).delete(
                synchronize_session="fetch"
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return deleted


class SqlBookingRepository:
    """SQL implementation of BookingRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, booking: Booking) -> None:
        """Persist a new booking."""
        self._session.add(
            BookingRow(
                booking_id=booking.id,
                trip_id=booking.trip_id,
                recurrence_id=booking.recurrence_id,
                passenger_id=booking.passenger_id,
                passenger_name=booking.passenger.name,
                passenger_phone=booking.passenger.phone,
                seats=booking.seats,
                status=booking.status.value,
                created_at=booking.created_at,
            )
        )
        try:
            self._session.commit()
        except (IntegrityError, FlushError) as e:
            self._session.rollback()
            raise DuplicateKeyError(f"Booking {booking.id} already exists") from e

    def get(self, booking_id: str) -> Booking | None:
        """Get a booking by ID."""
        row = self._session.get(BookingRow, booking_id)
        return row_to_booking(row) if row else None

    def list_bookings(
        self,
        *,
        passenger_id: str | None = None,
        trip_ids: Sequence[str] | None = None,
    ) -> list[Booking]:
        """List bookings, newest first."""
        query = self._session.query(BookingRow)
        if passenger_id is not None:
            query = query.filter(BookingRow.passenger_id == passenger_id)
        if trip_ids is not None:
            if not trip_ids:
                return []
            query = query.filter(BookingRow.trip_id.in_(list(trip_ids)))

        rows = query.order_by(BookingRow.created_at.desc()).all()
        return [row_to_booking(row) for row in rows]

    def update_status(self, booking_id: str, status: BookingStatus) -> Booking | None:
        """Set a booking's status."""
        row = self._session.get(BookingRow, booking_id)
        if row is None:
            return None

        row.status = status.value
        self._session.commit()
        return row_to_booking(row)

    def delete_for_trips(self, trip_ids: Sequence[str]) -> int:
        """Delete every booking on the given instances."""
        if not trip_ids:
            return 0
        deleted = (
            self._session.query(BookingRow)
            .filter(BookingRow.trip_id.in_(list(trip_ids)))
            .delete(synchronize_session="fetch")
        )
        self._session.commit()
        return deleted


class SqlOfferRepository:
    """SQL implementation of OfferRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, offer: DriverOffer) -> None:
        """Persist a new offer."""
        self._session.add(
            OfferRow(
                offer_id=offer.id,
                request_id=offer.request_id,
                driver_id=offer.driver_id,
                driver_name=offer.driver.name,
                driver_phone=offer.driver.phone,
                price=offer.price,
                available_seats=offer.available_seats,
                car_model=offer.car_model,
                car_color=offer.car_color,
                description=offer.description,
                origin=offer.origin,
                destination=offer.destination,
                status=offer.status.value,
                created_at=offer.created_at,
            )
        )
        try:
            self._session.commit()
        except (IntegrityError, FlushError) as e:
            self._session.rollback()
            raise DuplicateKeyError(f"Offer {offer.id} already exists") from e

    def get(self, offer_id: str) -> DriverOffer | None:
        """Get an offer by ID."""
        row = self._session.get(OfferRow, offer_id)
        return row_to_offer(row) if row else None

    def list_offers(
        self,
        *,
        request_ids: Sequence[str] | None = None,
        driver_id: str | None = None,
    ) -> list[DriverOffer]:
        """List offers, newest first."""
        query = self._session.query(OfferRow)
        if request_ids is not None:
            if not request_ids:
                return []
            query = query.filter(OfferRow.request_id.in_(list(request_ids)))
        if driver_id is not None:
            query = query.filter(OfferRow.driver_id == driver_id)

        rows = query.order_by(OfferRow.created_at.desc()).all()
        return [row_to_offer(row) for row in rows]

    def update_status(self, offer_id: str, status: OfferStatus) -> DriverOffer | None:
        """Set an offer's status."""
        row = self._session.get(OfferRow, offer_id)
        if row is None:
            return None

        row.status = status.value
        self._session.commit()
        return row_to_offer(row)


class SqlSeriesRepository:
    """SQL implementation of SeriesRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, series: RecurringSeries) -> None:
        """Persist a new series definition."""
        self._session.add(series_to_row(series))
        try:
            self._session.commit()
        except (IntegrityError, FlushError) as e:
            self._session.rollback()
            raise DuplicateKeyError(f"Series {series.id} already exists") from e

    def get(self, series_id: str) -> RecurringSeries | None:
        """Get a series by recurrence_id."""
        row = self._session.get(SeriesRow, series_id)
        return row_to_series(row) if row else None

    def list_series(
        self,
        *,
        owner_id: str | None = None,
        status: TripStatus | None = None,
    ) -> list[RecurringSeries]:
        """List series matching every given field, oldest first."""
        query = self._session.query(SeriesRow)
        if owner_id is not None:
            query = query.filter(SeriesRow.owner_id == owner_id)
        if status is not None:
            query = query.filter(SeriesRow.status == status.value)

        rows = query.order_by(SeriesRow.created_at, SeriesRow.series_id).all()
        return [row_to_series(row) for row in rows]

    def mark_published(self, series_id: str, through: date) -> RecurringSeries | None:
        """Record the latest materialized date."""
        row = self._session.get(SeriesRow, series_id)
        if row is None:
            return None

        row.published_through = through
        self._session.commit()
        return row_to_series(row)

    def delete(self, series_id: str) -> bool:
        """Delete a series definition."""
        deleted = (
            self._session.query(SeriesRow)
            .filter(SeriesRow.series_id == series_id)
            .delete(synchronize_session="fetch")
        )
        self._session.commit()
        return deleted > 0


class SqlProfileRepository:
    """SQL implementation of ProfileRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> Profile | None:
        """Get a user's profile."""
        row = self._session.get(ProfileRow, user_id)
        if row is None:
            return None
        return Profile(
            user_id=row.user_id,
            name=row.name,
            phone=row.phone,
            picture_url=row.picture_url,
            updated_at=row.updated_at,
        )

    def upsert(self, profile: Profile) -> Profile:
        """Create or replace a user's profile."""
        row = self._session.get(ProfileRow, profile.user_id)
        if row is None:
            row = ProfileRow(user_id=profile.user_id)
            self._session.add(row)

        row.name = profile.name
        row.phone = profile.phone
        row.picture_url = profile.picture_url
        row.updated_at = profile.updated_at
        self._session.commit()
        return profile
