"""Trip management service.

Owns every read and write the marketplace performs against the data store:
publishing one-off trips and recurring series, listing and searching,
the owner's dashboard, bookings, driver offers and user profiles. State lives
only in the repositories; the recurrence engine functions it calls are pure.
"""

import logging
import re
import uuid
from collections.abc import Callable
from datetime import date, datetime

from bondicar.config import Settings, get_settings
from bondicar.db.context import RequestContext
from bondicar.db.repositories import (
    BookingRepository,
    DuplicateKeyError,
    OfferRepository,
    ProfileRepository,
    SeriesRepository,
    TripRepository,
)
from bondicar.models.booking import Booking, BookingDraft, DriverOffer, OfferDraft
from bondicar.models.common import BookingStatus, ContactInfo, OfferStatus, TripKind, TripStatus
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
from bondicar.recurrence.collapser import (
    collapse,
    scheduled_group,
    select_next_instance,
    split_entries,
)
from bondicar.recurrence.dates import current_date
from bondicar.recurrence.expander import expand
from bondicar.recurrence.ids import new_recurrence_id, new_trip_id
from bondicar.utils.metrics import metrics

logger = logging.getLogger(__name__)


class TripServiceError(Exception):
    """Base class for marketplace errors surfaced to API callers."""


class TripNotFoundError(TripServiceError):
    """Trip, series, booking, offer or profile does not exist."""


class PermissionDeniedError(TripServiceError):
    """Caller does not own the resource it is trying to change."""


class TripValidationError(TripServiceError):
    """Request is well-formed but breaks a marketplace rule."""


class BookingConflictError(TripServiceError):
    """Booking or offer cannot move to the requested state."""


def _entry_sort_key(entry: Trip | RecurringTripGroup) -> tuple[date, str]:
    if isinstance(entry, RecurringTripGroup):
        return (entry.next_trip_date, entry.departure_time)
    return (entry.departure_date, entry.departure_time)


class TripService:
    """Trip store: engine calls plus data-store reads and writes."""

    def __init__(
        self,
        trips: TripRepository,
        bookings: BookingRepository,
        offers: OfferRepository,
        series: SeriesRepository,
        profiles: ProfileRepository,
        *,
        settings: Settings | None = None,
        today_provider: Callable[[], date] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            trips: Trip instance repository
            bookings: Booking repository
            offers: Driver offer repository
            series: Recurring series definition repository
            profiles: User profile repository
            settings: Settings (defaults to the cached application settings)
            today_provider: Clock returning the marketplace's current date
        """
        self._trips = trips
        self._bookings = bookings
        self._offers = offers
        self._series = series
        self._profiles = profiles
        self._settings = settings or get_settings()
        self._today_provider = today_provider or (
            lambda: current_date(self._settings.marketplace_timezone)
        )

    def today(self) -> date:
        """Current marketplace date."""
        return self._today_provider()

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def create(self, ctx: RequestContext, draft: TripDraft) -> PublishResult:
        """Publish a one-off trip/request or a recurring series.

        A recurring draft stores the series definition, then writes every date
        publishable today as one atomic batch. An empty batch is a valid
        outcome: none of the series' dates has reached its publish lead time
        yet, and the publish sweep will materialize them later.

        Raises:
            TripValidationError: If dates lie in the past or the contact is missing or invalid
        """
        contact = self._resolve_contact(ctx, draft.contact)
        self._check_phone(contact, required=True)
        today = self.today()

        if draft.recurrence is None:
            departure = draft.departure_date
            if departure is None or departure < today:
                raise TripValidationError("departure_date cannot be before today")

            trip = self._instance(ctx, draft, contact, departure)
            self._trips.add_many([trip])
            metrics.inc_published(draft.kind.value)
            logger.info(f"[create] user_id={ctx.user_id} trip_id={trip.id} date={departure}")
            return PublishResult(recurrence_id=None, published=1, trips=[trip])

        rule = draft.recurrence
        if rule.start_date < today:
            raise TripValidationError("recurrence start_date cannot be before today")

        dates = self._expand(rule, today)
        series = RecurringSeries(
            id=new_recurrence_id(
                draft.origin, draft.destination, draft.departure_time, rule.start_date
            ),
            kind=draft.kind,
            owner_id=ctx.user_id,
            owner=contact,
            origin=draft.origin.strip(),
            destination=draft.destination.strip(),
            departure_time=draft.departure_time,
            seats_offered=draft.seats_offered,
            price=draft.price,
            max_price=draft.max_price,
            description=draft.description,
            car_model=draft.car_model,
            car_color=draft.car_color,
            recurrence=rule,
            published_through=dates[-1] if dates else None,
        )
        trips = [self._from_series(series, day) for day in dates]

        self._series.add(series)
        if trips:
            try:
                self._trips.add_many(trips)
            except DuplicateKeyError:
                self._series.delete(series.id)
                raise
            metrics.inc_published(draft.kind.value, len(trips))

        logger.info(
            f"[create] user_id={ctx.user_id} recurrence_id={series.id} "
            f"published={len(trips)}"
        )
        return PublishResult(recurrence_id=series.id, published=len(trips), trips=trips)

    def publish_due_instances(self, today: date | None = None) -> int:
        """Re-run expansion for every active series and write newly due dates.

        Only dates after a series' ``published_through`` are added, so
        instances deleted individually are not resurrected. Each series is
        written as its own batch.

        Returns:
            Number of instances published
        """
        if today is None:
            today = self.today()

        published = 0
        for series in self._series.list_series(status=TripStatus.active):
            through = series.published_through
            due = [
                day
                for day in self._expand(series.recurrence, today)
                if through is None or day > through
            ]
            if not due:
                continue

            batch = [self._from_series(series, day) for day in due]
            self._trips.add_many(batch)
            self._series.mark_published(series.id, due[-1])
            metrics.inc_published(series.kind.value, len(batch))
            published += len(batch)
            logger.info(f"[publish_due] recurrence_id={series.id} published={len(batch)}")

        return published

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, trip_id: str) -> Trip:
        """Get one instance.

        Raises:
            TripNotFoundError: If it does not exist
        """
        trip = self._trips.get(trip_id)
        if trip is None:
            raise TripNotFoundError(f"Trip {trip_id} not found")
        return trip

    def search(self, filters: TripFilters) -> list[Trip | RecurringTripGroup]:
        """Filtered listing with one card per series, ordered by date.

        Instances are pre-filtered to listed ones (active, today or later,
        seats left on driver offers) before collapsing.
        """
        today = self.today()
        visible = [
            trip
            for trip in self._trips.list_trips(kind=filters.kind)
            if self._is_listed(trip, today) and self._matches(trip, filters)
        ]
        entries = collapse(
            visible,
            today=today,
            window_days=self._settings.next_occurrence_window_days,
            horizon_years=self._settings.open_ended_horizon_years,
        )
        return sorted(entries, key=_entry_sort_key)

    def featured(self, limit: int | None = None) -> SearchResults:
        """Home page picks: the next few one-off trips and series."""
        if limit is None:
            limit = self._settings.featured_limit

        trips, groups = split_entries(self.search(TripFilters(kind=TripKind.driver_offer)))
        return SearchResults(trips=trips[:limit], series=groups[:limit])

    def dashboard(self, ctx: RequestContext) -> Dashboard:
        """Everything the caller owns or booked.

        The owner's instances are collapsed unfiltered, so series whose
        instances are all in the past still show up. Stored series with no
        instance yet appear as scheduled cards. A series card is active while
        it has an upcoming instance or a date still to publish.
        """
        today = self.today()
        mine = self._trips.list_trips(owner_id=ctx.user_id)

        trips, groups = split_entries(
            collapse(
                mine,
                today=today,
                window_days=self._settings.next_occurrence_window_days,
                horizon_years=self._settings.open_ended_horizon_years,
            )
        )
        grouped = {group.id for group in groups}
        for series in self._series.list_series(owner_id=ctx.user_id):
            if series.id not in grouped:
                groups.append(
                    scheduled_group(
                        series,
                        today=today,
                        window_days=self._settings.next_occurrence_window_days,
                        horizon_years=self._settings.open_ended_horizon_years,
                    )
                )
        groups.sort(key=_entry_sort_key)

        offer_ids = [trip.id for trip in mine if trip.kind == TripKind.driver_offer]
        request_ids = [trip.id for trip in mine if trip.kind == TripKind.passenger_request]
        active = [group for group in groups if self._is_running(group, today)]
        inactive = [group for group in groups if not self._is_running(group, today)]

        return Dashboard(
            upcoming_trips=[trip for trip in trips if trip.departure_date >= today],
            past_trips=[trip for trip in trips if trip.departure_date < today],
            active_series=active,
            inactive_series=inactive,
            my_bookings=self._bookings.list_bookings(passenger_id=ctx.user_id),
            incoming_bookings=self._bookings.list_bookings(trip_ids=offer_ids),
            offers_received=self._offers.list_offers(request_ids=request_ids),
        )

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def get_profile(self, ctx: RequestContext) -> Profile:
        """The caller's profile.

        Raises:
            TripNotFoundError: If the caller has not saved one yet
        """
        profile = self._profiles.get(ctx.user_id)
        if profile is None:
            raise TripNotFoundError(f"Profile for {ctx.user_id} not found")
        return profile

    def update_profile(self, ctx: RequestContext, update: ProfileUpdate) -> Profile:
        """Create or replace the caller's profile."""
        name = update.name.strip()
        if not name:
            raise TripValidationError("Profile name cannot be blank")

        profile = Profile(
            user_id=ctx.user_id,
            name=name,
            phone=update.phone,
            picture_url=update.picture_url,
            updated_at=datetime.now(),
        )
        self._check_phone(profile.contact(), required=False)
        saved = self._profiles.upsert(profile)
        logger.info(f"[profile] user_id={ctx.user_id}")
        return saved

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_trip(self, ctx: RequestContext, trip_id: str) -> None:
        """Delete one owned instance and its bookings."""
        trip = self.get(trip_id)
        self._require_owner(ctx, trip.owner_id)

        self._bookings.delete_for_trips([trip.id])
        self._trips.delete(trip.id)
        logger.info(f"[delete_trip] user_id={ctx.user_id} trip_id={trip_id}")

    def delete_series(self, ctx: RequestContext, recurrence_id: str) -> int:
        """Delete an owned series: its instances, their bookings and its definition.

        Returns:
            Number of instances deleted
        """
        series = self._series.get(recurrence_id)
        members = self._trips.list_trips(recurrence_id=recurrence_id)
        if series is None and not members:
            raise TripNotFoundError(f"Series {recurrence_id} not found")
        if series is not None:
            self._require_owner(ctx, series.owner_id)
        for member in members:
            self._require_owner(ctx, member.owner_id)

        self._bookings.delete_for_trips([member.id for member in members])
        deleted = self._trips.delete_series(recurrence_id)
        self._series.delete(recurrence_id)
        metrics.inc_series_deleted()
        logger.info(
            f"[delete_series] user_id={ctx.user_id} recurrence_id={recurrence_id} "
            f"deleted={deleted}"
        )
        return deleted

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    def book_trip(self, ctx: RequestContext, trip_id: str, draft: BookingDraft) -> Booking:
        """Request seats on one instance; the owner accepts or rejects later."""
        passenger = self._resolve_contact(ctx, draft.passenger)
        self._check_phone(passenger, required=False)
        trip = self.get(trip_id)
        self._check_bookable(ctx, trip, draft.seats)

        booking = Booking(
            id=str(uuid.uuid4()),
            trip_id=trip.id,
            recurrence_id=trip.recurrence_id,
            passenger_id=ctx.user_id,
            passenger=passenger,
            seats=draft.seats,
        )
        self._bookings.add(booking)
        metrics.inc_booking(booking.status.value)
        logger.info(f"[book] user_id={ctx.user_id} trip_id={trip.id} seats={draft.seats}")
        return booking

    def book_series(
        self, ctx: RequestContext, recurrence_id: str, draft: BookingDraft
    ) -> Booking:
        """Book the series instance a collapsed card points at."""
        members = self._trips.list_trips(recurrence_id=recurrence_id)
        if not members:
            if self._series.get(recurrence_id) is not None:
                raise BookingConflictError("No instance of this series is published yet")
            raise TripNotFoundError(f"Series {recurrence_id} not found")

        today = self.today()
        candidates = [
            member
            for member in members
            if self._is_listed(member, today) and member.available_seats >= draft.seats
        ]
        if not candidates:
            raise BookingConflictError(
                "No upcoming instance of this series has enough seats available"
            )

        _, chosen = select_next_instance(
            candidates,
            today=today,
            window_days=self._settings.next_occurrence_window_days,
            horizon_years=self._settings.open_ended_horizon_years,
        )
        if chosen is None:
            chosen = min(candidates, key=lambda member: member.departure_date)

        return self.book_trip(ctx, chosen.id, draft)

    def update_booking_status(
        self, ctx: RequestContext, booking_id: str, status: BookingStatus
    ) -> Booking:
        """Move a booking through pending -> accepted/rejected -> cancelled.

        The trip owner accepts or rejects pending bookings; accepting takes the
        seats. The passenger cancels; cancelling an accepted booking returns them.
        """
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise TripNotFoundError(f"Booking {booking_id} not found")
        trip = self.get(booking.trip_id)

        if status in (BookingStatus.accepted, BookingStatus.rejected):
            self._require_owner(ctx, trip.owner_id)
            if booking.status != BookingStatus.pending:
                raise BookingConflictError(f"Booking is already {booking.status.value}")
            if status == BookingStatus.accepted:
                if self._trips.adjust_seats(trip.id, -booking.seats) is None:
                    raise BookingConflictError("Not enough seats available")

        elif status == BookingStatus.cancelled:
            self._require_owner(ctx, booking.passenger_id)
            if booking.status in (BookingStatus.rejected, BookingStatus.cancelled):
                raise BookingConflictError(f"Booking is already {booking.status.value}")
            if booking.status == BookingStatus.accepted:
                self._trips.adjust_seats(trip.id, booking.seats)

        else:
            raise TripValidationError("A booking cannot be moved back to pending")

        updated = self._bookings.update_status(booking_id, status)
        if updated is None:
            raise TripNotFoundError(f"Booking {booking_id} not found")

        metrics.inc_booking(status.value)
        logger.info(f"[booking] user_id={ctx.user_id} booking_id={booking_id} status={status.value}")
        return updated

    # ------------------------------------------------------------------
    # Driver offers
    # ------------------------------------------------------------------

    def make_offer(self, ctx: RequestContext, request_id: str, draft: OfferDraft) -> DriverOffer:
        """Offer a ride to a passenger request."""
        driver = self._resolve_contact(ctx, draft.driver)
        self._check_phone(driver, required=True)
        request = self.get(request_id)

        if request.kind != TripKind.passenger_request:
            raise TripValidationError("Offers can only be made on passenger requests")
        if request.status != TripStatus.active:
            raise TripValidationError("This request is no longer active")
        if request.owner_id == ctx.user_id:
            raise TripValidationError("You cannot make an offer on your own request")

        offer = DriverOffer(
            id=str(uuid.uuid4()),
            request_id=request.id,
            driver_id=ctx.user_id,
            driver=driver,
            price=draft.price,
            available_seats=draft.available_seats,
            car_model=draft.car_model,
            car_color=draft.car_color,
            description=draft.description,
            origin=request.origin,
            destination=request.destination,
        )
        self._offers.add(offer)
        logger.info(f"[offer] driver_id={ctx.user_id} request_id={request.id}")
        return offer

    def list_offers(self, ctx: RequestContext, request_id: str) -> list[DriverOffer]:
        """Offers on a request: all of them for its owner, a driver's own otherwise."""
        request = self.get(request_id)
        if request.owner_id == ctx.user_id:
            return self._offers.list_offers(request_ids=[request.id])
        return self._offers.list_offers(request_ids=[request.id], driver_id=ctx.user_id)

    def respond_to_offer(
        self, ctx: RequestContext, offer_id: str, status: OfferStatus
    ) -> DriverOffer:
        """Request owner accepts/rejects a pending offer; the driver may cancel it."""
        offer = self._offers.get(offer_id)
        if offer is None:
            raise TripNotFoundError(f"Offer {offer_id} not found")
        request = self.get(offer.request_id)

        if status in (OfferStatus.accepted, OfferStatus.rejected):
            self._require_owner(ctx, request.owner_id)
            if offer.status != OfferStatus.pending:
                raise BookingConflictError(f"Offer is already {offer.status.value}")
        elif status == OfferStatus.cancelled:
            self._require_owner(ctx, offer.driver_id)
            if offer.status not in (OfferStatus.pending, OfferStatus.accepted):
                raise BookingConflictError(f"Offer is already {offer.status.value}")
        else:
            raise TripValidationError("An offer cannot be moved back to pending")

        updated = self._offers.update_status(offer_id, status)
        if updated is None:
            raise TripNotFoundError(f"Offer {offer_id} not found")

        logger.info(f"[offer] user_id={ctx.user_id} offer_id={offer_id} status={status.value}")
        return updated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _expand(self, rule: RecurrenceRule, today: date) -> list[date]:
        return expand(
            rule.weekdays,
            rule.start_date,
            rule.end_date,
            rule.publish_days_before,
            today=today,
            max_steps=self._settings.max_expansion_steps,
            horizon_years=self._settings.open_ended_horizon_years,
        )

    def _instance(
        self, ctx: RequestContext, draft: TripDraft, contact: ContactInfo, departure: date
    ) -> Trip:
        return Trip(
            id=new_trip_id(),
            kind=draft.kind,
            owner_id=ctx.user_id,
            owner=contact,
            origin=draft.origin.strip(),
            destination=draft.destination.strip(),
            departure_date=departure,
            departure_time=draft.departure_time,
            seats_offered=draft.seats_offered,
            available_seats=draft.seats_offered,
            price=draft.price,
            max_price=draft.max_price,
            description=draft.description,
            car_model=draft.car_model,
            car_color=draft.car_color,
        )

    @staticmethod
    def _from_series(series: RecurringSeries, departure: date) -> Trip:
        return Trip(
            id=new_trip_id(),
            kind=series.kind,
            owner_id=series.owner_id,
            owner=series.owner,
            origin=series.origin,
            destination=series.destination,
            departure_date=departure,
            departure_time=series.departure_time,
            seats_offered=series.seats_offered,
            available_seats=series.seats_offered,
            price=series.price,
            max_price=series.max_price,
            description=series.description,
            car_model=series.car_model,
            car_color=series.car_color,
            recurrence_id=series.id,
            recurrence=series.recurrence,
        )

    def _resolve_contact(self, ctx: RequestContext, given: ContactInfo | None) -> ContactInfo:
        if given is not None:
            return given
        profile = self._profiles.get(ctx.user_id)
        if profile is None:
            raise TripValidationError("Contact details are required when no profile is saved")
        return profile.contact()

    def _check_phone(self, contact: ContactInfo, *, required: bool) -> None:
        if not contact.phone:
            if required:
                raise TripValidationError("A contact phone number is required")
            return
        if not re.fullmatch(self._settings.phone_pattern, contact.phone):
            raise TripValidationError(f"Invalid phone number: {contact.phone}")

    def _check_bookable(self, ctx: RequestContext, trip: Trip, seats: int) -> None:
        if trip.kind != TripKind.driver_offer:
            raise TripValidationError("Only driver offers can be booked")
        if trip.status != TripStatus.active or trip.departure_date < self.today():
            raise TripValidationError("This trip is no longer available")
        if trip.owner_id == ctx.user_id:
            raise TripValidationError("You cannot book your own trip")
        if seats > trip.available_seats:
            raise BookingConflictError("Not enough seats available")

    @staticmethod
    def _require_owner(ctx: RequestContext, owner_id: str) -> None:
        if ctx.user_id != owner_id:
            raise PermissionDeniedError("You do not own this resource")

    @staticmethod
    def _is_running(group: RecurringTripGroup, today: date) -> bool:
        if group.status != TripStatus.active:
            return False
        return group.next_trip_id is not None or group.next_trip_date >= today

    @staticmethod
    def _is_listed(trip: Trip, today: date) -> bool:
        if trip.status != TripStatus.active or trip.departure_date < today:
            return False
        return trip.kind == TripKind.passenger_request or trip.available_seats > 0
    @staticmethod
    def _matches(trip: Trip, filters: TripFilters) -> bool:
        if filters.origin and filters.origin.casefold() not in trip.origin.casefold():
            return False
        if filters.destination and filters.destination.casefold() not in trip.destination.casefold():
            return False
        if filters.departure_date and trip.departure_date != filters.departure_date:
            return False
        if filters.min_seats and trip.available_seats < filters.min_seats:
            return False
        if (
            filters.max_price is not None
            and trip.price is not None
            and trip.price > filters.max_price
        ):
            return False
        return True
