"""Trip models - instances, recurring series and creation payloads."""

from datetime import date, datetime

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from bondicar.models.common import ContactInfo, TripKind, TripStatus, Weekday
from bondicar.recurrence.dates import coerce_departure_date, format_display_date
from bondicar.utils.contact import series_message, trip_message, whatsapp_link

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# Longest lead time a series may publish ahead
MAX_PUBLISH_DAYS_BEFORE = 365


class RecurrenceRule(BaseModel):
    """Recurrence definition embedded on every instance of a series."""

    weekdays: list[Weekday] = Field(..., min_length=1)
    start_date: date
    end_date: date | None = None
    publish_days_before: int = Field(0, ge=0, le=MAX_PUBLISH_DAYS_BEFORE)

    @field_validator("weekdays", mode="before")
    @classmethod
    def _parse_weekdays(cls, value: object) -> object:
        if not isinstance(value, (list, tuple, set, frozenset)):
            return value
        parsed = []
        for item in value:
            if isinstance(item, Weekday):
                parsed.append(item)
                continue
            day = Weekday.from_name(str(item))
            if day is None:
                raise ValueError(f"Unknown weekday: {item!r}")
            parsed.append(day)
        return parsed

    @field_validator("weekdays")
    @classmethod
    def _dedupe_weekdays(cls, value: list[Weekday]) -> list[Weekday]:
        return sorted(set(value), key=lambda day: day.ordinal)

    @model_validator(mode="after")
    def _check_bounds(self) -> "RecurrenceRule":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class Trip(BaseModel):
    """Single dated trip (driver offer) or passenger request."""

    id: str
    kind: TripKind = TripKind.driver_offer
    owner_id: str
    owner: ContactInfo
    origin: str
    destination: str
    departure_date: date
    departure_time: str
    seats_offered: int = Field(0, ge=0)
    available_seats: int = Field(0, ge=0)
    price: float | None = None
    max_price: float | None = None
    description: str | None = None
    car_model: str | None = None
    car_color: str | None = None
    status: TripStatus = TripStatus.active
    created_at: datetime = Field(default_factory=datetime.now)

    # Present only on instances that belong to a series
    recurrence_id: str | None = None
    recurrence: RecurrenceRule | None = None

    @field_validator("departure_date", mode="before")
    @classmethod
    def _read_departure_date(cls, value: object) -> date:
        return coerce_departure_date(value)

    @property
    def is_recurring(self) -> bool:
        """Whether the instance belongs to a series."""
        return bool(self.recurrence_id)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def contact_url(self) -> str | None:
        """WhatsApp link to the trip's owner."""
        if self.is_recurring:
            message = series_message(self.owner.name, self.origin, self.destination)
        else:
            message = trip_message(
                self.owner.name,
                self.origin,
                self.destination,
                f"{format_display_date(self.departure_date)} {self.departure_time}",
            )
        return whatsapp_link(self.owner.phone, message)


class RecurringTripGroup(BaseModel):
    """One display card per recurring series."""

    id: str  # recurrence_id
    kind: TripKind
    owner_id: str
    owner: ContactInfo
    origin: str
    destination: str
    departure_time: str
    seats_offered: int
    available_seats: int
    price: float | None = None
    max_price: float | None = None
    description: str | None = None
    car_model: str | None = None
    car_color: str | None = None
    recurrence: RecurrenceRule | None = None
    next_trip_date: date
    next_trip_id: str | None = None
    instance_count: int
    created_at: datetime
    status: TripStatus

    @computed_field  # type: ignore[prop-decorator]
    @property
    def contact_url(self) -> str | None:
        """WhatsApp link to the series' owner."""
        return whatsapp_link(
            self.owner.phone, series_message(self.owner.name, self.origin, self.destination)
        )


class RecurringSeries(BaseModel):
    """Stored definition of a recurring series.

    Kept apart from its instances so the publish sweep can materialize dates
    for series that had nothing due when they were created.
    """

    id: str  # recurrence_id
    kind: TripKind
    owner_id: str
    owner: ContactInfo
    origin: str
    destination: str
    departure_time: str
    seats_offered: int = Field(0, ge=0)
    price: float | None = None
    max_price: float | None = None
    description: str | None = None
    car_model: str | None = None
    car_color: str | None = None
    recurrence: RecurrenceRule
    status: TripStatus = TripStatus.active
    created_at: datetime = Field(default_factory=datetime.now)

    # Latest date already materialized; later sweeps only add dates after it
    published_through: date | None = None


class TripDraft(BaseModel):
    """Request body for publishing a trip, a request, or a recurring series.

    ``contact`` defaults to the caller's profile when omitted.
    """

    kind: TripKind = TripKind.driver_offer
    contact: ContactInfo | None = None
    origin: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    departure_date: date | None = None
    departure_time: str = Field(..., pattern=TIME_PATTERN)
    seats_offered: int = Field(0, ge=0, le=8)
    price: float | None = Field(None, ge=0)
    max_price: float | None = Field(None, ge=0)
    description: str | None = None
    car_model: str | None = None
    car_color: str | None = None
    recurrence: RecurrenceRule | None = None

    @model_validator(mode="after")
    def _check_required(self) -> "TripDraft":
        if self.recurrence is None and self.departure_date is None:
            raise ValueError("departure_date is required for a one-off trip")
        if self.kind == TripKind.driver_offer:
            if self.seats_offered < 1:
                raise ValueError("a driver offer needs at least one seat")
            if self.price is None:
                raise ValueError("price is required for a driver offer")
        return self


class TripFilters(BaseModel):
    """Search filters; text filters match case-insensitive substrings."""

    origin: str | None = None
    destination: str | None = None
    departure_date: date | None = None
    min_seats: int | None = Field(None, ge=1)
    max_price: float | None = Field(None, ge=0)
    kind: TripKind | None = None  # None = all


class PublishResult(BaseModel):
    """Outcome of publishing a draft."""

    recurrence_id: str | None
    published: int
    trips: list[Trip]


class SearchResults(BaseModel):
    """Collapsed listing: one-off instances plus one card per series."""

    trips: list[Trip]
    series: list[RecurringTripGroup]
