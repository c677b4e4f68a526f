"""FastAPI dependencies wiring the trip service to a data store."""

from collections.abc import Iterator
from functools import lru_cache

from fastapi import HTTPException, status

from bondicar.config import get_settings
from bondicar.db.engine import create_session_factory, get_engine
from bondicar.db.inmemory import (
    InMemoryBookingRepository,
    InMemoryOfferRepository,
    InMemoryProfileRepository,
    InMemorySeriesRepository,
    InMemoryTripRepository,
)
from bondicar.db.sql_repositories import (
    SqlBookingRepository,
    SqlOfferRepository,
    SqlProfileRepository,
    SqlSeriesRepository,
    SqlTripRepository,
)
from bondicar.services.trips import (
    BookingConflictError,
    PermissionDeniedError,
    TripNotFoundError,
    TripService,
    TripServiceError,
    TripValidationError,
)


@lru_cache
def get_inmemory_repositories() -> tuple[
    InMemoryTripRepository,
    InMemoryBookingRepository,
    InMemoryOfferRepository,
    InMemorySeriesRepository,
    InMemoryProfileRepository,
]:
    """Process-wide in-memory store used when no database is configured."""
    return (
        InMemoryTripRepository(),
        InMemoryBookingRepository(),
        InMemoryOfferRepository(),
        InMemorySeriesRepository(),
        InMemoryProfileRepository(),
    )


def get_trip_service() -> Iterator[TripService]:
    """FastAPI dependency yielding a TripService.

    Uses SQL repositories on a per-request session when DATABASE_URL is set,
    the in-memory store otherwise.
    """
    settings = get_settings()

    if not settings.database_url:
        yield TripService(*get_inmemory_repositories(), settings=settings)
        return

    session_factory = create_session_factory(get_engine())
    with session_factory() as session:
        yield TripService(
            SqlTripRepository(session),
            SqlBookingRepository(session),
            SqlOfferRepository(session),
            SqlSeriesRepository(session),
            SqlProfileRepository(session),
            settings=settings,
        )


_STATUS_BY_ERROR: list[tuple[type[TripServiceError], int]] = [
    (TripNotFoundError, 404),
    (PermissionDeniedError, 403),
    (TripValidationError, 422),
    (BookingConflictError, 409),
]


def to_http_error(error: TripServiceError) -> HTTPException:
    """Map a service error to the HTTPException a route should raise."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
