"""Shared pytest fixtures for all test suites."""

from collections.abc import Iterator
from datetime import date

import pytest
from sqlalchemy.orm import Session

from bondicar.config import Settings
from bondicar.db.context import RequestContext
from bondicar.db.engine import create_engine_from_settings, create_session_factory, init_db
from bondicar.db.inmemory import (
    InMemoryBookingRepository,
    InMemoryOfferRepository,
    InMemoryProfileRepository,
    InMemorySeriesRepository,
    InMemoryTripRepository,
)
from bondicar.models.common import ContactInfo
from bondicar.services.trips import TripService

# Monday
TODAY = date(2024, 1, 1)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment."""
    return Settings(_env_file=None, database_url=None)


@pytest.fixture
def trip_repo() -> InMemoryTripRepository:
    return InMemoryTripRepository()


@pytest.fixture
def booking_repo() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@pytest.fixture
def offer_repo() -> InMemoryOfferRepository:
    return InMemoryOfferRepository()


@pytest.fixture
def series_repo() -> InMemorySeriesRepository:
    return InMemorySeriesRepository()


@pytest.fixture
def profile_repo() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def clock() -> dict[str, date]:
    """Mutable clock; tests move time with clock["today"] = ..."""
    return {"today": TODAY}


@pytest.fixture
def service(
    trip_repo: InMemoryTripRepository,
    booking_repo: InMemoryBookingRepository,
    offer_repo: InMemoryOfferRepository,
    series_repo: InMemorySeriesRepository,
    profile_repo: InMemoryProfileRepository,
    settings: Settings,
    clock: dict[str, date],
) -> TripService:
    """TripService on in-memory repositories with a controllable clock."""
    return TripService(
        trip_repo,
        booking_repo,
        offer_repo,
        series_repo,
        profile_repo,
        settings=settings,
        today_provider=lambda: clock["today"],
    )


@pytest.fixture
def driver_ctx() -> RequestContext:
    return RequestContext(user_id="driver-1")


@pytest.fixture
def passenger_ctx() -> RequestContext:
    return RequestContext(user_id="passenger-1")


@pytest.fixture
def driver_contact() -> ContactInfo:
    return ContactInfo(name="Ana", phone="5491122334455")


@pytest.fixture
def passenger_contact() -> ContactInfo:
    return ContactInfo(name="Bruno", phone="+54 9 11 5566-7788")


@pytest.fixture
def sql_session() -> Iterator[Session]:
    """Session on a fresh in-memory SQLite database."""
    engine = create_engine_from_settings(
        Settings(_env_file=None, database_url="sqlite:///:memory:")
    )
    init_db(engine)
    session_factory = create_session_factory(engine)

    with session_factory() as session:
        yield session

    engine.dispose()
