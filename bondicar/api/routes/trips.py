"""Trip and recurring series endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel

from bondicar.api.auth import get_current_context, require_scheduler
from bondicar.api.deps import get_trip_service, to_http_error
from bondicar.db.context import RequestContext
from bondicar.models.common import TripKind
from bondicar.models.trip import PublishResult, SearchResults, Trip, TripDraft, TripFilters
from bondicar.recurrence.collapser import split_entries
from bondicar.services.trips import TripService, TripServiceError

router = APIRouter()


class SeriesDeleteResponse(BaseModel):
    """Response for DELETE /series/{recurrence_id}."""

    recurrence_id: str
    deleted: int


class PublishDueResponse(BaseModel):
    """Response for POST /series/publish."""

    published: int


@router.post("/trips", response_model=PublishResult, status_code=status.HTTP_201_CREATED)
def create_trip(
    draft: TripDraft,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> PublishResult:
    """Publish a one-off trip/request or a recurring series.

    A recurring series answers with every instance publishable today; an
    empty list means none has reached its publish lead time yet.
    """
    try:
        return service.create(ctx, draft)
    except TripServiceError as e:
        raise to_http_error(e) from e


@router.get("/trips/search", response_model=SearchResults)
def search_trips(
    service: Annotated[TripService, Depends(get_trip_service)],
    origin: str | None = None,
    destination: str | None = None,
    departure_date: date | None = None,
    min_seats: Annotated[int | None, Query(ge=1)] = None,
    max_price: Annotated[float | None, Query(ge=0)] = None,
    kind: TripKind | None = None,
) -> SearchResults:
    """Search upcoming trips; each recurring series appears once."""
    filters = TripFilters(
        origin=origin,
        destination=destination,
        departure_date=departure_date,
        min_seats=min_seats,
        max_price=max_price,
        kind=kind,
    )
    trips, series = split_entries(service.search(filters))
    return SearchResults(trips=trips, series=series)


@router.get("/trips/featured", response_model=SearchResults)
def featured_trips(
    service: Annotated[TripService, Depends(get_trip_service)],
    limit: Annotated[int | None, Query(ge=1, le=20)] = None,
) -> SearchResults:
    """Home page picks."""
    return service.featured(limit)


@router.get("/trips/{trip_id}", response_model=Trip)
def get_trip(
    trip_id: str,
    service: Annotated[TripService, Depends(get_trip_service)],
) -> Trip:
    """Get a single trip instance."""
    try:
        return service.get(trip_id)
    except TripServiceError as e:
        raise to_http_error(e) from e


@router.delete("/trips/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_trip(
    trip_id: str,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> Response:
    """Delete one of the caller's trip instances."""
    try:
        service.delete_trip(ctx, trip_id)
    except TripServiceError as e:
        raise to_http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/series/publish", response_model=PublishDueResponse)
def publish_due_instances(
    _: Annotated[RequestContext, Depends(require_scheduler)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> PublishDueResponse:
    """Publish series dates whose lead window has opened since they were last swept.

    Meant to be called periodically by the scheduler identity.
    """
    return PublishDueResponse(published=service.publish_due_instances())


@router.delete("/series/{recurrence_id}", response_model=SeriesDeleteResponse)
def delete_series(
    recurrence_id: str,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> SeriesDeleteResponse:
    """Delete one of the caller's series with every instance it has."""
    try:
        deleted = service.delete_series(ctx, recurrence_id)
    except TripServiceError as e:
        raise to_http_error(e) from e
    return SeriesDeleteResponse(recurrence_id=recurrence_id, deleted=deleted)
