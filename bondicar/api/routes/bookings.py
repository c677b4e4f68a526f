"""Booking endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from bondicar.api.auth import get_current_context
from bondicar.api.deps import get_trip_service, to_http_error
from bondicar.db.context import RequestContext
from bondicar.models.booking import Booking, BookingDraft, BookingStatusUpdate
from bondicar.services.trips import TripService, TripServiceError

router = APIRouter()


@router.post(
    "/trips/{trip_id}/bookings", response_model=Booking, status_code=status.HTTP_201_CREATED
)
def book_trip(
    trip_id: str,
    draft: BookingDraft,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> Booking:
    """Request seats on a trip instance."""
    try:
        return service.book_trip(ctx, trip_id, draft)
    except TripServiceError as e:
        raise to_http_error(e) from e


@router.post(
    "/series/{recurrence_id}/bookings",
    response_model=Booking,
    status_code=status.HTTP_201_CREATED,
)
def book_series(
    recurrence_id: str,
    draft: BookingDraft,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> Booking:
    """Request seats on the next instance of a recurring series."""
    try:
        return service.book_series(ctx, recurrence_id, draft)
    except TripServiceError as e:
        raise to_http_error(e) from e


@router.get("/bookings/mine", response_model=list[Booking])
def my_bookings(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> list[Booking]:
    """Bookings the caller made as a passenger."""
    return service.dashboard(ctx).my_bookings


@router.get("/bookings/incoming", response_model=list[Booking])
def incoming_bookings(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> list[Booking]:
    """Bookings received on the caller's trips."""
    return service.dashboard(ctx).incoming_bookings


@router.patch("/bookings/{booking_id}", response_model=Booking)
def update_booking(
    booking_id: str,
    update: BookingStatusUpdate,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> Booking:
    """Accept, reject or cancel a booking."""
    try:
        return service.update_booking_status(ctx, booking_id, update.status)
    except TripServiceError as e:
        raise to_http_error(e) from e
