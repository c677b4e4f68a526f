"""Profile endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from bondicar.api.auth import get_current_context
from bondicar.api.deps import get_trip_service, to_http_error
from bondicar.db.context import RequestContext
from bondicar.models.profile import Profile, ProfileUpdate
from bondicar.services.trips import TripService, TripServiceError

router = APIRouter()


@router.get("/profile", response_model=Profile)
def get_profile(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> Profile:
    """The caller's saved profile."""
    try:
        return service.get_profile(ctx)
    except TripServiceError as e:
        raise to_http_error(e) from e


@router.put("/profile", response_model=Profile)
def update_profile(
    update: ProfileUpdate,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> Profile:
    """Create or replace the caller's profile.

    Trips, bookings and offers sent without contact details use it.
    """
    try:
        return service.update_profile(ctx, update)
    except TripServiceError as e:
        raise to_http_error(e) from e
