"""Dashboard endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from bondicar.api.auth import get_current_context
from bondicar.api.deps import get_trip_service
from bondicar.db.context import RequestContext
from bondicar.models.dashboard import Dashboard
from bondicar.services.trips import TripService

router = APIRouter()


@router.get("/dashboard", response_model=Dashboard)
def dashboard(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> Dashboard:
    """The caller's trips, series, bookings and received offers."""
    return service.dashboard(ctx)
