"""Driver offer endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from bondicar.api.auth import get_current_context
from bondicar.api.deps import get_trip_service, to_http_error
from bondicar.db.context import RequestContext
from bondicar.models.booking import DriverOffer, OfferDraft, OfferStatusUpdate
from bondicar.services.trips import TripService, TripServiceError

router = APIRouter()


@router.post(
    "/requests/{request_id}/offers",
    response_model=DriverOffer,
    status_code=status.HTTP_201_CREATED,
)
def make_offer(
    request_id: str,
    draft: OfferDraft,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> DriverOffer:
    """Offer a ride to a passenger request."""
    try:
        return service.make_offer(ctx, request_id, draft)
    except TripServiceError as e:
        raise to_http_error(e) from e


@router.get("/requests/{request_id}/offers", response_model=list[DriverOffer])
def list_offers(
    request_id: str,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> list[DriverOffer]:
    """Offers on a passenger request."""
    try:
        return service.list_offers(ctx, request_id)
    except TripServiceError as e:
        raise to_http_error(e) from e


@router.patch("/offers/{offer_id}", response_model=DriverOffer)
def respond_to_offer(
    offer_id: str,
    update: OfferStatusUpdate,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    service: Annotated[TripService, Depends(get_trip_service)],
) -> DriverOffer:
    """Accept, reject or cancel a driver offer."""
    try:
        return service.respond_to_offer(ctx, offer_id, update.status)
    except TripServiceError as e:
        raise to_http_error(e) from e
