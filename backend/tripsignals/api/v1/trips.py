"""Trip endpoints — add listings and events to a user's trips."""

from fastapi import APIRouter, Depends, Query, Response

from tripsignals.dependencies.auth import require_user_id
from tripsignals.dependencies.services import get_trip_service
from tripsignals.schemas.trip import TripItemCreate, TripItemRead
from tripsignals.services.trip_service import TripService

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("/items", response_model=TripItemRead, status_code=201)
def add_trip_item(
    payload: TripItemCreate,
    response: Response,
    user_id: str = Depends(require_user_id),
    trips: TripService = Depends(get_trip_service),
):
    """Add a target to a trip. 201 when added, 200 when it was already there."""
    item, created = trips.add(user_id, payload.target_id, payload.trip_id)
    if not created:
        response.status_code = 200
    return TripItemRead.model_validate(item)


@router.get("/items", response_model=list[TripItemRead])
def list_trip_items(
    trip_id: str | None = Query(None, description="Filter by trip"),
    user_id: str = Depends(require_user_id),
    trips: TripService = Depends(get_trip_service),
):
    """Targets the caller added to trips."""
    return [TripItemRead.model_validate(item) for item in trips.list_items(user_id, trip_id)]
