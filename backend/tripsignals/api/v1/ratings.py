"""Rating endpoints — one star rating per user and target."""

from fastapi import APIRouter, Depends

from tripsignals.dependencies.auth import require_user_id
from tripsignals.dependencies.services import get_reconciler
from tripsignals.schemas.rating import RatingCreate, RatingRead, RatingResultRead, RatingSummaryRead
from tripsignals.services.rating_reconciler import RatingReconciler

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.put("/{target_id}", response_model=RatingResultRead)
def rate_target(
    target_id: str,
    payload: RatingCreate,
    user_id: str = Depends(require_user_id),
    reconciler: RatingReconciler = Depends(get_reconciler),
):
    """Create or update the caller's rating. Returns the new average."""
    result = reconciler.rate(user_id, target_id, payload.rating, payload.comment, payload.trip_id)
    return RatingResultRead.model_validate(result)


@router.get("/{target_id}", response_model=RatingRead)
def get_own_rating(
    target_id: str,
    user_id: str = Depends(require_user_id),
    reconciler: RatingReconciler = Depends(get_reconciler),
):
    """The caller's rating for a target (404 if none)."""
    return RatingRead.model_validate(reconciler.get(user_id, target_id))


@router.get("/{target_id}/summary", response_model=RatingSummaryRead)
def rating_summary(
    target_id: str,
    reconciler: RatingReconciler = Depends(get_reconciler),
):
    """Average rating and count for a target."""
    summary = reconciler.summary(target_id)
    return RatingSummaryRead(target_id=target_id, average=summary.average, count=summary.count)
