"""Recommendation endpoints — proxy to the external recommendation engine."""

import logging

from fastapi import APIRouter, Depends, Query

from tripsignals.dependencies.auth import require_user_id
from tripsignals.dependencies.services import get_gateway, get_notifier
from tripsignals.errors import GatewayUnavailable, MalformedGatewayResponse
from tripsignals.schemas.recommendation import (
    GeoPoint,
    RecommendationContext,
    RecommendationFeedback,
    RecommendationListResponse,
    RecommendationParams,
)
from tripsignals.services.recommendation_gateway import RecommendationGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.get("/{context}", response_model=RecommendationListResponse)
async def get_recommendations(
    context: RecommendationContext,
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    seed_target_id: str | None = Query(None),
    trip_id: str | None = Query(None),
    limit: int | None = Query(None, ge=1, le=100),
    page: int | None = Query(None, ge=1),
    exclude_seen: bool | None = Query(None),
    user_id: str = Depends(require_user_id),
    gateway: RecommendationGateway = Depends(get_gateway),
):
    """Recommendation cards for a context.

    Engine failures degrade to an empty list flagged ``degraded`` so the
    screen still renders.
    """
    params = RecommendationParams(
        location=GeoPoint(lat=lat, lng=lng) if lat is not None and lng is not None else None,
        seed_target_id=seed_target_id,
        trip_id=trip_id,
        limit=limit,
        page=page,
        exclude_seen=exclude_seen,
    )
    try:
        result = await gateway.fetch_async(context, user_id, params)
    except (GatewayUnavailable, MalformedGatewayResponse) as e:
        logger.warning("Serving empty %s recommendations for user %s: %s", context, user_id, e)
        return RecommendationListResponse(cards=[], degraded=True)

    return RecommendationListResponse(cards=result.cards, metadata=result.metadata)


@router.post("/feedback", status_code=202)
def recommendation_feedback(
    payload: RecommendationFeedback,
    user_id: str = Depends(require_user_id),
    notify=Depends(get_notifier),
):
    """Forward feedback on a recommended card. Always accepted."""
    try:
        notify(user_id, payload.target_id, payload.interaction_type, payload.context, payload.metadata)
    except Exception:
        logger.exception("Failed to queue recommendation feedback for user %s", user_id)
    return {"status": "accepted"}
