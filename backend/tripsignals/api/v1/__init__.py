"""API v1 router aggregation."""

from fastapi import APIRouter

from tripsignals.api.v1.interactions import router as interactions_router
from tripsignals.api.v1.ratings import router as ratings_router
from tripsignals.api.v1.preferences import router as preferences_router
from tripsignals.api.v1.trips import router as trips_router
from tripsignals.api.v1.recommendations import router as recommendations_router
from tripsignals.api.v1.privacy import router as privacy_router

router = APIRouter(prefix="/api/v1")

router.include_router(interactions_router)
router.include_router(ratings_router)
router.include_router(preferences_router)
router.include_router(trips_router)
router.include_router(recommendations_router)
router.include_router(privacy_router)
