"""Pydantic schemas package."""

from tripsignals.schemas.interaction import (
    InteractionCreate,
    InteractionBatchCreate,
    InteractionRead,
    BatchFailureRead,
    InteractionBatchRead,
)
from tripsignals.schemas.rating import (
    RatingCreate,
    RatingRead,
    RatingResultRead,
    RatingSummaryRead,
)
from tripsignals.schemas.trip import (
    TripItemCreate,
    TripItemRead,
)
from tripsignals.schemas.recommendation import (
    RECOMMENDATION_CONTEXTS,
    GeoPoint,
    RecommendationParams,
    RecommendationRequest,
    CardLocation,
    RecommendationCard,
    ResponseMetadata,
    RecommendationPage,
    RecommendationFeedback,
    RecommendationListResponse,
)

__all__ = [
    # Interaction
    "InteractionCreate",
    "InteractionBatchCreate",
    "InteractionRead",
    "BatchFailureRead",
    "InteractionBatchRead",
    # Rating
    "RatingCreate",
    "RatingRead",
    "RatingResultRead",
    "RatingSummaryRead",
    # Trip
    "TripItemCreate",
    "TripItemRead",
    # Recommendation
    "RECOMMENDATION_CONTEXTS",
    "GeoPoint",
    "RecommendationParams",
    "RecommendationRequest",
    "CardLocation",
    "RecommendationCard",
    "ResponseMetadata",
    "RecommendationPage",
    "RecommendationFeedback",
    "RecommendationListResponse",
]
