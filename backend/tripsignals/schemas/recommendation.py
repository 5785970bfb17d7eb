"""Pydantic schemas for the recommendation engine wire contract."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

RecommendationContext = Literal["fyp", "explore", "after_booking", "trip"]
RECOMMENDATION_CONTEXTS = ("fyp", "explore", "after_booking", "trip")


class CamelModel(BaseModel):
    """Snake-case fields, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DefaultingModel(CamelModel):
    """Drops explicit nulls so missing and null fields both fall back to defaults."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# --- Request ---

class GeoPoint(CamelModel):
    lat: float
    lng: float


class RecommendationParams(CamelModel):
    location: GeoPoint | None = None
    seed_target_id: str | None = None
    trip_id: str | None = None
    limit: int | None = Field(None, ge=1, le=100)
    page: int | None = Field(None, ge=1)
    exclude_seen: bool | None = None


class RecommendationRequest(CamelModel):
    context: RecommendationContext
    user_id: str
    params: RecommendationParams | None = None


# --- Response ---

class CardLocation(DefaultingModel):
    city: str = ""
    country: str = ""
    lat: float | None = None
    lng: float | None = None


class RecommendationCard(DefaultingModel):
    """Recommendation card with every fixed field populated."""

    id: str = ""
    title: str = ""
    description: str = ""
    image_urls: list[str] = Field(default_factory=list)
    price_per_night: float = 0.0
    average_rating: float = 0.0
    review_count: int = 0
    location: CardLocation = Field(default_factory=CardLocation)
    amenities: list[str] = Field(default_factory=list)
    is_available: bool = False
    host_id: str = ""
    score: float | None = None
    explanation: str | None = None
    metadata: dict[str, Any] | None = None


class ResponseMetadata(DefaultingModel):
    context: str = ""
    generated_at: datetime | None = None
    total_count: int = 0
    page: int = 1
    has_more: bool = False


class RecommendationPage(CamelModel):
    cards: list[RecommendationCard] = Field(default_factory=list)
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class RecommendationFeedback(CamelModel):
    """Feedback on a recommended card, forwarded to the engine."""

    target_id: str = Field(..., min_length=1)
    interaction_type: str = Field(..., min_length=1)
    context: RecommendationContext
    metadata: dict[str, Any] | None = None


class RecommendationListResponse(CamelModel):
    cards: list[RecommendationCard]
    metadata: ResponseMetadata | None = None
    degraded: bool = False
