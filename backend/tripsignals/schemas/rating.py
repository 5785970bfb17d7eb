"""Pydantic schemas for ratings."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RatingCreate(BaseModel):
    rating: int
    comment: str | None = Field(None, max_length=2000)
    trip_id: str | None = Field(None, max_length=64)


class RatingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    target_id: str
    rating: int
    comment: str | None = None
    trip_id: str | None = None
    created_at: datetime
    updated_at: datetime


class RatingResultRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rating: int
    average: float | None = None
    count: int | None = None


class RatingSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    target_id: str
    average: float | None = None
    count: int
