"""Pydantic schemas for trip items."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TripItemCreate(BaseModel):
    target_id: str = Field(..., min_length=1, max_length=64)
    trip_id: str | None = Field(None, max_length=64)


class TripItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    target_id: str
    trip_id: str | None = None
    created_at: datetime

    @field_validator("trip_id")
    @classmethod
    def _empty_trip_is_none(cls, value: str | None) -> str | None:
        return value or None
