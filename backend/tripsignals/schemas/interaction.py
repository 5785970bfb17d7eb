"""Pydantic schemas for interaction events."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class InteractionCreate(BaseModel):
    """A single user action on a target."""

    target_id: str = Field(..., min_length=1, max_length=64)
    kind: str = Field(..., min_length=1, max_length=20)
    parent_id: str | None = Field(None, max_length=64)
    direction: str | None = Field(None, max_length=10, description="left or right when kind is \"swipe\"")
    metadata: dict[str, Any] | None = None


class InteractionBatchCreate(BaseModel):
    items: list[InteractionCreate] = Field(..., min_length=1, max_length=500)


class InteractionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    target_id: str
    parent_id: str | None = None
    interaction_type: str
    weight: float
    metadata: dict[str, Any] | None = Field(None, validation_alias=AliasChoices("extra_data", "metadata"))
    created_at: datetime


class BatchFailureRead(BaseModel):
    index: int
    reason: str


class InteractionBatchRead(BaseModel):
    status: str  # complete, partial, failed
    persisted: list[InteractionRead]
    failed: list[BatchFailureRead]
