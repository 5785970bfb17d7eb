"""Interaction endpoints — record user actions on listings and events."""

from fastapi import APIRouter, Depends, Query, Response

from tripsignals.dependencies.auth import require_user_id
from tripsignals.dependencies.services import get_recorder
from tripsignals.schemas.interaction import (
    BatchFailureRead,
    InteractionBatchCreate,
    InteractionBatchRead,
    InteractionCreate,
    InteractionRead,
)
from tripsignals.services.interaction_recorder import InteractionRecorder

router = APIRouter(prefix="/interactions", tags=["interactions"])


@router.post("", response_model=InteractionRead, status_code=201)
def record_interaction(
    payload: InteractionCreate,
    user_id: str = Depends(require_user_id),
    recorder: InteractionRecorder = Depends(get_recorder),
):
    """Record one interaction. Returns once the event is stored."""
    event = recorder.record(
        user_id,
        payload.target_id,
        payload.kind,
        metadata=payload.metadata,
        parent_id=payload.parent_id,
        direction=payload.direction,
    )
    return InteractionRead.model_validate(event)


@router.post("/batch", response_model=InteractionBatchRead)
def record_interaction_batch(
    payload: InteractionBatchCreate,
    response: Response,
    user_id: str = Depends(require_user_id),
    recorder: InteractionRecorder = Depends(get_recorder),
):
    """Record several interactions (offline sync).

    200 when all were stored, 207 when only some were, 422/500 when none were.
    """
    result = recorder.record_batch(
        [{"user_id": user_id, **item.model_dump()} for item in payload.items]
    )

    if result.status == "partial":
        response.status_code = 207
    elif result.status == "failed":
        storage_failure = any(f.reason == "persistence error" for f in result.failed)
        response.status_code = 500 if storage_failure else 422

    return InteractionBatchRead(
        status=result.status,
        persisted=[InteractionRead.model_validate(e) for e in result.persisted],
        failed=[BatchFailureRead(index=f.index, reason=f.reason) for f in result.failed],
    )


@router.get("/recent", response_model=list[InteractionRead])
def recent_interactions(
    limit: int = Query(50, ge=1, le=200),
    user_id: str = Depends(require_user_id),
    recorder: InteractionRecorder = Depends(get_recorder),
):
    """The caller's most recent interactions, newest first."""
    return [InteractionRead.model_validate(e) for e in recorder.recent(user_id, limit=limit)]
