"""Privacy endpoints — erase the caller's behavioural data."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tripsignals.dependencies.auth import require_user_id
from tripsignals.models.base import get_db
from tripsignals.services.privacy_service import erase_user_data

router = APIRouter(prefix="/me", tags=["privacy"])


@router.delete("/data", response_model=dict[str, int])
def erase_my_data(
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
):
    """Erase interactions, preference scores and trip items. Irreversible."""
    return erase_user_data(db, user_id)
