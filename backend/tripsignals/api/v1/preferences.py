"""Preference endpoints — read-only view of the caller's tag scores."""

from fastapi import APIRouter, Depends

from tripsignals.dependencies.auth import require_user_id
from tripsignals.dependencies.services import get_ledger
from tripsignals.services.preference_ledger import PreferenceLedger

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("", response_model=dict[str, float])
def get_preferences(
    user_id: str = Depends(require_user_id),
    ledger: PreferenceLedger = Depends(get_ledger),
):
    """Tag -> score map for the caller."""
    return ledger.read(user_id)
