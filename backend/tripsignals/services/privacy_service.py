"""Privacy erasure — removes a user's behavioural data in one transaction."""

import logging

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tripsignals.errors import NotAuthenticated, PersistenceError
from tripsignals.models.pending_delta import PendingDelta
from tripsignals.models.trip_item import TripItem
from tripsignals.services.interaction_recorder import InteractionRecorder
from tripsignals.services.preference_ledger import PreferenceLedger

logger = logging.getLogger(__name__)


def erase_user_data(db: Session, user_id: str) -> dict[str, int]:
    """Erase interaction events, pending deltas, preference scores and trip items.

    Pending deltas go in the same transaction so replay cannot rebuild erased
    scores. Ratings are kept: they belong to the target's public aggregate.
    """
    if not user_id:
        raise NotAuthenticated("Erasure requires a user")

    try:
        counts = {
            "interaction_events": InteractionRecorder(db).erase(user_id),
            "pending_deltas": db.execute(delete(PendingDelta).where(PendingDelta.user_id == user_id)).rowcount or 0,
            "preference_scores": PreferenceLedger(db).erase(user_id),
            "trip_items": db.execute(delete(TripItem).where(TripItem.user_id == user_id)).rowcount or 0,
        }
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to erase data for user %s: %s", user_id, e)
        raise PersistenceError("Could not erase user data") from e

    logger.info("Erased data for user %s: %s", user_id, counts)
    return counts
