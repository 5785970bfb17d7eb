"""Trip service — adding targets to a user's trips, with a positive preference bump."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tripsignals.errors import NotAuthenticated, NotFound, PersistenceError
from tripsignals.models.pending_delta import PendingDelta
from tripsignals.models.trip_item import TripItem
from tripsignals.models.upsert import upsert_insert
from tripsignals.services.signal_dispatch import Dispatcher, celery_dispatch, fire
from tripsignals.services.weight_policy import TRIP_ADD_DELTA

logger = logging.getLogger(__name__)


class TripService:
    def __init__(self, db: Session, dispatch: Dispatcher | None = None):
        self.db = db
        self.dispatch = dispatch or celery_dispatch

    def add(self, user_id: str, target_id: str, trip_id: str | None = None) -> tuple[TripItem, bool]:
        """Add a target to a trip. Returns (item, created).

        Re-adding the same target is a no-op and does not bump preferences again.
        Raises NotFound if the item is erased before it can be read back.
        """
        if not user_id:
            raise NotAuthenticated("Adding to a trip requires a user")

        item_id = uuid.uuid4()
        stmt = upsert_insert(self.db, TripItem).values(
            id=item_id,
            user_id=str(user_id),
            target_id=str(target_id),
            trip_id=trip_id or "",
        ).on_conflict_do_nothing(index_elements=["user_id", "target_id", "trip_id"])

        pending = None
        try:
            created = (self.db.execute(stmt).rowcount or 0) == 1
            if created:
                pending = PendingDelta(
                    id=uuid.uuid4(),
                    user_id=str(user_id),
                    target_id=str(target_id),
                    delta=TRIP_ADD_DELTA,
                    source="trip",
                    source_id=str(item_id),
                    attempts=0,
                )
                self.db.add(pending)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to add %s to trip for user %s: %s", target_id, user_id, e)
            raise PersistenceError(f"Could not add {target_id} to trip") from e

        item = self.db.execute(
            select(TripItem).where(
                TripItem.user_id == str(user_id),
                TripItem.target_id == str(target_id),
                TripItem.trip_id == (trip_id or ""),
            )
        ).scalar_one_or_none()

        if pending is not None:
            fire(self.dispatch, pending.id)
        if item is None:
            # erased between the insert and the read
            raise NotFound(f"Trip item for {target_id} no longer exists")
        return item, created

    def list_items(self, user_id: str, trip_id: str | None = None) -> list[TripItem]:
        query = select(TripItem).where(TripItem.user_id == user_id)
        if trip_id:
            query = query.where(TripItem.trip_id == trip_id)
        return list(self.db.execute(query.order_by(TripItem.created_at.desc())).scalars().all())
