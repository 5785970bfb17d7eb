"""Rating reconciler — idempotent star ratings that feed the preference ledger."""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tripsignals.config import get_settings
from tripsignals.errors import NotAuthenticated, NotFound, PersistenceError
from tripsignals.models.pending_delta import PendingDelta
from tripsignals.models.rating import Rating
from tripsignals.models.upsert import upsert_insert
from tripsignals.services.signal_dispatch import Dispatcher, celery_dispatch, fire
from tripsignals.services.weight_policy import rating_delta, validate_rating

logger = logging.getLogger(__name__)


@dataclass
class RatingSummary:
    average: float | None
    count: int


@dataclass
class RatingResult:
    rating: int
    average: float | None
    count: int | None
    delta: float


class RatingReconciler:
    def __init__(self, db: Session, dispatch: Dispatcher | None = None, rating_weight: float | None = None):
        self.db = db
        self.dispatch = dispatch or celery_dispatch
        self.rating_weight = get_settings().rating_weight if rating_weight is None else rating_weight

    def rate(
        self,
        user_id: str,
        target_id: str,
        rating: int,
        comment: str | None = None,
        trip_id: str | None = None,
    ) -> RatingResult:
        """Create or update the user's rating for a target.

        The upsert and its pending delta commit together; the aggregate
        average is recomputed afterwards on a best-effort basis. Every call
        contributes its own delta, so rating 5 twice adds +2 twice.
        """
        validate_rating(rating)
        if not user_id:
            raise NotAuthenticated("Rating requires a user")

        delta = rating_delta(rating, self.rating_weight)

        stmt = upsert_insert(self.db, Rating).values(
            id=uuid.uuid4(),
            user_id=str(user_id),
            target_id=str(target_id),
            rating=rating,
            comment=comment,
            trip_id=trip_id,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "target_id"],
            set_={
                "rating": stmt.excluded.rating,
                "comment": stmt.excluded.comment,
                "trip_id": func.coalesce(stmt.excluded.trip_id, Rating.trip_id),
                "updated_at": func.now(),
            },
        )
        pending = PendingDelta(
            id=uuid.uuid4(),
            user_id=str(user_id),
            target_id=str(target_id),
            delta=delta,
            source="rating",
            source_id=f"{user_id}:{target_id}",
            attempts=0,
        )

        try:
            self.db.execute(stmt)
            self.db.add(pending)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to upsert rating for user %s on %s: %s", user_id, target_id, e)
            raise PersistenceError(f"Could not save rating for {target_id}") from e

        average, count = None, None
        try:
            summary = self.summary(target_id)
            average, count = summary.average, summary.count
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Rating saved but average recomputation failed for %s", target_id)

        fire(self.dispatch, pending.id)
        return RatingResult(rating=rating, average=average, count=count, delta=delta)

    def get(self, user_id: str, target_id: str) -> Rating:
        rating = self.db.execute(
            select(Rating).where(Rating.user_id == user_id, Rating.target_id == target_id)
        ).scalar_one_or_none()
        if rating is None:
            raise NotFound(f"No rating by {user_id} for {target_id}")
        return rating

    def summary(self, target_id: str) -> RatingSummary:
        """Arithmetic mean and count of all current ratings for a target."""
        average, count = self.db.execute(
            select(func.avg(Rating.rating), func.count(Rating.id)).where(Rating.target_id == target_id)
        ).one()
        return RatingSummary(
            average=float(average) if average is not None else None,
            count=count or 0,
        )
