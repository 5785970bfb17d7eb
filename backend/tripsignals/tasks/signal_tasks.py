"""Celery tasks that apply preference deltas and forward hints to the recommendation engine."""

import logging
import uuid
from datetime import datetime, timezone, timedelta

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from tripsignals.config import get_settings
from tripsignals.errors import NotFound
from tripsignals.models.base import get_session_factory
from tripsignals.models.pending_delta import PendingDelta
from tripsignals.services.catalog import CatalogLookup
from tripsignals.services.preference_ledger import PreferenceLedger
from tripsignals.services.recommendation_gateway import RecommendationGateway
from tripsignals.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def process_pending_delta(db: Session, delta_id: str | uuid.UUID, gateway: RecommendationGateway | None = None) -> bool:
    """Apply one pending delta to the ledger. Returns True if this call applied it.

    The claim (applied_at IS NULL -> now) and the ledger increments commit
    together, so a delta is applied at most once even with duplicate
    deliveries. On failure the claim rolls back and the row stays pending.
    """
    delta_id = uuid.UUID(str(delta_id))
    pending = db.execute(
        select(PendingDelta).where(PendingDelta.id == delta_id)
    ).scalar_one_or_none()
    if pending is None:
        logger.warning("Pending delta %s no longer exists", delta_id)
        return False
    if pending.applied_at is not None:
        return False

    user_id, target_id, delta = pending.user_id, pending.target_id, pending.delta

    try:
        claimed = db.execute(
            update(PendingDelta)
            .where(PendingDelta.id == delta_id, PendingDelta.applied_at.is_(None))
            .values(applied_at=datetime.now(timezone.utc), attempts=PendingDelta.attempts + 1)
        ).rowcount
        if not claimed:
            db.rollback()
            return False

        try:
            tags = CatalogLookup(db).tags_for(target_id)
        except NotFound:
            logger.warning("Target %s not in catalog; delta %s applied to no tags", target_id, delta_id)
            tags = []

        PreferenceLedger(db).apply_delta(user_id, tags, delta)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.exception("Failed to apply pending delta %s", delta_id)
        db.execute(
            update(PendingDelta)
            .where(PendingDelta.id == delta_id)
            .values(attempts=PendingDelta.attempts + 1, last_error=str(e)[:500])
        )
        db.commit()
        raise

    logger.info("Applied delta %+.2f for user %s on %s (%d tags)", delta, user_id, target_id, len(tags))

    if gateway is not None:
        gateway.refresh_user(user_id)
    return True


def replay(db: Session, gateway: RecommendationGateway | None = None, limit: int = 500) -> int:
    """Re-apply pending deltas that were never applied (lost dispatch, worker crash)."""
    settings = get_settings()
    cutoff = datetime.now(timezone.utc) - timedelta(seconds=settings.delta_replay_grace_seconds)

    delta_ids = db.execute(
        select(PendingDelta.id)
        .where(
            PendingDelta.applied_at.is_(None),
            PendingDelta.created_at <= cutoff,
            PendingDelta.attempts < settings.delta_max_attempts,
        )
        .order_by(PendingDelta.created_at.asc())
        .limit(limit)
    ).scalars().all()
    db.rollback()

    applied = 0
    for delta_id in delta_ids:
        try:
            if process_pending_delta(db, delta_id, gateway):
                applied += 1
        except Exception:
            # already logged and recorded on the row
            continue

    if delta_ids:
        logger.info("Replayed %d of %d pending deltas", applied, len(delta_ids))
    return applied


@celery_app.task(name="tripsignals.tasks.signal_tasks.apply_pending_delta")
def apply_pending_delta(delta_id: str):
    """Apply a pending preference delta and send the engine a refresh hint."""
    with get_session_factory()() as session:
        process_pending_delta(session, delta_id, RecommendationGateway())


@celery_app.task(name="tripsignals.tasks.signal_tasks.replay_pending_deltas")
def replay_pending_deltas():
    """Sweep unapplied deltas (runs every 5 min via beat)."""
    with get_session_factory()() as session:
        return {"applied": replay(session, RecommendationGateway())}


@celery_app.task(name="tripsignals.tasks.signal_tasks.notify_recommendation_engine")
def notify_recommendation_engine(user_id: str, target_id: str, kind: str, context: str, metadata: dict | None = None):
    """Forward a recommendation feedback event to the engine."""
    RecommendationGateway().notify_interaction(user_id, target_id, kind, context, metadata)
