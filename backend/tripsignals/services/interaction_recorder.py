"""Interaction recorder — persists typed user actions and queues their preference deltas."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tripsignals.errors import NotAuthenticated, PersistenceError, TripSignalsError
from tripsignals.models.interaction_event import InteractionEvent
from tripsignals.models.pending_delta import PendingDelta
from tripsignals.services.signal_dispatch import Dispatcher, celery_dispatch, fire
from tripsignals.services.weight_policy import normalize_kind, swipe_kind, weight_of

logger = logging.getLogger(__name__)


@dataclass
class BatchFailure:
    index: int
    reason: str


@dataclass
class BatchResult:
    """Outcome of a batch record.

    ``status`` is "complete" when every item was persisted, "partial" when
    some were, and "failed" when none were.
    """

    persisted: list[InteractionEvent] = field(default_factory=list)
    failed: list[BatchFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def status(self) -> str:
        if not self.failed:
            return "complete"
        return "partial" if self.persisted else "failed"


class InteractionRecorder:
    """Records interaction events.

    The event insert is the only step the caller waits on. The derived
    preference update is written as a pending delta in the same transaction
    and handed to the signal worker after commit.
    """

    def __init__(self, db: Session, dispatch: Dispatcher | None = None):
        self.db = db
        self.dispatch = dispatch or celery_dispatch

    def _build(
        self,
        user_id: str,
        target_id: str,
        kind: str,
        metadata: Mapping[str, Any] | None = None,
        parent_id: str | None = None,
        direction: str | None = None,
    ) -> tuple[InteractionEvent, PendingDelta]:
        if not user_id:
            raise NotAuthenticated("Recording an interaction requires a user")

        interaction_type = normalize_kind(kind)
        if interaction_type == "swipe":
            interaction_type = swipe_kind(direction or "")
        weight = weight_of(interaction_type)
        event = InteractionEvent(
            id=uuid.uuid4(),
            user_id=str(user_id),
            target_id=target_id,
            parent_id=parent_id,
            interaction_type=interaction_type,
            weight=weight,
            extra_data=dict(metadata) if metadata else None,
            created_at=datetime.now(timezone.utc),
        )
        pending = PendingDelta(
            id=uuid.uuid4(),
            user_id=event.user_id,
            target_id=event.target_id,
            delta=weight,
            source="interaction",
            source_id=str(event.id),
            attempts=0,
        )
        return event, pending

    def record(
        self,
        user_id: str,
        target_id: str,
        kind: str,
        metadata: Mapping[str, Any] | None = None,
        parent_id: str | None = None,
        direction: str | None = None,
    ) -> InteractionEvent:
        """Persist one interaction and queue its preference delta.

        A "swipe" kind is resolved through ``direction`` to swipe_left or
        swipe_right. Raises UnknownInteractionKind before touching storage, and
        PersistenceError if the insert fails. Dispatch failures are swallowed.
        """
        event, pending = self._build(user_id, target_id, kind, metadata, parent_id, direction)

        try:
            self.db.add_all([event, pending])
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to persist %s interaction for user %s: %s", event.interaction_type, user_id, e)
            raise PersistenceError(f"Could not record {event.interaction_type} interaction") from e

        fire(self.dispatch, pending.id)
        return event

    def record_batch(self, items: Iterable[Mapping[str, Any]]) -> BatchResult:
        """Persist a sequence of interaction payloads, each in its own savepoint.

        Payload keys match ``record``: user_id, target_id, kind, and optional
        metadata, parent_id and direction (for kind "swipe").
        """
        result = BatchResult()
        pending_ids = []
        persisted_indices = []

        for index, item in enumerate(items):
            try:
                event, pending = self._build(
                    item.get("user_id"),
                    item.get("target_id"),
                    item.get("kind"),
                    item.get("metadata"),
                    item.get("parent_id"),
                    item.get("direction"),
                )
            except TripSignalsError as e:
                result.failed.append(BatchFailure(index=index, reason=str(e)))
                continue

            try:
                with self.db.begin_nested():
                    self.db.add_all([event, pending])
            except SQLAlchemyError as e:
                logger.warning("Batch item %d failed to persist: %s", index, e)
                result.failed.append(BatchFailure(index=index, reason="persistence error"))
                continue

            result.persisted.append(event)
            pending_ids.append(pending.id)
            persisted_indices.append(index)

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to commit interaction batch: %s", e)
            result.failed.extend(
                BatchFailure(index=i, reason="persistence error") for i in persisted_indices
            )
            result.failed.sort(key=lambda f: f.index)
            result.persisted = []
            return result

        for delta_id in pending_ids:
            fire(self.dispatch, delta_id)

        logger.info("Recorded batch: %d persisted, %d failed", len(result.persisted), len(result.failed))
        return result

    def recent(self, user_id: str, limit: int = 50) -> list[InteractionEvent]:
        """Most recent interactions for a user, newest first."""
        return list(
            self.db.execute(
                select(InteractionEvent)
                .where(InteractionEvent.user_id == user_id)
                .order_by(InteractionEvent.created_at.desc())
                .limit(limit)
            ).scalars().all()
        )

    def erase(self, user_id: str) -> int:
        """Delete every interaction event for a user. Does not commit."""
        result = self.db.execute(
            delete(InteractionEvent).where(InteractionEvent.user_id == user_id)
        )
        return result.rowcount or 0
