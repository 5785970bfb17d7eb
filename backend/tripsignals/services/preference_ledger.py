"""Preference ledger — per-user, per-tag scores mutated by additive deltas only."""

import logging
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from tripsignals.models.preference_score import PreferenceScore
from tripsignals.models.upsert import upsert_insert

logger = logging.getLogger(__name__)


class PreferenceLedger:
    """Sole writer of ``preference_scores``.

    Scores are combined with addition, so deltas may land in any order and
    from any number of concurrent workers. Methods do not commit; the caller
    owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def apply_delta(self, user_id: str, tags, delta: float) -> int:
        """Add ``delta`` to the score of every distinct tag for ``user_id``.

        A single INSERT ... ON CONFLICT DO UPDATE SET score = score + delta,
        so concurrent deltas for the same key are never lost. Rows are touched
        in sorted tag order. Returns the number of tags updated.
        """
        distinct_tags = sorted({t.strip() for t in tags or [] if t and t.strip()})
        if not distinct_tags or not delta:
            return 0

        stmt = upsert_insert(self.db, PreferenceScore).values([
            {"id": uuid.uuid4(), "user_id": user_id, "tag": tag, "score": float(delta)}
            for tag in distinct_tags
        ])
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "tag"],
            set_={
                "score": PreferenceScore.score + stmt.excluded.score,
                "updated_at": func.now(),
            },
        )
        self.db.execute(stmt)
        logger.debug("Applied delta %+.2f to %d tags for user %s", delta, len(distinct_tags), user_id)
        return len(distinct_tags)

    def read(self, user_id: str) -> dict[str, float]:
        """Return the user's scores keyed by tag."""
        rows = self.db.execute(
            select(PreferenceScore.tag, PreferenceScore.score).where(PreferenceScore.user_id == user_id)
        ).all()
        return {tag: score for tag, score in rows}

    def erase(self, user_id: str) -> int:
        """Remove every score for a user (privacy erasure). Irreversible."""
        result = self.db.execute(
            delete(PreferenceScore).where(PreferenceScore.user_id == user_id)
        )
        return result.rowcount or 0
