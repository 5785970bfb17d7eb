"""Pending delta model — outbox of preference deltas awaiting ledger application.

Each row is written in the same transaction as the durable action it derives
from (interaction event, rating upsert, trip item) and is claimed exactly once
by the signal worker.
"""

from sqlalchemy import Column, String, Float, Integer, Text, DateTime, Index, func

from tripsignals.models.base import Base, UUIDMixin


class PendingDelta(UUIDMixin, Base):
    __tablename__ = "pending_deltas"

    user_id = Column(String(64), nullable=False)
    target_id = Column(String(64), nullable=False)
    delta = Column(Float, nullable=False)
    source = Column(String(20), nullable=False)  # interaction, rating, trip
    source_id = Column(String(64))
    attempts = Column(Integer, default=0, nullable=False)
    last_error = Column(Text)
    applied_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_pending_deltas_unapplied", "applied_at", "created_at"),
        Index("idx_pending_deltas_user", "user_id"),
    )
