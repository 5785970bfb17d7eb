"""Interaction event model — immutable record of every user-target action."""

from sqlalchemy import Column, String, Float, DateTime, Index, func

from tripsignals.models.base import Base, JSONType, UUIDMixin


class InteractionEvent(UUIDMixin, Base):
    __tablename__ = "interaction_events"

    user_id = Column(String(64), nullable=False)
    target_id = Column(String(64), nullable=False)
    parent_id = Column(String(64))  # e.g. the property a listing belongs to
    interaction_type = Column(String(20), nullable=False)  # view, save, book, swipe_left, swipe_right, click, share, message
    weight = Column(Float, nullable=False)
    extra_data = Column("metadata", JSONType)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_interaction_events_user_created", "user_id", "created_at"),
        Index("idx_interaction_events_target", "target_id"),
    )
