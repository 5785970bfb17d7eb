"""Preference score model — running per-user, per-tag score."""

from sqlalchemy import Column, String, Float, UniqueConstraint

from tripsignals.models.base import Base, TimestampMixin, UUIDMixin


class PreferenceScore(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "preference_scores"

    user_id = Column(String(64), nullable=False, index=True)
    tag = Column(String(100), nullable=False)
    score = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        UniqueConstraint("user_id", "tag", name="uq_preference_scores_user_tag"),
    )
