"""Rating model — one star rating per (user, target) pair."""

from sqlalchemy import Column, String, Integer, Text, CheckConstraint, UniqueConstraint

from tripsignals.models.base import Base, TimestampMixin, UUIDMixin


class Rating(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "ratings"

    user_id = Column(String(64), nullable=False, index=True)
    target_id = Column(String(64), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    trip_id = Column(String(64))

    __table_args__ = (
        UniqueConstraint("user_id", "target_id", name="uq_ratings_user_target"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_rating_range"),
    )
