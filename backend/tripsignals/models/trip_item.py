"""Trip item model — targets a user added to a trip."""

from sqlalchemy import Column, String, UniqueConstraint

from tripsignals.models.base import Base, TimestampMixin, UUIDMixin


class TripItem(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "trip_items"

    user_id = Column(String(64), nullable=False, index=True)
    target_id = Column(String(64), nullable=False)
    trip_id = Column(String(64), nullable=False, default="", server_default="")  # "" when not tied to a trip

    __table_args__ = (
        UniqueConstraint("user_id", "target_id", "trip_id", name="uq_trip_items_user_target_trip"),
    )
