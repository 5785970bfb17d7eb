"""Initial schema for preference scoring.

Creates:
- catalog_targets: read-only mirror of listing/event tags (owned by the catalog)
- interaction_events: append-only user-target interaction log
- pending_deltas: outbox of preference deltas awaiting ledger application
- preference_scores: per-user, per-tag running scores
- ratings: one star rating per (user, target)
- trip_items: targets added to trips

Revision ID: 001
Revises:
Create Date: 2026-10-16
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 1. catalog_targets
    op.create_table(
        "catalog_targets",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.Text),
        sa.Column("category", sa.String(100)),
        sa.Column("tags", JSONB, server_default=sa.text("'[]'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # 2. interaction_events
    op.create_table(
        "interaction_events",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("target_id", sa.String(64), nullable=False),
        sa.Column("parent_id", sa.String(64)),
        sa.Column("interaction_type", sa.String(20), nullable=False),
        sa.Column("weight", sa.Float, nullable=False),
        sa.Column("metadata", JSONB),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_interaction_events_user_created", "interaction_events", ["user_id", "created_at"])
    op.create_index("idx_interaction_events_target", "interaction_events", ["target_id"])

    # 3. pending_deltas
    op.create_table(
        "pending_deltas",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("target_id", sa.String(64), nullable=False),
        sa.Column("delta", sa.Float, nullable=False),
        sa.Column("source", sa.String(20), nullable=False),
        sa.Column("source_id", sa.String(64)),
        sa.Column("attempts", sa.Integer, server_default=sa.text("0"), nullable=False),
        sa.Column("last_error", sa.Text),
        sa.Column("applied_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_pending_deltas_unapplied", "pending_deltas", ["applied_at", "created_at"])
    op.create_index("idx_pending_deltas_user", "pending_deltas", ["user_id"])

    # 4. preference_scores
    op.create_table(
        "preference_scores",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("tag", sa.String(100), nullable=False),
        sa.Column("score", sa.Float, server_default=sa.text("0"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "tag", name="uq_preference_scores_user_tag"),
    )
    op.create_index("ix_preference_scores_user_id", "preference_scores", ["user_id"])

    # 5. ratings
    op.create_table(
        "ratings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("target_id", sa.String(64), nullable=False),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text),
        sa.Column("trip_id", sa.String(64)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "target_id", name="uq_ratings_user_target"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_rating_range"),
    )
    op.create_index("ix_ratings_user_id", "ratings", ["user_id"])
    op.create_index("ix_ratings_target_id", "ratings", ["target_id"])

    # 6. trip_items
    op.create_table(
        "trip_items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("target_id", sa.String(64), nullable=False),
        sa.Column("trip_id", sa.String(64), server_default="", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "target_id", "trip_id", name="uq_trip_items_user_target_trip"),
    )
    op.create_index("ix_trip_items_user_id", "trip_items", ["user_id"])


def downgrade() -> None:
    op.drop_table("trip_items")
    op.drop_table("ratings")
    op.drop_table("preference_scores")
    op.drop_table("pending_deltas")
    op.drop_table("interaction_events")
    op.drop_table("catalog_targets")
