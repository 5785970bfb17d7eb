"""Catalog lookup — resolves a target's tags for preference scoring."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from tripsignals.errors import NotFound
from tripsignals.models.catalog_target import CatalogTarget


def target_tags(target: CatalogTarget) -> list[str]:
    """Tags of a target as strings, falling back to its category.

    The tags column is written by the catalog service and may hold non-string values.
    """
    tags = [str(t).strip() for t in (target.tags or []) if t is not None and str(t).strip()]
    if tags:
        return tags
    category = str(target.category).strip() if target.category is not None else ""
    return [category] if category else []


class CatalogLookup:
    """Read-only access to ``catalog_targets``."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, target_id: str) -> CatalogTarget:
        target = self.db.execute(
            select(CatalogTarget).where(CatalogTarget.id == target_id)
        ).scalar_one_or_none()
        if target is None:
            raise NotFound(f"Catalog target {target_id} not found")
        return target

    def tags_for(self, target_id: str) -> list[str]:
        return target_tags(self.get(target_id))
