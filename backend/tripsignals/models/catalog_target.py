"""Catalog target model — listings and events, owned by the catalog service.

Read-only from this service's point of view; only the tag columns are used.
"""

from sqlalchemy import Column, String, Text

from tripsignals.models.base import Base, JSONType, TimestampMixin


class CatalogTarget(TimestampMixin, Base):
    __tablename__ = "catalog_targets"

    id = Column(String(64), primary_key=True)
    title = Column(Text)
    category = Column(String(100))
    tags = Column(JSONType, default=list)
