"""Dialect-aware INSERT ... ON CONFLICT constructor."""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def upsert_insert(db: Session, model):
    """Return an INSERT for ``model`` that supports ``on_conflict_do_update``.

    PostgreSQL in production, SQLite in tests; both share the same API.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upsert not supported for dialect {dialect!r}")
