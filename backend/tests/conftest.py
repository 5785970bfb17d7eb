"""Pytest configuration and shared fixtures."""

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from tripsignals.models.base import Base

# Import ALL models so create_all sees every table
from tripsignals.models.catalog_target import CatalogTarget
from tripsignals.models.interaction_event import InteractionEvent  # noqa: F401
from tripsignals.models.pending_delta import PendingDelta  # noqa: F401
from tripsignals.models.preference_score import PreferenceScore  # noqa: F401
from tripsignals.models.rating import Rating  # noqa: F401
from tripsignals.models.trip_item import TripItem  # noqa: F401
from tripsignals.tasks.signal_tasks import process_pending_delta


def _sqlite_engine(url: str):
    engine = create_engine(url, connect_args={"check_same_thread": False, "timeout": 30})

    # pysqlite manages transactions itself and breaks SAVEPOINT; take over BEGIN.
    @event.listens_for(engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def engine(tmp_path):
    engine = _sqlite_engine(f"sqlite:///{tmp_path / 'tripsignals.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def catalog(db):
    """Seed listings and events with known tags."""
    db.add_all([
        CatalogTarget(id="L1", title="Beach bungalow", category="stay", tags=["beach", "surf"]),
        CatalogTarget(id="L2", title="City loft", category="stay", tags=["city"]),
        CatalogTarget(id="E1", title="Jazz night", category="music", tags=["jazz", "nightlife"]),
        CatalogTarget(id="E2", title="Food market", category="food", tags=[]),
    ])
    db.commit()
    return db


class InlineDispatcher:
    """Applies pending deltas synchronously on the caller's session, like Celery eager mode."""

    def __init__(self, db, gateway=None):
        self.db = db
        self.gateway = gateway
        self.dispatched = []

    def __call__(self, delta_id):
        self.dispatched.append(delta_id)
        process_pending_delta(self.db, delta_id, self.gateway)


class RecordingDispatcher:
    """Collects delta ids without applying them."""

    def __init__(self):
        self.dispatched = []

    def __call__(self, delta_id):
        self.dispatched.append(delta_id)


class FailingDispatcher:
    def __call__(self, delta_id):
        raise ConnectionError("broker unreachable")


@pytest.fixture
def inline_dispatch(db):
    return InlineDispatcher(db)


@pytest.fixture
def recording_dispatch():
    return RecordingDispatcher()


@pytest.fixture
def failing_dispatch():
    return FailingDispatcher()
