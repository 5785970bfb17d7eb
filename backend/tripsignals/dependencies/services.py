"""Service wiring for FastAPI routes — overridable in tests."""

from fastapi import Depends
from sqlalchemy.orm import Session

from tripsignals.config import get_settings
from tripsignals.models.base import get_db
from tripsignals.services.interaction_recorder import InteractionRecorder
from tripsignals.services.preference_ledger import PreferenceLedger
from tripsignals.services.rating_reconciler import RatingReconciler
from tripsignals.services.recommendation_gateway import RecommendationGateway
from tripsignals.services.signal_dispatch import Dispatcher, celery_dispatch
from tripsignals.services.trip_service import TripService


def get_dispatcher() -> Dispatcher:
    return celery_dispatch


def get_gateway() -> RecommendationGateway:
    return RecommendationGateway()


def get_recorder(
    db: Session = Depends(get_db),
    dispatch: Dispatcher = Depends(get_dispatcher),
) -> InteractionRecorder:
    return InteractionRecorder(db, dispatch)


def get_reconciler(
    db: Session = Depends(get_db),
    dispatch: Dispatcher = Depends(get_dispatcher),
) -> RatingReconciler:
    return RatingReconciler(db, dispatch, rating_weight=get_settings().rating_weight)


def get_ledger(db: Session = Depends(get_db)) -> PreferenceLedger:
    return PreferenceLedger(db)


def get_trip_service(
    db: Session = Depends(get_db),
    dispatch: Dispatcher = Depends(get_dispatcher),
) -> TripService:
    return TripService(db, dispatch)


def celery_notify(user_id: str, target_id: str, kind: str, context: str, metadata: dict | None = None) -> None:
    """Queue a recommendation feedback notification."""
    from tripsignals.tasks.signal_tasks import notify_recommendation_engine
    notify_recommendation_engine.delay(user_id, target_id, kind, context, metadata)


def get_notifier():
    return celery_notify
