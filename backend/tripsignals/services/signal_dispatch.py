"""Fire-and-forget hand-off of pending preference deltas to the signal worker."""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

Dispatcher = Callable[[str], None]


def celery_dispatch(delta_id: str) -> None:
    """Queue the Celery task that applies a pending delta to the ledger."""
    from tripsignals.tasks.signal_tasks import apply_pending_delta
    apply_pending_delta.delay(str(delta_id))


def fire(dispatch: Dispatcher, delta_id) -> bool:
    """Run ``dispatch`` for a delta; failures are logged, never raised.

    The delta row stays unapplied on failure and is picked up by the replay task.
    """
    try:
        dispatch(str(delta_id))
        return True
    except Exception:
        logger.exception("Failed to dispatch pending delta %s; left for replay", delta_id)
        return False
