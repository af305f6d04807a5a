"""Periodic sweep of expired tokens, sessions and abandoned accounts.

Lookups already reject expired rows, so the sweep only keeps the tables
small. It runs on an APScheduler thread with its own database session.
"""

import logging
from collections.abc import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from greenpoll.config import get_settings
from greenpoll.database import SessionLocal
from greenpoll.errors import ServiceError
from greenpoll.services.password_reset import get_password_reset_service
from greenpoll.services.session import get_session_service
from greenpoll.services.user import get_user_service
from greenpoll.services.verification import get_verification_service

logger = logging.getLogger("greenpoll")

# Overridden in tests to point the sweep at the test database.
_session_factory: Callable[[], Session] | None = None

_scheduler: BackgroundScheduler | None = None


def prune_all(db: Session) -> dict[str, int]:
    """Delete every expired or stale record. Returns row counts per kind."""
    return {
        "verifications": get_verification_service().prune(db),
        "password_resets": get_password_reset_service().prune(db),
        "sessions": get_session_service().prune_sessions(db),
        "unverified_users": get_user_service().prune_unverified_users(db),
    }


def prune_job() -> None:
    """Scheduler entry point."""
    factory = _session_factory or SessionLocal
    db = factory()
    try:
        counts = prune_all(db)
        logger.debug("Prune sweep finished: %s", counts)
    except ServiceError as e:
        logger.error("Prune sweep failed: %s", e.message)
    finally:
        db.close()


def get_scheduler() -> BackgroundScheduler:
    """Get the global scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = BackgroundScheduler(timezone="UTC")
    return _scheduler


def start_scheduler() -> None:
    """Start the prune sweep if an interval is configured."""
    interval = get_settings().PRUNE_INTERVAL_SECONDS
    if interval <= 0:
        logger.info("Prune sweep disabled")
        return

    scheduler = get_scheduler()
    if scheduler.running:
        return

    scheduler.add_job(
        prune_job,
        trigger=IntervalTrigger(seconds=interval),
        id="prune",
        name="Prune expired records",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info("Prune sweep scheduled every %ds", interval)


def stop_scheduler() -> None:
    """Stop the scheduler if it is running."""
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
    _scheduler = None
