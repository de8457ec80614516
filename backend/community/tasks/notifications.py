"""Celery tasks for notifications."""

from __future__ import annotations

import logging

from sqlmodel import Session

from community.celery_app import celery_app
from community.db import engine
from community.services.outbox import LoggingDispatcher, relay_pending

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60)
def relay_outbox_task(self) -> dict:
    """Deliver queued relationship notifications.

    Per-row delivery failures are recorded on the outbox row itself; the
    task only retries when the relay as a whole fails (database down).
    """
    try:
        with Session(engine) as session:
            delivered = relay_pending(session, LoggingDispatcher())
            session.commit()
        return {"success": True, "delivered": delivered}
    except Exception as exc:
        logger.error(f"Error relaying notification outbox: {exc}", exc_info=True)
        raise self.retry(exc=exc)
