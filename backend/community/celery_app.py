"""Celery application configuration."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import Celery

from community.core.config import settings

logger = logging.getLogger(__name__)

celery_app = Celery(
    "community",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["community.tasks.notifications"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    broker_connection_retry_on_startup=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_default_retry_delay=60,
    task_max_retries=5,
    task_retry_backoff=True,
    task_retry_backoff_max=600,
    task_retry_jitter=True,
    result_expires=3600,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=500,
)

# Periodic tasks
celery_app.conf.beat_schedule = {
    "relay-notification-outbox": {
        "task": "community.tasks.notifications.relay_outbox_task",
        "schedule": timedelta(seconds=settings.OUTBOX_RELAY_INTERVAL_SECONDS),
    },
}

logger.info(f"Celery app configured with broker: {settings.CELERY_BROKER_URL}")
