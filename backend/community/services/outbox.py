"""Transactional notification outbox.

Transitions enqueue their notification through the caller's session, so
the row is committed or rolled back together with the ledger change. A
relay (Celery beat, see ``community.tasks.notifications``) hands committed
rows to the dispatcher.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Protocol
from uuid import UUID

from sqlmodel import Session, select

from community.core.config import settings
from community.models import NotificationOutbox, Relationship

logger = logging.getLogger(__name__)


class Transition:
    REQUESTED = "requested"
    INVITED = "invited"
    ADDED = "added"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELED = "canceled"
    REMOVED = "removed"
    LEFT = "left"
    JOINED = "joined"
    PROMOTED = "promoted"


class NotificationDispatcher(Protocol):
    def send(self, notification: NotificationOutbox) -> None:
        ...


class LoggingDispatcher:
    """Default dispatcher; delivery channels (mail, push) plug in here."""

    def send(self, notification: NotificationOutbox) -> None:
        logger.info(
            f"[Notification] {notification.kind} for {notification.recipient_kind} "
            f"{notification.recipient_id}: {notification.payload}"
        )


def dedupe_key(relationship_id: UUID, transition: str) -> str:
    return f"{relationship_id}:{transition}"


def enqueue(
    session: Session,
    *,
    relationship: Relationship,
    transition: str,
    recipient_id: UUID,
    recipient_kind: str,
    actor_id: Optional[UUID] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Optional[NotificationOutbox]:
    """Queue the notification for a transition once; repeated calls are no-ops."""
    key = dedupe_key(relationship.id, transition)
    existing = session.exec(
        select(NotificationOutbox).where(NotificationOutbox.dedupe_key == key)
    ).one_or_none()
    if existing is not None:
        logger.debug(f"Notification {key} already queued")
        return None

    payload: Dict[str, Any] = {
        "relationship_id": str(relationship.id),
        "subject_id": str(relationship.subject_id),
        "subject_kind": relationship.subject_kind,
        "object_id": str(relationship.object_id),
        "object_kind": relationship.object_kind,
        "role": relationship.role,
        "actor_id": str(actor_id) if actor_id else None,
    }
    if extra:
        payload.update(extra)

    notification = NotificationOutbox(
        dedupe_key=key,
        recipient_id=recipient_id,
        recipient_kind=recipient_kind,
        kind=f"{relationship.role}_{transition}",
        payload=payload,
    )
    session.add(notification)
    logger.info(f"Queued notification {key} for {recipient_kind} {recipient_id}")
    return notification


def pending(session: Session, limit: int) -> list[NotificationOutbox]:
    return list(
        session.exec(
            select(NotificationOutbox)
            .where(
                NotificationOutbox.dispatched_at.is_(None),
                NotificationOutbox.failed.is_(False),
            )
            .order_by(NotificationOutbox.created_at.asc())
            .limit(limit)
        ).all()
    )


def relay_pending(
    session: Session,
    dispatcher: NotificationDispatcher,
    *,
    batch_size: Optional[int] = None,
    max_attempts: Optional[int] = None,
) -> int:
    """Hand undispatched notifications to the dispatcher; returns the number delivered.

    The caller commits. Dispatch failures are recorded on the row and
    retried on the next run until ``max_attempts`` is reached.
    """
    batch_size = batch_size or settings.OUTBOX_BATCH_SIZE
    max_attempts = max_attempts or settings.OUTBOX_MAX_ATTEMPTS
    delivered = 0
    for notification in pending(session, batch_size):
        notification.attempts += 1
        try:
            dispatcher.send(notification)
        except Exception as exc:
            notification.last_error = str(exc)[:1000]
            if notification.attempts >= max_attempts:
                notification.failed = True
                logger.error(
                    f"Giving up on notification {notification.dedupe_key} "
                    f"after {notification.attempts} attempts: {exc}",
                    exc_info=True,
                )
            else:
                logger.warning(
                    f"Dispatch of notification {notification.dedupe_key} failed "
                    f"(attempt {notification.attempts}): {exc}"
                )
        else:
            notification.dispatched_at = datetime.utcnow()
            notification.last_error = None
            delivered += 1
        session.add(notification)
    session.flush()
    if delivered:
        logger.info(f"Relayed {delivered} notification(s)")
    return delivered
