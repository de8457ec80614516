"""Parent/child links between events.

Linking or unlinking requires the actor to administer both events, and a
child's time period must lie within its parent's.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlmodel import Session, select

from community.core.errors import HierarchyCycleError, NotFoundError, TimeframeViolationError
from community.models import AuditAction, EntityKind, Event
from community.services import audit, ledger
from community.services.permissions import ensure_admin

logger = logging.getLogger(__name__)


def contains(parent: Event, start_time: datetime, end_time: datetime) -> bool:
    return start_time >= parent.start_time and end_time <= parent.end_time


def children_of(session: Session, event_id: UUID) -> List[Event]:
    return list(
        session.exec(
            select(Event)
            .where(Event.parent_event_id == event_id)
            .order_by(Event.start_time.asc(), Event.id.asc())
        ).all()
    )


def _is_ancestor(session: Session, candidate_id: UUID, event: Event) -> bool:
    seen = set()
    current: Optional[Event] = event
    while current is not None and current.id not in seen:
        if current.id == candidate_id:
            return True
        seen.add(current.id)
        current = session.get(Event, current.parent_event_id) if current.parent_event_id else None
    return False


def validate_timeframe(
    session: Session,
    event: Event,
    start_time: datetime,
    end_time: datetime,
) -> None:
    """Check a new time period of ``event`` against its parent and its children."""
    if end_time < start_time:
        raise TimeframeViolationError(entity_id=event.id, reason="end_before_start")
    if event.parent_event_id is not None:
        parent = session.get(Event, event.parent_event_id)
        if parent is not None and not contains(parent, start_time, end_time):
            raise TimeframeViolationError(
                entity_id=event.id, reason="outside_parent", parent_id=parent.id
            )
    for child in children_of(session, event.id):
        if child.start_time < start_time or child.end_time > end_time:
            raise TimeframeViolationError(
                entity_id=event.id, reason="child_outside", child_id=child.id
            )


def set_parent(
    session: Session,
    actor_id: Optional[UUID],
    child_id: UUID,
    parent_id: UUID,
) -> Event:
    child = ledger.get_entity(session, EntityKind.EVENT, child_id, for_update=True)
    parent = ledger.get_entity(session, EntityKind.EVENT, parent_id, for_update=True)
    ensure_admin(session, actor_id, child)
    ensure_admin(session, actor_id, parent)

    if _is_ancestor(session, child.id, parent):
        raise HierarchyCycleError(entity_id=child.id, parent_id=parent.id)
    if not contains(parent, child.start_time, child.end_time):
        raise TimeframeViolationError(
            entity_id=child.id, reason="outside_parent", parent_id=parent.id
        )

    previous_id = child.parent_event_id
    if previous_id == parent.id:
        return child
    if previous_id is not None:
        audit.record(
            session,
            entity_id=child.id,
            actor_id=actor_id,
            action=AuditAction.PARENT_DETACHED,
            field_name="parent_event_id",
            old_value=previous_id,
            new_value=parent.id,
        )
    child.parent_event_id = parent.id
    child.touch()
    session.add(child)
    audit.record(
        session,
        entity_id=child.id,
        actor_id=actor_id,
        action=AuditAction.PARENT_SET,
        field_name="parent_event_id",
        old_value=previous_id,
        new_value=parent.id,
    )
    session.flush()
    logger.info(f"Event {child.id} linked to parent {parent.id} by {actor_id}")
    return child


def add_child(
    session: Session,
    actor_id: Optional[UUID],
    parent_id: UUID,
    child_id: UUID,
) -> Event:
    return set_parent(session, actor_id, child_id, parent_id)


def remove_parent(session: Session, actor_id: Optional[UUID], child_id: UUID) -> Event:
    child = ledger.get_entity(session, EntityKind.EVENT, child_id, for_update=True)
    ensure_admin(session, actor_id, child)
    if child.parent_event_id is None:
        raise NotFoundError(entity_id=child.id, link="parent_event")
    parent = ledger.get_entity(session, EntityKind.EVENT, child.parent_event_id, for_update=True)
    ensure_admin(session, actor_id, parent)

    child.parent_event_id = None
    child.touch()
    session.add(child)
    audit.record(
        session,
        entity_id=child.id,
        actor_id=actor_id,
        action=AuditAction.PARENT_REMOVED,
        field_name="parent_event_id",
        old_value=parent.id,
    )
    session.flush()
    logger.info(f"Event {child.id} unlinked from parent {parent.id} by {actor_id}")
    return child


def remove_child(
    session: Session,
    actor_id: Optional[UUID],
    parent_id: UUID,
    child_id: UUID,
) -> Event:
    child = ledger.get_entity(session, EntityKind.EVENT, child_id)
    if child.parent_event_id != parent_id:
        raise NotFoundError(entity_id=child_id, parent_id=parent_id, link="parent_event")
    return remove_parent(session, actor_id, child_id)
