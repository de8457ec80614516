"""Event capacity and waiting list.

Capacity checks run while the event row is locked (``for_update``, or the
immediate write transaction on SQLite), so concurrent admissions to the
same event are serialized and cannot overbook it.
"""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlmodel import Session

from community.core.errors import (
    AlreadyParticipantError,
    AlreadyWaitingError,
    CapacityExceededError,
    ForbiddenError,
    InvalidValueError,
    NotFoundError,
)
from community.models import AuditAction, EntityKind, Event, Relationship, Role
from community.services import audit, ledger, relationships
from community.services.outbox import Transition
from community.services.permissions import ensure_admin, is_admin

logger = logging.getLogger(__name__)


def _load(session: Session, actor_id: Optional[UUID], event_id: UUID, person_id: UUID):
    event = ledger.get_entity(session, EntityKind.EVENT, event_id, for_update=True)
    person = ledger.get_entity(session, EntityKind.PERSON, person_id)
    if actor_id != person.id and not is_admin(session, actor_id, event):
        raise ForbiddenError(entity_id=event.id, actor_id=actor_id)
    return event, person


def participant_count(session: Session, event_id: UUID) -> int:
    return ledger.count_active(session, event_id, Role.PARTICIPANT)


def waiting_count(session: Session, event_id: UUID) -> int:
    return ledger.count_active(session, event_id, Role.WAITING_LIST_ENTRANT)


def has_capacity(session: Session, event: Event) -> bool:
    if event.participant_limit is None:
        return True
    return participant_count(session, event.id) < event.participant_limit


def add_participant(
    session: Session,
    actor_id: Optional[UUID],
    event_id: UUID,
    person_id: UUID,
) -> Relationship:
    """Admit a person, either themself or added by an event admin."""
    event, person = _load(session, actor_id, event_id, person_id)

    existing = ledger.get_relationship(session, person.id, event.id, Role.PARTICIPANT)
    if existing is not None:
        raise AlreadyParticipantError(entity_id=event.id, relationship_id=existing.id)
    if not has_capacity(session, event):
        logger.info(
            f"Event {event.id} is full ({event.participant_limit}), "
            f"rejecting participant {person.id}"
        )
        raise CapacityExceededError(
            entity_id=event.id,
            participant_limit=event.participant_limit,
            participant_count=participant_count(session, event.id),
        )

    waiting = ledger.get_relationship(session, person.id, event.id, Role.WAITING_LIST_ENTRANT)
    if waiting is not None:
        ledger.delete_relationship(session, waiting)

    relationship = relationships.grant(session, person, event, Role.PARTICIPANT, actor_id)
    subject_acted = actor_id == person.id
    relationships.notify_counterparty(
        session,
        relationship,
        Transition.JOINED if subject_acted else Transition.ADDED,
        actor_id=actor_id,
        subject_acted=subject_acted,
    )
    logger.info(f"{person.id} is now participant of event {event.id}")
    return relationship


def add_to_waiting_list(
    session: Session,
    actor_id: Optional[UUID],
    event_id: UUID,
    person_id: UUID,
) -> Relationship:
    event, person = _load(session, actor_id, event_id, person_id)

    participant = ledger.get_relationship(session, person.id, event.id, Role.PARTICIPANT)
    if participant is not None:
        raise AlreadyParticipantError(entity_id=event.id, relationship_id=participant.id)
    waiting = ledger.get_relationship(session, person.id, event.id, Role.WAITING_LIST_ENTRANT)
    if waiting is not None:
        raise AlreadyWaitingError(entity_id=event.id, relationship_id=waiting.id)

    relationship = relationships.grant(
        session, person, event, Role.WAITING_LIST_ENTRANT, actor_id
    )
    subject_acted = actor_id == person.id
    relationships.notify_counterparty(
        session,
        relationship,
        Transition.JOINED if subject_acted else Transition.ADDED,
        actor_id=actor_id,
        subject_acted=subject_acted,
    )
    logger.info(f"{person.id} joined waiting list of event {event.id}")
    return relationship


def promote(
    session: Session,
    actor_id: Optional[UUID],
    event_id: UUID,
    person_id: UUID,
) -> Relationship:
    """Move a person from the waiting list to the participants.

    Manual promotion is an admin override and ignores the participant limit.
    """
    event = ledger.get_entity(session, EntityKind.EVENT, event_id, for_update=True)
    ensure_admin(session, actor_id, event)
    person = ledger.get_entity(session, EntityKind.PERSON, person_id)

    waiting = ledger.get_relationship(session, person.id, event.id, Role.WAITING_LIST_ENTRANT)
    if waiting is None:
        raise NotFoundError(entity_id=event.id, subject_id=person.id, role=Role.WAITING_LIST_ENTRANT)
    participant = ledger.get_relationship(session, person.id, event.id, Role.PARTICIPANT)
    if participant is not None:
        raise AlreadyParticipantError(entity_id=event.id, relationship_id=participant.id)

    ledger.delete_relationship(session, waiting)
    relationship = relationships.grant(session, person, event, Role.PARTICIPANT, actor_id)
    relationships.notify_counterparty(
        session,
        relationship,
        Transition.PROMOTED,
        actor_id=actor_id,
        subject_acted=False,
        extra={"event_slug": event.slug, "event_name": event.name},
    )
    count = participant_count(session, event.id)
    if event.participant_limit is not None and count > event.participant_limit:
        logger.info(
            f"Promotion of {person.id} puts event {event.id} over its limit "
            f"({count}/{event.participant_limit})"
        )
    logger.info(f"{actor_id} promoted {person.id} from waiting list of event {event.id}")
    return relationship


def remove_participant(
    session: Session, actor_id: Optional[UUID], event_id: UUID, person_id: UUID
) -> Relationship:
    return relationships.remove(
        session,
        actor_id,
        subject_id=person_id,
        object_kind=EntityKind.EVENT,
        object_id=event_id,
        role=Role.PARTICIPANT,
    )


def remove_from_waiting_list(
    session: Session, actor_id: Optional[UUID], event_id: UUID, person_id: UUID
) -> Relationship:
    return relationships.remove(
        session,
        actor_id,
        subject_id=person_id,
        object_kind=EntityKind.EVENT,
        object_id=event_id,
        role=Role.WAITING_LIST_ENTRANT,
    )


def set_participant_limit(
    session: Session,
    actor_id: Optional[UUID],
    event_id: UUID,
    participant_limit: Optional[int],
) -> Event:
    """Change the limit; lowering it below the current count never demotes anyone."""
    event = ledger.get_entity(session, EntityKind.EVENT, event_id, for_update=True)
    ensure_admin(session, actor_id, event)
    if participant_limit is not None and participant_limit < 0:
        raise InvalidValueError(entity_id=event.id, participant_limit=participant_limit)

    previous = event.participant_limit
    event.participant_limit = participant_limit
    event.touch()
    session.add(event)
    audit.record(
        session,
        entity_id=event.id,
        actor_id=actor_id,
        action=AuditAction.PARTICIPANT_LIMIT_CHANGED,
        field_name="participant_limit",
        old_value=previous,
        new_value=participant_limit,
    )
    session.flush()
    count = participant_count(session, event.id)
    if participant_limit is not None and count > participant_limit:
        logger.info(
            f"Event {event.id} limit lowered to {participant_limit} below "
            f"{count} participants; new admissions blocked until attrition"
        )
    return event


def waiting_list(session: Session, event_id: UUID) -> List[Relationship]:
    """Waiting list entries, oldest request first."""
    return ledger.list_relationships(
        session, object_id=event_id, role=Role.WAITING_LIST_ENTRANT
    )


def participants(session: Session, event_id: UUID) -> List[Relationship]:
    return ledger.list_relationships(session, object_id=event_id, role=Role.PARTICIPANT)
