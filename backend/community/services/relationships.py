"""Relationship lifecycle: request, invite, add, accept, decline, remove.

Each entry point loads and locks the object entity, authorizes the actor,
validates every business rule and only then writes the ledger row and
queues its notification. Nothing is committed here; the request handler
commits once so that the edge and the outbox row share a transaction.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Type
from uuid import UUID

from sqlmodel import Session

from community.core.errors import (
    AlreadyMemberError,
    DomainError,
    DuplicatePendingError,
    InvalidTransitionError,
    LastAdminError,
    LastTeamMemberError,
    NotFoundError,
    RoleNotAllowedError,
)
from community.models import EntityKind, Relationship, RelationshipState, Role, kind_of
from community.services import ledger, outbox
from community.services.outbox import Transition
from community.services.permissions import acts_for, ensure_acts_for, ensure_admin
from community.services.policy import RolePolicy, get_policy, subject_kind_for

logger = logging.getLogger(__name__)

# Roles that must keep at least one Active holder per object kind
ROLE_FLOORS: Dict[str, Dict[str, Type[DomainError]]] = {
    EntityKind.ORGANIZATION: {Role.ADMIN: LastAdminError},
    EntityKind.EVENT: {Role.ADMIN: LastAdminError, Role.TEAM_MEMBER: LastTeamMemberError},
    EntityKind.PROJECT: {Role.ADMIN: LastAdminError, Role.TEAM_MEMBER: LastTeamMemberError},
}


def _load_pair(
    session: Session,
    *,
    subject_id: UUID,
    object_kind: str,
    object_id: UUID,
    role: str,
):
    obj = ledger.get_entity(session, object_kind, object_id, for_update=True)
    subject = ledger.get_entity(session, subject_kind_for(role), subject_id)
    return subject, obj


def _check_pair(subject, obj, role: str) -> None:
    if role == Role.NETWORK_MEMBER and (not obj.is_network or subject.id == obj.id):
        raise RoleNotAllowedError(entity_id=obj.id, role=role, subject_id=subject.id)


def _policy_or_raise(obj, role: str) -> RolePolicy:
    policy = get_policy(kind_of(obj), role)
    if policy is None:
        raise RoleNotAllowedError(entity_id=obj.id, role=role)
    return policy


def _ensure_no_edge(session: Session, subject_id: UUID, obj, role: str) -> None:
    existing = ledger.get_relationship(session, subject_id, obj.id, role)
    if existing is None:
        return
    if existing.is_pending:
        raise DuplicatePendingError(
            entity_id=obj.id, relationship_id=existing.id, state=existing.state, role=role
        )
    raise AlreadyMemberError(entity_id=obj.id, relationship_id=existing.id, role=role)


def _new_edge(subject, obj, role: str, state: str, actor_id: UUID) -> Relationship:
    relationship = Relationship(
        subject_id=subject.id,
        subject_kind=kind_of(subject),
        object_id=obj.id,
        object_kind=kind_of(obj),
        role=role,
        state=state,
        created_by_id=actor_id,
    )
    if state == RelationshipState.ACTIVE:
        relationship.activate()
    return relationship


def notify_counterparty(
    session: Session,
    relationship: Relationship,
    transition: str,
    *,
    actor_id: Optional[UUID],
    subject_acted: bool,
    extra: Optional[dict] = None,
) -> None:
    """Queue the notification for whichever side did not perform the transition."""
    if subject_acted:
        recipient_id, recipient_kind = relationship.object_id, relationship.object_kind
    else:
        recipient_id, recipient_kind = relationship.subject_id, relationship.subject_kind
    outbox.enqueue(
        session,
        relationship=relationship,
        transition=transition,
        recipient_id=recipient_id,
        recipient_kind=recipient_kind,
        actor_id=actor_id,
        extra=extra,
    )


def request(
    session: Session,
    actor_id: UUID,
    *,
    subject_id: UUID,
    object_kind: str,
    object_id: UUID,
    role: str,
) -> Relationship:
    """Subject asks to join the object in ``role``."""
    subject, obj = _load_pair(
        session, subject_id=subject_id, object_kind=object_kind, object_id=object_id, role=role
    )
    ensure_acts_for(session, actor_id, subject)
    if not _policy_or_raise(obj, role).requestable:
        raise RoleNotAllowedError(entity_id=obj.id, role=role, path="request")
    _check_pair(subject, obj, role)
    _ensure_no_edge(session, subject.id, obj, role)

    relationship = ledger.upsert_relationship(
        session, _new_edge(subject, obj, role, RelationshipState.REQUESTED, actor_id)
    )
    notify_counterparty(
        session, relationship, Transition.REQUESTED, actor_id=actor_id, subject_acted=True
    )
    logger.info(f"{subject.id} requested {role} of {object_kind} {obj.id} ({relationship.id})")
    return relationship


def invite(
    session: Session,
    actor_id: UUID,
    *,
    subject_id: UUID,
    object_kind: str,
    object_id: UUID,
    role: str,
) -> Relationship:
    """An admin of the object offers ``role`` to the subject."""
    subject, obj = _load_pair(
        session, subject_id=subject_id, object_kind=object_kind, object_id=object_id, role=role
    )
    ensure_admin(session, actor_id, obj)
    if not _policy_or_raise(obj, role).invitable:
        raise RoleNotAllowedError(entity_id=obj.id, role=role, path="invite")
    _check_pair(subject, obj, role)
    _ensure_no_edge(session, subject.id, obj, role)

    relationship = ledger.upsert_relationship(
        session, _new_edge(subject, obj, role, RelationshipState.INVITED, actor_id)
    )
    notify_counterparty(
        session, relationship, Transition.INVITED, actor_id=actor_id, subject_acted=False
    )
    logger.info(f"{actor_id} invited {subject.id} as {role} of {object_kind} {obj.id}")
    return relationship


def add(
    session: Session,
    actor_id: UUID,
    *,
    subject_id: UUID,
    object_kind: str,
    object_id: UUID,
    role: str,
) -> Relationship:
    """An admin of the object creates the Active edge without an invite."""
    subject, obj = _load_pair(
        session, subject_id=subject_id, object_kind=object_kind, object_id=object_id, role=role
    )
    ensure_admin(session, actor_id, obj)
    if not _policy_or_raise(obj, role).direct_add:
        raise RoleNotAllowedError(entity_id=obj.id, role=role, path="add")
    _check_pair(subject, obj, role)
    _ensure_no_edge(session, subject.id, obj, role)

    relationship = ledger.upsert_relationship(
        session, _new_edge(subject, obj, role, RelationshipState.ACTIVE, actor_id)
    )
    notify_counterparty(
        session, relationship, Transition.ADDED, actor_id=actor_id, subject_acted=False
    )
    logger.info(f"{actor_id} added {subject.id} as {role} of {object_kind} {obj.id}")
    return relationship


def grant(session: Session, subject, obj, role: str, actor_id: Optional[UUID]) -> Relationship:
    """Create an Active edge without policy or permission checks.

    Only for callers that already authorized the actor, such as entity
    creation making the creator its first admin.
    """
    return ledger.upsert_relationship(
        session, _new_edge(subject, obj, role, RelationshipState.ACTIVE, actor_id)
    )


def accept(session: Session, actor_id: UUID, relationship_id: UUID) -> Relationship:
    relationship = ledger.get_relationship_by_id(session, relationship_id)
    obj = ledger.get_entity(
        session, relationship.object_kind, relationship.object_id, for_update=True
    )
    subject = ledger.get_entity(session, relationship.subject_kind, relationship.subject_id)

    if relationship.state == RelationshipState.REQUESTED:
        ensure_admin(session, actor_id, obj)
        subject_acted = False
    elif relationship.state == RelationshipState.INVITED:
        ensure_acts_for(session, actor_id, subject)
        subject_acted = True
    else:
        raise InvalidTransitionError(
            entity_id=obj.id, relationship_id=relationship.id, state=relationship.state
        )

    relationship.activate()
    session.add(relationship)
    session.flush()
    notify_counterparty(
        session,
        relationship,
        Transition.ACCEPTED,
        actor_id=actor_id,
        subject_acted=subject_acted,
    )
    logger.info(f"{actor_id} accepted {relationship.role} relationship {relationship.id}")
    return relationship


def decline(session: Session, actor_id: UUID, relationship_id: UUID) -> Relationship:
    """Either side cancels or declines a pending request or invite."""
    relationship = ledger.get_relationship_by_id(session, relationship_id)
    obj = ledger.get_entity(
        session, relationship.object_kind, relationship.object_id, for_update=True
    )
    subject = ledger.get_entity(session, relationship.subject_kind, relationship.subject_id)

    subject_acted = acts_for(session, actor_id, subject)
    if not subject_acted:
        ensure_admin(session, actor_id, obj)
    if not relationship.is_pending:
        raise InvalidTransitionError(
            entity_id=obj.id, relationship_id=relationship.id, state=relationship.state
        )

    # Withdrawing one's own request or invite is a cancellation
    own_request = subject_acted and relationship.state == RelationshipState.REQUESTED
    own_invite = not subject_acted and relationship.state == RelationshipState.INVITED
    transition = Transition.CANCELED if own_request or own_invite else Transition.DECLINED

    notify_counterparty(
        session, relationship, transition, actor_id=actor_id, subject_acted=subject_acted
    )
    ledger.delete_relationship(session, relationship)
    logger.info(f"{actor_id} {transition} {relationship.role} relationship {relationship.id}")
    return relationship


def ensure_floor(session: Session, obj, relationship: Relationship) -> None:
    """Reject removing the last Active holder of a role the object cannot lose."""
    error = ROLE_FLOORS.get(kind_of(obj), {}).get(relationship.role)
    if error is None or not relationship.is_active:
        return
    if ledger.count_active(session, obj.id, relationship.role) <= 1:
        raise error(entity_id=obj.id, relationship_id=relationship.id)


def remove(
    session: Session,
    actor_id: UUID,
    *,
    subject_id: UUID,
    object_kind: str,
    object_id: UUID,
    role: str,
) -> Relationship:
    """End an Active relationship; admins remove others, subjects may leave."""
    obj = ledger.get_entity(session, object_kind, object_id, for_update=True)
    subject = ledger.get_entity(session, subject_kind_for(role), subject_id)

    subject_acted = acts_for(session, actor_id, subject)
    if not subject_acted:
        ensure_admin(session, actor_id, obj)

    relationship = ledger.get_relationship(session, subject.id, obj.id, role)
    if relationship is None:
        raise NotFoundError(entity_id=obj.id, subject_id=subject.id, role=role)
    if not relationship.is_active:
        raise InvalidTransitionError(
            entity_id=obj.id, relationship_id=relationship.id, state=relationship.state
        )
    ensure_floor(session, obj, relationship)

    transition = Transition.LEFT if subject_acted else Transition.REMOVED
    notify_counterparty(
        session, relationship, transition, actor_id=actor_id, subject_acted=subject_acted
    )
    ledger.delete_relationship(session, relationship)
    logger.info(f"{actor_id} removed {subject.id} as {role} of {object_kind} {obj.id}")
    return relationship


def pending_for_object(session: Session, actor_id: Optional[UUID], obj) -> list[Relationship]:
    ensure_admin(session, actor_id, obj)
    return ledger.list_relationships(
        session, object_id=obj.id, states=RelationshipState.PENDING
    )


def pending_for_person(session: Session, person_id: UUID) -> list[Relationship]:
    """Pending edges the person can act on as subject: own ones and those of organizations they administer."""
    subject_ids = [person_id] + [
        edge.object_id
        for edge in ledger.list_relationships(
            session, subject_id=person_id, role=Role.ADMIN, states=(RelationshipState.ACTIVE,)
        )
        if edge.object_kind == EntityKind.ORGANIZATION
    ]
    result: list[Relationship] = []
    for subject_id in subject_ids:
        result.extend(
            ledger.list_relationships(
                session, subject_id=subject_id, states=RelationshipState.PENDING
            )
        )
    return result
