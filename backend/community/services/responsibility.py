from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlmodel import Session

from community.core.errors import AlreadyResponsibleError, NotFoundError, RoleNotAllowedError
from community.models import EntityKind, Relationship, Role
from community.services import ledger, relationships
from community.services.outbox import Transition
from community.services.permissions import ensure_admin

logger = logging.getLogger(__name__)

RESPONSIBLE_FOR = (EntityKind.EVENT, EntityKind.PROJECT)


def add_responsible_organization(
    session: Session,
    actor_id: Optional[UUID],
    target_kind: str,
    target_id: UUID,
    organization_id: UUID,
) -> Relationship:
    if target_kind not in RESPONSIBLE_FOR:
        raise RoleNotAllowedError(role=Role.RESPONSIBLE_ORGANIZATION, entity_kind=target_kind)
    target = ledger.get_entity(session, target_kind, target_id, for_update=True)
    organization = ledger.get_entity(session, EntityKind.ORGANIZATION, organization_id)
    ensure_admin(session, actor_id, target)

    existing = ledger.get_relationship(
        session, organization.id, target.id, Role.RESPONSIBLE_ORGANIZATION
    )
    if existing is not None:
        raise AlreadyResponsibleError(entity_id=target.id, relationship_id=existing.id)

    relationship = relationships.grant(
        session, organization, target, Role.RESPONSIBLE_ORGANIZATION, actor_id
    )
    relationships.notify_counterparty(
        session, relationship, Transition.ADDED, actor_id=actor_id, subject_acted=False
    )
    logger.info(f"Organization {organization.id} responsible for {target_kind} {target.id}")
    return relationship


def remove_responsible_organization(
    session: Session,
    actor_id: Optional[UUID],
    target_kind: str,
    target_id: UUID,
    organization_id: UUID,
) -> Relationship:
    target = ledger.get_entity(session, target_kind, target_id, for_update=True)
    ensure_admin(session, actor_id, target)
    relationship = ledger.get_relationship(
        session, organization_id, target.id, Role.RESPONSIBLE_ORGANIZATION
    )
    if relationship is None:
        raise NotFoundError(entity_id=target.id, subject_id=organization_id)
    relationships.notify_counterparty(
        session, relationship, Transition.REMOVED, actor_id=actor_id, subject_acted=False
    )
    ledger.delete_relationship(session, relationship)
    logger.info(f"Organization {organization_id} no longer responsible for {target.id}")
    return relationship


def responsible_organizations(session: Session, target_id: UUID) -> List[Relationship]:
    return ledger.list_relationships(
        session, object_id=target_id, role=Role.RESPONSIBLE_ORGANIZATION
    )
