from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlmodel import Session

from community.core.errors import ForbiddenError
from community.models import EntityKind, Role, kind_of
from community.services.ledger import has_active_role


def is_admin(session: Session, person_id: Optional[UUID], entity) -> bool:
    """Whether the person administers the entity; a person administers their own profile."""
    if person_id is None:
        return False
    if kind_of(entity) == EntityKind.PERSON:
        return entity.id == person_id
    return has_active_role(session, person_id, entity.id, (Role.ADMIN,))


def ensure_admin(session: Session, person_id: Optional[UUID], entity) -> None:
    if not is_admin(session, person_id, entity):
        raise ForbiddenError(entity_id=entity.id, actor_id=person_id, required_role=Role.ADMIN)


def acts_for(session: Session, person_id: Optional[UUID], subject) -> bool:
    """Whether the person may act on behalf of the subject of a relationship.

    A person acts for themself; for an organization subject (network
    membership, responsibility) the person must be one of its admins.
    """
    return is_admin(session, person_id, subject)


def ensure_acts_for(session: Session, person_id: Optional[UUID], subject) -> None:
    if not acts_for(session, person_id, subject):
        raise ForbiddenError(entity_id=subject.id, actor_id=person_id)
