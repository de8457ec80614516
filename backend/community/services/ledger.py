"""Storage operations over entities and the relationship ledger.

Writes that check a rule before mutating (cardinality, capacity,
hierarchy) load the object entity with ``for_update=True`` first, which
takes a row lock for the rest of the transaction and serializes
concurrent writers per entity id. SQLite has no row locks; there every
transaction starts with ``BEGIN IMMEDIATE`` (see ``community.db``).
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, func, or_
from sqlmodel import Session, select

from community.core.errors import NotFoundError
from community.models import ENTITY_MODELS, EntityKind, Relationship, RelationshipState


def _model_for(kind: str):
    model = ENTITY_MODELS.get(kind)
    if model is None:
        raise NotFoundError(entity_kind=kind)
    return model


def get_entity(
    session: Session,
    kind: str,
    entity_id: UUID,
    *,
    for_update: bool = False,
):
    model = _model_for(kind)
    statement = select(model).where(model.id == entity_id)
    if for_update:
        statement = statement.with_for_update()
    entity = session.exec(statement).one_or_none()
    if entity is None:
        raise NotFoundError(entity_id=entity_id, entity_kind=kind)
    return entity


def get_entity_by_slug(session: Session, kind: str, slug: str):
    model = _model_for(kind)
    column = model.username if kind == EntityKind.PERSON else model.slug
    entity = session.exec(select(model).where(column == slug)).one_or_none()
    if entity is None:
        raise NotFoundError(entity_kind=kind, slug=slug)
    return entity


def slug_in_use(session: Session, kind: str, slug: str) -> bool:
    model = _model_for(kind)
    column = model.username if kind == EntityKind.PERSON else model.slug
    return session.exec(select(model.id).where(column == slug)).first() is not None


def get_relationship(
    session: Session,
    subject_id: UUID,
    object_id: UUID,
    role: str,
) -> Optional[Relationship]:
    return session.exec(
        select(Relationship).where(
            Relationship.subject_id == subject_id,
            Relationship.object_id == object_id,
            Relationship.role == role,
        )
    ).one_or_none()


def get_relationship_by_id(session: Session, relationship_id: UUID) -> Relationship:
    relationship = session.get(Relationship, relationship_id)
    if relationship is None:
        raise NotFoundError(relationship_id=relationship_id)
    return relationship


def list_relationships(
    session: Session,
    *,
    subject_id: Optional[UUID] = None,
    object_id: Optional[UUID] = None,
    role: Optional[str] = None,
    states: Optional[Sequence[str]] = None,
) -> List[Relationship]:
    statement = select(Relationship)
    if subject_id is not None:
        statement = statement.where(Relationship.subject_id == subject_id)
    if object_id is not None:
        statement = statement.where(Relationship.object_id == object_id)
    if role is not None:
        statement = statement.where(Relationship.role == role)
    if states:
        statement = statement.where(Relationship.state.in_(list(states)))
    statement = statement.order_by(Relationship.requested_at.asc(), Relationship.id.asc())
    return list(session.exec(statement).all())


def count_active(session: Session, object_id: UUID, role: str) -> int:
    return session.exec(
        select(func.count())
        .select_from(Relationship)
        .where(
            Relationship.object_id == object_id,
            Relationship.role == role,
            Relationship.state == RelationshipState.ACTIVE,
        )
    ).one()


def has_active_role(
    session: Session,
    subject_id: UUID,
    object_id: UUID,
    roles: Iterable[str],
) -> bool:
    return (
        session.exec(
            select(Relationship.id).where(
                Relationship.subject_id == subject_id,
                Relationship.object_id == object_id,
                Relationship.role.in_(list(roles)),
                Relationship.state == RelationshipState.ACTIVE,
            )
        ).first()
        is not None
    )


def upsert_relationship(session: Session, relationship: Relationship) -> Relationship:
    session.add(relationship)
    session.flush()
    return relationship


def delete_relationship(session: Session, relationship: Relationship) -> None:
    session.delete(relationship)
    session.flush()


def delete_relationships_of(session: Session, entity_id: UUID) -> int:
    result = session.execute(
        delete(Relationship).where(
            or_(Relationship.subject_id == entity_id, Relationship.object_id == entity_id)
        )
    )
    return result.rowcount or 0
