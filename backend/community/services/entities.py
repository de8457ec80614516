"""Entity lifecycle: create, update, change slug, delete."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional
from uuid import UUID

from sqlmodel import Session

from community.core.errors import SlugTakenError, TimeframeViolationError
from community.models import (
    ENTITY_MODELS,
    AuditAction,
    EntityKind,
    Person,
    RelationshipState,
    Role,
    kind_of,
)
from community.services import audit, hierarchy, ledger, relationships, visibility
from community.services.permissions import ensure_admin

logger = logging.getLogger(__name__)

# Fields only changed through their dedicated operations
PROTECTED_FIELDS = {
    "id",
    "slug",
    "username",
    "parent_event_id",
    "participant_limit",
    "created_at",
    "updated_at",
}


def _slug_field(kind: str) -> str:
    return "username" if kind == EntityKind.PERSON else "slug"


def create_person(
    session: Session,
    data: Mapping[str, Any],
    visibility_flags: Optional[Mapping[str, str]] = None,
) -> Person:
    """Create a profile; credentials are handled by the identity provider."""
    if ledger.slug_in_use(session, EntityKind.PERSON, data["username"]):
        raise SlugTakenError(slug=data["username"])
    visibility.validate_flags(EntityKind.PERSON, visibility_flags or {})
    person = Person(**data)
    session.add(person)
    session.flush()
    if visibility_flags:
        visibility.write_flags(session, person.id, visibility_flags)
    logger.info(f"Created person {person.id} ({person.username})")
    return person


def create_entity(
    session: Session,
    creator_id: UUID,
    kind: str,
    data: Mapping[str, Any],
    visibility_flags: Optional[Mapping[str, str]] = None,
):
    """Create an organization, event or project owned by ``creator_id``.

    The creator becomes its first Active admin and, for events and
    projects, its first Active team member.
    """
    creator = ledger.get_entity(session, EntityKind.PERSON, creator_id)
    model = ENTITY_MODELS[kind]
    if ledger.slug_in_use(session, kind, data["slug"]):
        raise SlugTakenError(slug=data["slug"], entity_kind=kind)
    visibility.validate_flags(kind, visibility_flags or {})
    if kind == EntityKind.EVENT and data["end_time"] < data["start_time"]:
        raise TimeframeViolationError(reason="end_before_start")

    entity = model(**data)
    session.add(entity)
    session.flush()

    relationships.grant(session, creator, entity, Role.ADMIN, creator.id)
    if kind in (EntityKind.EVENT, EntityKind.PROJECT):
        relationships.grant(session, creator, entity, Role.TEAM_MEMBER, creator.id)
    if visibility_flags:
        visibility.write_flags(session, entity.id, visibility_flags)
    logger.info(f"{creator.id} created {kind} {entity.id} ({entity.slug})")
    return entity


def update_entity(
    session: Session,
    actor_id: Optional[UUID],
    entity,
    changes: Mapping[str, Any],
):
    kind = kind_of(entity)
    if kind != EntityKind.PERSON:
        entity = ledger.get_entity(session, kind, entity.id, for_update=True)
    ensure_admin(session, actor_id, entity)
    updates: Dict[str, Any] = {
        key: value for key, value in changes.items() if key not in PROTECTED_FIELDS
    }

    if kind == EntityKind.EVENT and ("start_time" in updates or "end_time" in updates):
        start_time = updates.get("start_time", entity.start_time)
        end_time = updates.get("end_time", entity.end_time)
        hierarchy.validate_timeframe(session, entity, start_time, end_time)
        audit.record(
            session,
            entity_id=entity.id,
            actor_id=actor_id,
            action=AuditAction.TIMEFRAME_CHANGED,
            old_value=f"{entity.start_time.isoformat()}/{entity.end_time.isoformat()}",
            new_value=f"{start_time.isoformat()}/{end_time.isoformat()}",
        )

    for key, value in updates.items():
        setattr(entity, key, value)
    entity.touch()
    session.add(entity)
    session.flush()
    logger.info(f"{actor_id} updated {kind} {entity.id}: {sorted(updates)}")
    return entity


def change_slug(session: Session, actor_id: Optional[UUID], entity, new_slug: str):
    """Change the URL slug; links using the old slug stop resolving."""
    kind = kind_of(entity)
    ensure_admin(session, actor_id, entity)
    field_name = _slug_field(kind)
    old_slug = getattr(entity, field_name)
    if new_slug == old_slug:
        return entity
    if ledger.slug_in_use(session, kind, new_slug):
        raise SlugTakenError(entity_id=entity.id, slug=new_slug)

    setattr(entity, field_name, new_slug)
    entity.touch()
    session.add(entity)
    audit.record(
        session,
        entity_id=entity.id,
        actor_id=actor_id,
        action=AuditAction.SLUG_CHANGED,
        field_name=field_name,
        old_value=old_slug,
        new_value=new_slug,
    )
    session.flush()
    return entity


def _ensure_not_last_holder(session: Session, person: Person) -> None:
    edges = ledger.list_relationships(
        session, subject_id=person.id, states=(RelationshipState.ACTIVE,)
    )
    for edge in edges:
        if edge.role in Role.PRIVILEGED:
            obj = ledger.get_entity(session, edge.object_kind, edge.object_id, for_update=True)
            relationships.ensure_floor(session, obj, edge)


def delete_entity(session: Session, actor_id: Optional[UUID], entity) -> None:
    """Delete an entity together with its ledger rows and visibility flags.

    A person who is the last admin or team member of something must hand
    it over first. Child events of a deleted event become top-level events.
    """
    kind = kind_of(entity)
    ensure_admin(session, actor_id, entity)
    if kind == EntityKind.PERSON:
        _ensure_not_last_holder(session, entity)
    if kind == EntityKind.EVENT:
        for child in hierarchy.children_of(session, entity.id):
            child.parent_event_id = None
            session.add(child)
            audit.record(
                session,
                entity_id=child.id,
                actor_id=actor_id,
                action=AuditAction.PARENT_REMOVED,
                field_name="parent_event_id",
                old_value=entity.id,
            )

    removed = ledger.delete_relationships_of(session, entity.id)
    visibility.clear_registry(session, entity.id)
    audit.record(
        session,
        entity_id=entity.id,
        actor_id=actor_id,
        action=AuditAction.ENTITY_DELETED,
        old_value=getattr(entity, _slug_field(kind)),
    )
    session.delete(entity)
    session.flush()
    logger.info(f"{actor_id} deleted {kind} {entity.id} ({removed} relationship(s) removed)")
