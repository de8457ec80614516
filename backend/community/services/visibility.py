"""Visibility registry and field projection.

Every entity field falls in one of three groups:

* public fields (identity, display name, listing summaries) - always sent;
* privileged fields (status flags, timestamps) - sent to owners only;
* optional fields - governed by one registry flag each: ``public`` for
  everyone, ``registered`` for logged-in viewers, ``private`` (or no
  entry at all) for owners only.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import Session, select

from community.core.errors import UnknownFieldError
from community.models import (
    ENTITY_MODELS,
    EntityKind,
    FieldVisibility,
    VisibilityLevel,
    kind_of,
)
from community.services.permissions import ensure_admin
from community.services.viewer import ViewerContext, ViewerMode

logger = logging.getLogger(__name__)

PUBLIC_FIELDS: Dict[str, Tuple[str, ...]] = {
    EntityKind.PERSON: ("id", "username", "first_name", "last_name", "academic_title"),
    EntityKind.ORGANIZATION: ("id", "slug", "name", "kinds"),
    EntityKind.EVENT: (
        "id",
        "slug",
        "name",
        "start_time",
        "end_time",
        "participant_limit",
        "parent_event_id",
        "canceled",
    ),
    EntityKind.PROJECT: ("id", "slug", "name"),
}

PRIVILEGED_FIELDS: Dict[str, Tuple[str, ...]] = {
    EntityKind.PERSON: ("created_at", "updated_at"),
    EntityKind.ORGANIZATION: ("created_at", "updated_at"),
    EntityKind.EVENT: ("published", "created_at", "updated_at"),
    EntityKind.PROJECT: ("published", "created_at", "updated_at"),
}


def optional_fields(kind: str) -> Tuple[str, ...]:
    fixed = set(PUBLIC_FIELDS[kind]) | set(PRIVILEGED_FIELDS[kind])
    return tuple(name for name in ENTITY_MODELS[kind].model_fields if name not in fixed)


def is_field_visible(
    field_name: str,
    registry: Mapping[str, str],
    viewer: ViewerContext,
) -> bool:
    if viewer.mode == ViewerMode.OWNER:
        return True
    level = registry.get(field_name, VisibilityLevel.PRIVATE)
    if level == VisibilityLevel.PUBLIC:
        return True
    return level == VisibilityLevel.REGISTERED and viewer.mode != ViewerMode.ANONYMOUS


def project(
    entity,
    registry: Mapping[str, str],
    viewer: ViewerContext,
    summaries: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Return the part of ``entity`` the viewer may receive. Never mutates anything."""
    kind = kind_of(entity)
    data = {name: getattr(entity, name) for name in type(entity).model_fields}
    result: Dict[str, Any] = {name: data[name] for name in PUBLIC_FIELDS[kind]}
    if viewer.mode == ViewerMode.OWNER:
        result.update({name: data[name] for name in PRIVILEGED_FIELDS[kind]})
    for name in optional_fields(kind):
        if is_field_visible(name, registry, viewer):
            result[name] = data[name]
    if summaries:
        result.update(summaries)
    return result


def get_registry(session: Session, entity_id: UUID) -> Dict[str, str]:
    rows = session.exec(
        select(FieldVisibility).where(FieldVisibility.entity_id == entity_id)
    ).all()
    return {row.field_name: row.level for row in rows}


def validate_flags(kind: str, flags: Mapping[str, str], entity_id: Optional[UUID] = None) -> None:
    allowed = set(optional_fields(kind))
    for field_name, level in flags.items():
        if field_name not in allowed or level not in VisibilityLevel.ALL:
            raise UnknownFieldError(entity_id=entity_id, field=field_name, level=level)


def write_flags(session: Session, entity_id: UUID, flags: Mapping[str, str]) -> None:
    existing = {
        row.field_name: row
        for row in session.exec(
            select(FieldVisibility).where(FieldVisibility.entity_id == entity_id)
        ).all()
    }
    for field_name, level in flags.items():
        row = existing.get(field_name)
        if row is None:
            row = FieldVisibility(entity_id=entity_id, field_name=field_name, level=level)
        else:
            row.level = level
        session.add(row)
    session.flush()


def set_visibility(
    session: Session,
    actor_id: Optional[UUID],
    entity,
    flags: Mapping[str, str],
) -> Dict[str, str]:
    ensure_admin(session, actor_id, entity)
    validate_flags(kind_of(entity), flags, entity.id)
    write_flags(session, entity.id, flags)
    logger.info(f"Visibility of {entity.id} updated by {actor_id}: {dict(flags)}")
    return get_registry(session, entity.id)


def clear_registry(session: Session, entity_id: UUID) -> None:
    session.execute(delete(FieldVisibility).where(FieldVisibility.entity_id == entity_id))
