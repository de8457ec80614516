"""Turn entities and ledger rows into viewer-specific response bodies."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlmodel import Session

from community.core.errors import NotFoundError
from community.models import EntityKind, Relationship, kind_of
from community.services import ledger, participation, visibility
from community.services.viewer import resolve_viewer

PUBLISHABLE = (EntityKind.EVENT, EntityKind.PROJECT)


def is_viewable(session: Session, viewer_id: Optional[UUID], entity) -> bool:
    if kind_of(entity) not in PUBLISHABLE or entity.published:
        return True
    return resolve_viewer(session, viewer_id, entity).is_owner


def load_viewable(session: Session, kind: str, slug: str, viewer_id: Optional[UUID]):
    """Load by slug; unpublished events and projects only exist for their owners."""
    entity = ledger.get_entity_by_slug(session, kind, slug)
    if not is_viewable(session, viewer_id, entity):
        raise NotFoundError(entity_kind=kind, slug=slug)
    return entity


def summaries_for(session: Session, entity) -> Dict[str, Any]:
    if kind_of(entity) == EntityKind.EVENT:
        return {
            "participant_count": participation.participant_count(session, entity.id),
            "waiting_list_count": participation.waiting_count(session, entity.id),
        }
    return {}


def present(session: Session, viewer_id: Optional[UUID], entity) -> Dict[str, Any]:
    viewer = resolve_viewer(session, viewer_id, entity)
    registry = visibility.get_registry(session, entity.id)
    return visibility.project(entity, registry, viewer, summaries_for(session, entity))


def present_many(session: Session, viewer_id: Optional[UUID], entities: Iterable) -> List[Dict[str, Any]]:
    return [
        present(session, viewer_id, entity)
        for entity in entities
        if is_viewable(session, viewer_id, entity)
    ]


def present_relationship(
    session: Session,
    viewer_id: Optional[UUID],
    relationship: Relationship,
    *,
    side: str = "subject",
) -> Optional[Dict[str, Any]]:
    """Serialize an edge with the projected entity on ``side``.

    Returns ``None`` when that entity is hidden from the viewer.
    """
    if side == "subject":
        entity = ledger.get_entity(session, relationship.subject_kind, relationship.subject_id)
    else:
        entity = ledger.get_entity(session, relationship.object_kind, relationship.object_id)
    if not is_viewable(session, viewer_id, entity):
        return None
    return {
        "id": relationship.id,
        "subject_id": relationship.subject_id,
        "subject_kind": relationship.subject_kind,
        "object_id": relationship.object_id,
        "object_kind": relationship.object_kind,
        "role": relationship.role,
        "state": relationship.state,
        "requested_at": relationship.requested_at,
        "activated_at": relationship.activated_at,
        side: {"kind": kind_of(entity), **present(session, viewer_id, entity)},
    }


def present_relationships(
    session: Session,
    viewer_id: Optional[UUID],
    edges: Iterable[Relationship],
    *,
    side: str = "subject",
) -> List[Dict[str, Any]]:
    items = (present_relationship(session, viewer_id, edge, side=side) for edge in edges)
    return [item for item in items if item is not None]
