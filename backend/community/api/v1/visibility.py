from __future__ import annotations

from typing import Dict, Literal
from uuid import UUID

from fastapi import APIRouter

from community.api.deps import CurrentPerson
from community.db import SessionDep
from community.models import VisibilityLevel
from community.services import ledger, visibility
from community.services.permissions import ensure_admin

router = APIRouter()

EntityKindParam = Literal["person", "organization", "event", "project"]


def _with_defaults(kind: str, registry: Dict[str, str]) -> Dict[str, str]:
    return {
        name: registry.get(name, VisibilityLevel.PRIVATE)
        for name in visibility.optional_fields(kind)
    }


@router.get("/{kind}/{entity_id}", summary="Visibility flags of an entity")
def read_visibility(
    kind: EntityKindParam,
    entity_id: UUID,
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, str]:
    entity = ledger.get_entity(session, kind, entity_id)
    ensure_admin(session, current_person.id, entity)
    return _with_defaults(kind, visibility.get_registry(session, entity.id))


@router.put("/{kind}/{entity_id}", summary="Change visibility flags")
def update_visibility(
    kind: EntityKindParam,
    entity_id: UUID,
    flags: Dict[str, str],
    session: SessionDep,
    current_person: CurrentPerson,
) -> Dict[str, str]:
    entity = ledger.get_entity(session, kind, entity_id)
    registry = visibility.set_visibility(session, current_person.id, entity, flags)
    body = _with_defaults(kind, registry)
    session.commit()
    return body

