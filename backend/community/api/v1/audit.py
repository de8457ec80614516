from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter

from community.api.deps import CurrentPerson
from community.api.v1.visibility import EntityKindParam
from community.db import SessionDep
from community.services import audit, ledger
from community.services.permissions import ensure_admin

router = APIRouter()


@router.get("/{kind}/{entity_id}", summary="Audit trail of an entity (admins only)")
def read_history(
    kind: EntityKindParam,
    entity_id: UUID,
    session: SessionDep,
    current_person: CurrentPerson,
) -> List[dict]:
    entity = ledger.get_entity(session, kind, entity_id)
    ensure_admin(session, current_person.id, entity)
    return [entry.model_dump() for entry in audit.history(session, entity.id)]
