from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from sqlmodel import Session

from community.models import EntityKind, Role, kind_of
from community.services.ledger import has_active_role


class ViewerMode:
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    OWNER = "owner"


class ViewerContext(BaseModel):
    """Privilege level of the requesting person relative to one entity."""

    mode: str = ViewerMode.ANONYMOUS
    person_id: Optional[UUID] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_owner(self) -> bool:
        return self.mode == ViewerMode.OWNER


ANONYMOUS = ViewerContext()


def resolve_viewer(session: Session, person_id: Optional[UUID], entity) -> ViewerContext:
    """Classify the viewer as anonymous, authenticated or owner of ``entity``.

    Owners are the person themself (for profiles) or Active admins and
    team members. Pending requests and invites confer nothing.
    """
    if person_id is None:
        return ANONYMOUS
    if kind_of(entity) == EntityKind.PERSON:
        is_owner = entity.id == person_id
    else:
        is_owner = has_active_role(session, person_id, entity.id, Role.PRIVILEGED)
    mode = ViewerMode.OWNER if is_owner else ViewerMode.AUTHENTICATED
    return ViewerContext(mode=mode, person_id=person_id)
