from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from community.schemas.common import slug_field

ObjectKind = Literal["organization", "event", "project"]
MembershipRole = Literal["admin", "team_member", "speaker", "network_member"]


class RelationshipRead(BaseModel):
    id: UUID
    subject_id: UUID
    subject_kind: str
    object_id: UUID
    object_kind: str
    role: str
    state: str
    requested_at: datetime
    activated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RelationshipRequest(BaseModel):
    """Join request; ``subject_id`` defaults to the current person.

    For network membership it is the id of the organization asking to join.
    """

    object_kind: ObjectKind
    object_id: UUID
    role: MembershipRole
    subject_id: Optional[UUID] = None


class RelationshipInvite(BaseModel):
    object_kind: ObjectKind
    object_id: UUID
    role: MembershipRole
    subject_id: UUID


class RelationshipRemoval(BaseModel):
    object_kind: ObjectKind
    object_id: UUID
    role: Literal[
        "admin",
        "team_member",
        "speaker",
        "network_member",
        "participant",
        "waiting_list_entrant",
    ]
    subject_id: Optional[UUID] = None


class ResponsibleOrganizationLink(BaseModel):
    organization_id: UUID


class SlugChange(BaseModel):
    slug: str = slug_field()
