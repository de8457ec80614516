from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class Role:
    """Roles a subject can hold towards an object entity."""

    ADMIN = "admin"
    TEAM_MEMBER = "team_member"
    SPEAKER = "speaker"
    PARTICIPANT = "participant"
    WAITING_LIST_ENTRANT = "waiting_list_entrant"
    NETWORK_MEMBER = "network_member"
    RESPONSIBLE_ORGANIZATION = "responsible_organization"

    ALL = (
        ADMIN,
        TEAM_MEMBER,
        SPEAKER,
        PARTICIPANT,
        WAITING_LIST_ENTRANT,
        NETWORK_MEMBER,
        RESPONSIBLE_ORGANIZATION,
    )
    # Roles held by organizations instead of persons
    ORGANIZATION_SUBJECT = (NETWORK_MEMBER, RESPONSIBLE_ORGANIZATION)
    # Active holders of these roles see the object as its owner
    PRIVILEGED = (ADMIN, TEAM_MEMBER)


class RelationshipState:
    REQUESTED = "requested"
    INVITED = "invited"
    ACTIVE = "active"

    PENDING = (REQUESTED, INVITED)


class Relationship(SQLModel, table=True):
    """Directed, typed and stateful edge between two entities."""

    __tablename__ = "relationships"
    __table_args__ = (
        UniqueConstraint(
            "subject_id", "object_id", "role", name="uq_relationships_subject_object_role"
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    subject_id: UUID = Field(nullable=False, index=True)
    subject_kind: str = Field(max_length=32)
    object_id: UUID = Field(nullable=False, index=True)
    object_kind: str = Field(max_length=32)
    role: str = Field(max_length=32, index=True)
    state: str = Field(max_length=32, index=True)
    created_by_id: Optional[UUID] = Field(default=None, nullable=True)
    # Request time; waiting lists are ordered by it
    requested_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)
    activated_at: Optional[datetime] = Field(default=None, nullable=True)

    @property
    def is_pending(self) -> bool:
        return self.state in RelationshipState.PENDING

    @property
    def is_active(self) -> bool:
        return self.state == RelationshipState.ACTIVE

    def activate(self) -> None:
        self.state = RelationshipState.ACTIVE
        self.activated_at = datetime.utcnow()
