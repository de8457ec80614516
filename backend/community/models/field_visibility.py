from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class VisibilityLevel:
    PUBLIC = "public"
    REGISTERED = "registered"
    PRIVATE = "private"

    ALL = (PUBLIC, REGISTERED, PRIVATE)


class FieldVisibility(SQLModel, table=True):
    """Visibility flag of one optional field of an entity."""

    __tablename__ = "field_visibility"
    __table_args__ = (
        UniqueConstraint("entity_id", "field_name", name="uq_field_visibility_entity_field"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    entity_id: UUID = Field(nullable=False, index=True)
    field_name: str = Field(max_length=64)
    level: str = Field(default=VisibilityLevel.PRIVATE, max_length=16)
