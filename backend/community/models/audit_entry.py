from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class AuditAction:
    """Audited actions."""
    PARENT_SET = "parent_set"
    PARENT_DETACHED = "parent_detached"
    PARENT_REMOVED = "parent_removed"
    SLUG_CHANGED = "slug_changed"
    TIMEFRAME_CHANGED = "timeframe_changed"
    PARTICIPANT_LIMIT_CHANGED = "participant_limit_changed"
    ENTITY_DELETED = "entity_deleted"


class AuditEntry(SQLModel, table=True):
    """History entry for structural changes of an entity."""

    __tablename__ = "audit_entries"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    entity_id: UUID = Field(nullable=False, index=True)
    actor_id: Optional[UUID] = Field(default=None, nullable=True, index=True)
    action: str = Field(max_length=50, index=True)
    field_name: Optional[str] = Field(default=None, max_length=50)
    old_value: Optional[str] = Field(default=None, max_length=1000)
    new_value: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)
