from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel


class NotificationOutbox(SQLModel, table=True):
    """Notification queued in the same transaction as the transition it reports."""

    __tablename__ = "notification_outbox"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    # "<relationship id>:<transition>"
    dedupe_key: str = Field(max_length=128, unique=True, index=True)
    recipient_id: UUID = Field(nullable=False, index=True)
    recipient_kind: str = Field(max_length=32)
    kind: str = Field(max_length=50)
    payload: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    attempts: int = Field(default=0)
    last_error: Optional[str] = Field(default=None, max_length=1000)
    dispatched_at: Optional[datetime] = Field(default=None, nullable=True, index=True)
    failed: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)
