from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel


class Event(SQLModel, table=True):
    """Community event, optionally nested inside a parent event."""

    __tablename__ = "events"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str = Field(max_length=255)
    slug: str = Field(max_length=255, unique=True, index=True)
    start_time: datetime = Field(nullable=False, index=True)
    end_time: datetime = Field(nullable=False, index=True)
    participation_from: Optional[datetime] = Field(default=None, nullable=True)
    participation_until: Optional[datetime] = Field(default=None, nullable=True)
    # None means unlimited
    participant_limit: Optional[int] = Field(default=None, nullable=True)
    parent_event_id: Optional[UUID] = Field(
        default=None, foreign_key="events.id", index=True, nullable=True
    )
    published: bool = Field(default=False)
    canceled: bool = Field(default=False)
    subline: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    venue_name: Optional[str] = Field(default=None, max_length=255)
    venue_street: Optional[str] = Field(default=None, max_length=255)
    venue_zip_code: Optional[str] = Field(default=None, max_length=16)
    venue_city: Optional[str] = Field(default=None, max_length=255)
    conference_link: Optional[str] = Field(default=None, max_length=500)
    conference_code: Optional[str] = Field(default=None, max_length=255)
    areas: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
