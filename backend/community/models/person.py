from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel


class Person(SQLModel, table=True):
    """Community member profile."""

    __tablename__ = "persons"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    username: str = Field(max_length=255, unique=True, index=True)
    first_name: str = Field(max_length=255)
    last_name: str = Field(max_length=255)
    academic_title: Optional[str] = Field(default=None, max_length=64)
    position: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    website: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = Field(default=None, max_length=2000)
    facebook: Optional[str] = Field(default=None, max_length=500)
    linkedin: Optional[str] = Field(default=None, max_length=500)
    twitter: Optional[str] = Field(default=None, max_length=500)
    instagram: Optional[str] = Field(default=None, max_length=500)
    xing: Optional[str] = Field(default=None, max_length=500)
    youtube: Optional[str] = Field(default=None, max_length=500)
    mastodon: Optional[str] = Field(default=None, max_length=500)
    areas: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    skills: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    @property
    def slug(self) -> str:
        return self.username

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
