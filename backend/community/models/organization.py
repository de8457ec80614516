from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel

NETWORK_KIND = "network"


class Organization(SQLModel, table=True):
    """Organization, company or network of organizations."""

    __tablename__ = "organizations"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str = Field(max_length=255)
    slug: str = Field(max_length=255, unique=True, index=True)
    # Organizational forms, e.g. "company", "association", "network"
    kinds: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    website: Optional[str] = Field(default=None, max_length=500)
    street: Optional[str] = Field(default=None, max_length=255)
    street_number: Optional[str] = Field(default=None, max_length=32)
    zip_code: Optional[str] = Field(default=None, max_length=16)
    city: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = Field(default=None, max_length=2000)
    facebook: Optional[str] = Field(default=None, max_length=500)
    linkedin: Optional[str] = Field(default=None, max_length=500)
    twitter: Optional[str] = Field(default=None, max_length=500)
    instagram: Optional[str] = Field(default=None, max_length=500)
    youtube: Optional[str] = Field(default=None, max_length=500)
    areas: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    focuses: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    @property
    def is_network(self) -> bool:
        return NETWORK_KIND in (self.kinds or [])

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
