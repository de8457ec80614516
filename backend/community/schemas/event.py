from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from community.schemas.common import VisibilityFlags, reject_null, slug_field, to_naive_utc


class EventBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    start_time: datetime
    end_time: datetime
    participation_from: Optional[datetime] = None
    participation_until: Optional[datetime] = None
    published: bool = False
    canceled: bool = False
    subline: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=5000)
    venue_name: Optional[str] = None
    venue_street: Optional[str] = None
    venue_zip_code: Optional[str] = None
    venue_city: Optional[str] = None
    conference_link: Optional[str] = None
    conference_code: Optional[str] = None
    areas: List[str] = []

    @field_validator(
        "start_time", "end_time", "participation_from", "participation_until"
    )
    @classmethod
    def normalize_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    @field_validator("end_time")
    @classmethod
    def check_ends_after_start(cls, end_time: datetime, info: ValidationInfo) -> datetime:
        start_time: datetime | None = info.data.get("start_time")
        if start_time and end_time < start_time:
            raise ValueError("end_time must be greater than or equal to start_time")
        return end_time


class EventCreate(EventBase):
    slug: str = slug_field()
    participant_limit: Optional[int] = Field(default=None, ge=0)
    visibility: VisibilityFlags = {}


class EventUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    participation_from: Optional[datetime] = None
    participation_until: Optional[datetime] = None
    published: Optional[bool] = None
    canceled: Optional[bool] = None
    subline: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=5000)
    venue_name: Optional[str] = None
    venue_street: Optional[str] = None
    venue_zip_code: Optional[str] = None
    venue_city: Optional[str] = None
    conference_link: Optional[str] = None
    conference_code: Optional[str] = None
    areas: Optional[List[str]] = None

    @field_validator(
        "start_time", "end_time", "participation_from", "participation_until"
    )
    @classmethod
    def normalize_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    @field_validator("name", "start_time", "end_time", "published", "canceled", "areas")
    @classmethod
    def required_columns_not_null(cls, value):
        return reject_null(value)


class ParticipantLimitUpdate(BaseModel):
    participant_limit: Optional[int] = Field(default=None, ge=0)


class ParticipationCreate(BaseModel):
    """Defaults to the current person when ``person_id`` is omitted."""

    person_id: Optional[UUID] = None


class ParentLink(BaseModel):
    parent_id: UUID


class ChildLink(BaseModel):
    child_id: UUID
