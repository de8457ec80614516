from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from community.schemas.common import VisibilityFlags, reject_null, slug_field


class PersonBase(BaseModel):
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    academic_title: Optional[str] = None
    position: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=2000)
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    xing: Optional[str] = None
    youtube: Optional[str] = None
    mastodon: Optional[str] = None
    areas: List[str] = []
    skills: List[str] = []


class PersonCreate(PersonBase):
    username: str = slug_field()
    visibility: VisibilityFlags = {}


class PersonUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    academic_title: Optional[str] = None
    position: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=2000)
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    xing: Optional[str] = None
    youtube: Optional[str] = None
    mastodon: Optional[str] = None
    areas: Optional[List[str]] = None
    skills: Optional[List[str]] = None

    @field_validator("first_name", "last_name", "areas", "skills")
    @classmethod
    def required_columns_not_null(cls, value):
        return reject_null(value)
