from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from community.schemas.common import VisibilityFlags, reject_null, slug_field


class ProjectBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    published: bool = False
    headline: Optional[str] = None
    excerpt: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = Field(default=None, max_length=5000)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    street: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None
    youtube: Optional[str] = None


class ProjectCreate(ProjectBase):
    slug: str = slug_field()
    visibility: VisibilityFlags = {}


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    published: Optional[bool] = None
    headline: Optional[str] = None
    excerpt: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = Field(default=None, max_length=5000)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    street: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None
    youtube: Optional[str] = None

    @field_validator("name", "published")
    @classmethod
    def required_columns_not_null(cls, value):
        return reject_null(value)
