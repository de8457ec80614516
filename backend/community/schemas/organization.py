from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from community.schemas.common import VisibilityFlags, reject_null, slug_field


class OrganizationBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    kinds: List[str] = []
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    street: Optional[str] = None
    street_number: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=2000)
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    youtube: Optional[str] = None
    areas: List[str] = []
    focuses: List[str] = []


class OrganizationCreate(OrganizationBase):
    slug: str = slug_field()
    visibility: VisibilityFlags = {}


class OrganizationUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    kinds: Optional[List[str]] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    street: Optional[str] = None
    street_number: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=2000)
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    youtube: Optional[str] = None
    areas: Optional[List[str]] = None
    focuses: Optional[List[str]] = None

    @field_validator("name", "kinds", "areas", "focuses")
    @classmethod
    def required_columns_not_null(cls, value):
        return reject_null(value)
