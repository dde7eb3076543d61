"""
Member Schemas Module
=====================

Pydantic models for member directory requests and responses.
"""

from datetime import date
from typing import Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field

from portal.core.enums import MemberStatus


class MemberFields(BaseModel):
    bio: Optional[str] = None
    date_of_birth: Optional[date] = None
    place_of_birth: Optional[str] = None
    avatar_url: Optional[str] = None
    mobile_numbers: Optional[List[str]] = None
    title: Optional[str] = None
    organization: Optional[str] = None
    instagram: Optional[str] = None
    github: Optional[str] = None
    facebook: Optional[str] = None
    x: Optional[str] = None
    linkedin: Optional[str] = None


class MemberCreate(MemberFields):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    status: MemberStatus = MemberStatus.ACTIVE
    user_id: Optional[UUID] = Field(
        default=None,
        description="Account to link; must exist and have no profile yet"
    )


class MemberUpdate(MemberFields):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    status: Optional[MemberStatus] = None


class MemberDeleteRequest(BaseModel):
    name_confirmation: Optional[str] = Field(
        default=None,
        description="Must equal the member name exactly"
    )


class MemberResponse(BaseModel):
    id: str
    slug: str
    name: str
    email: str
    bio: Optional[str] = None
    status: MemberStatus
    date_of_birth: Optional[str] = None
    place_of_birth: Optional[str] = None
    avatar_url: Optional[str] = None
    mobile_numbers: List[str]
    title: Optional[str] = None
    organization: Optional[str] = None
    social: Dict[str, Optional[str]]
    user_id: Optional[str] = None
    linked_account_is_admin: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class MemberListResponse(BaseModel):
    members: List[MemberResponse]
    total: int
