"""
User Schemas Module
===================

Pydantic models for account administration and profile management.
"""

from datetime import date
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from portal.models.role_enum import Role


# ==========================
# Response Schemas
# ==========================

class UserResponse(BaseModel):
    """User response schema (excludes sensitive data)."""

    id: str
    email: str
    name: str
    bio: Optional[str] = None
    roles: List[Role]
    is_active: bool
    is_locked: bool
    has_member_profile: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "email": "user@example.com",
                "name": "Jane Citizen",
                "roles": ["USER", "OFFICIAL"],
                "is_active": True,
                "is_locked": False,
                "has_member_profile": False,
            }
        }
    )


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int


class LinkableUserResponse(BaseModel):
    """Account that has no member profile yet."""

    id: str
    email: str
    name: str


# ==========================
# Administration Schemas
# ==========================

class RoleAssignmentRequest(BaseModel):
    """
    Replace an account's role set.

    An empty list is accepted and returns the account to pending.
    """

    roles: List[Role] = Field(..., description="Complete new role set")


class AccountDeleteRequest(BaseModel):
    email_confirmation: Optional[str] = Field(
        default=None,
        description="Must equal the target account's email exactly"
    )


class DeletedUserResponse(BaseModel):
    id: str
    name: str
    email: str
    had_member_profile: bool


class AccountDeleteResponse(BaseModel):
    message: str
    deleted_user: DeletedUserResponse


class DashboardResponse(BaseModel):
    total_users: int
    pending_users: int
    role_counts: Dict[str, int]
    total_documents: int
    documents_by_status: Dict[str, int]
    total_members: int


# ==========================
# Profile Schemas
# ==========================

class ProfileUpdate(BaseModel):
    """
    Self-service profile update.

    Member fields are applied to the linked member profile when present.
    """

    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
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

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v


class PasswordChangeRequest(BaseModel):
    """Password change request schema."""

    current_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=8, max_length=128, description="New password")
    confirm_password: str = Field(..., description="Repeat of the new password")

    @model_validator(mode="after")
    def passwords_match(self) -> "PasswordChangeRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class PasswordChangeResponse(BaseModel):
    message: str = "Password changed successfully"
    should_logout: bool = True
