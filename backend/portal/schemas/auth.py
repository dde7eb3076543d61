"""
Authentication Schemas Module
=============================

Pydantic models for authentication request/response validation.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from portal.core.enums import LifecycleState
from portal.models.role_enum import Role


# ==========================
# Login Schemas
# ==========================

class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="User email address",
        examples=["user@example.com"]
    )
    password: str = Field(
        ...,
        min_length=1,
        description="User password",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "correct horse battery"
            }
        }
    )


class TokenResponse(BaseModel):
    """Token response schema for login/refresh."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: Optional[int] = Field(
        default=None,
        description="Access token expiration in seconds"
    )


class RefreshTokenRequest(BaseModel):
    """Refresh token request schema."""

    refresh_token: str = Field(..., description="Valid refresh token")


class LogoutResponse(BaseModel):
    """Logout response schema."""

    message: str = Field(
        default="Successfully logged out",
        description="Logout confirmation message"
    )


# ==========================
# Registration Schemas
# ==========================

class RegisterRequest(BaseModel):
    """
    Self-service registration.

    New accounts start with no roles and wait for an administrator.
    """

    name: str = Field(..., min_length=2, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="User password (min 8 characters)"
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Jane Citizen",
                "email": "jane@example.com",
                "password": "correct horse battery"
            }
        }
    )


class RegisterResponse(BaseModel):
    """Registration response schema."""

    message: str = Field(default="User registered successfully")
    user_id: str = Field(..., description="New user's UUID")
    lifecycle_state: LifecycleState = Field(default=LifecycleState.PENDING)


# ==========================
# Session Schemas
# ==========================

class MeResponse(BaseModel):
    """Current account with its lifecycle state and reachable surfaces."""

    id: str
    email: str
    name: str
    bio: Optional[str] = None
    roles: List[Role]
    lifecycle_state: LifecycleState
    reachable_surfaces: List[str]


class NavigationResponse(BaseModel):
    """Routing decision for a UI path."""

    path: str
    allowed: bool
    redirect_to: Optional[str] = None
    lifecycle_state: Optional[LifecycleState] = None


# ==========================
# Error Schemas
# ==========================

class ErrorResponse(BaseModel):
    """Standard error response schema."""

    message: str = Field(..., description="Error message")
    details: Optional[dict] = Field(default=None, description="Additional error details")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Confirmation does not match the title",
                "details": {"field": "title"}
            }
        }
    )
