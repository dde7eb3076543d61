"""
Schemas Package Initialization
==============================

Exports all Pydantic schemas for the application.

Usage:
    from portal.schemas import LoginRequest, DocumentCreate, MemberResponse
"""

# Auth schemas
from portal.schemas.auth import (
    LoginRequest,
    TokenResponse,
    RefreshTokenRequest,
    LogoutResponse,
    RegisterRequest,
    RegisterResponse,
    MeResponse,
    NavigationResponse,
    ErrorResponse,
)

# User schemas
from portal.schemas.user import (
    UserResponse,
    UserListResponse,
    LinkableUserResponse,
    RoleAssignmentRequest,
    AccountDeleteRequest,
    AccountDeleteResponse,
    DashboardResponse,
    ProfileUpdate,
    PasswordChangeRequest,
    PasswordChangeResponse,
)

# Document schemas
from portal.schemas.document import (
    DocumentCreate,
    DocumentUpdate,
    DocumentDeleteRequest,
    DocumentResponse,
    DocumentListResponse,
)

# Member schemas
from portal.schemas.member import (
    MemberCreate,
    MemberUpdate,
    MemberDeleteRequest,
    MemberResponse,
    MemberListResponse,
)

__all__ = [
    # Auth
    "LoginRequest",
    "TokenResponse",
    "RefreshTokenRequest",
    "LogoutResponse",
    "RegisterRequest",
    "RegisterResponse",
    "MeResponse",
    "NavigationResponse",
    "ErrorResponse",
    # User
    "UserResponse",
    "UserListResponse",
    "LinkableUserResponse",
    "RoleAssignmentRequest",
    "AccountDeleteRequest",
    "AccountDeleteResponse",
    "DashboardResponse",
    "ProfileUpdate",
    "PasswordChangeRequest",
    "PasswordChangeResponse",
    # Document
    "DocumentCreate",
    "DocumentUpdate",
    "DocumentDeleteRequest",
    "DocumentResponse",
    "DocumentListResponse",
    # Member
    "MemberCreate",
    "MemberUpdate",
    "MemberDeleteRequest",
    "MemberResponse",
    "MemberListResponse",
]
