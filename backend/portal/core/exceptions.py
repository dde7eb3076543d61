"""
Centralized Exception Handling Module
=====================================

Defines custom exception classes for the application.

Every exception carries a message, an HTTP status code and a
``details`` mapping. The handler registered in ``portal.main``
renders them as ``{"message": ..., "details": ...}``.

Usage:
    raise AuthenticationError("Invalid credentials")
    raise ConfirmationMismatchError(field="title")
"""

from typing import Any, Dict, List, Optional
from fastapi import status


class PortalException(Exception):
    """
    Base exception class for the portal application.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ==========================
# Authentication Exceptions
# ==========================

class AuthenticationError(PortalException):
    """Raised when authentication fails."""

    def __init__(
        self,
        message: str = "Could not validate credentials",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid."""

    def __init__(self):
        super().__init__(message="Invalid email or password")


class TokenExpiredError(AuthenticationError):
    """Raised when a JWT token has expired."""

    def __init__(self, token_type: str = "access"):
        super().__init__(
            message=f"{token_type.capitalize()} token has expired",
            details={"token_type": token_type}
        )


class TokenInvalidError(AuthenticationError):
    """Raised when a JWT token is invalid."""

    def __init__(self, reason: str = "Invalid token"):
        super().__init__(
            message="Invalid token",
            details={"reason": reason}
        )


class TokenVersionMismatchError(AuthenticationError):
    """Raised when token version doesn't match user's current version."""

    def __init__(self):
        super().__init__(
            message="Token has been invalidated. Please log in again."
        )


# ==========================
# Authorization Exceptions
# ==========================

class AuthorizationError(PortalException):
    """Raised when a policy decision denies the caller."""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class RoleNotAuthorizedError(AuthorizationError):
    """Raised when none of the caller's roles is accepted for the action."""

    def __init__(self, required_roles: list):
        super().__init__(
            message="Your role is not authorized for this action",
            details={"required_roles": required_roles}
        )


class AccountPendingError(AuthorizationError):
    """Raised when an account without roles requests an application route."""

    def __init__(self, redirect_to: str = "/pending-approval"):
        super().__init__(
            message="Your account is awaiting administrator approval",
            details={"lifecycle_state": "PENDING", "redirect_to": redirect_to}
        )


# ==========================
# Account Status Exceptions
# ==========================

class AccountError(PortalException):
    """Base exception for account-related issues."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_403_FORBIDDEN,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            details=details,
        )


class AccountLockedError(AccountError):
    """Raised when account is locked due to failed attempts."""

    def __init__(self):
        super().__init__(
            message="Account is locked due to multiple failed login attempts. "
                    "Please contact your administrator."
        )


class AccountDisabledError(AccountError):
    """Raised when account is disabled."""

    def __init__(self):
        super().__init__(
            message="Account has been disabled. Please contact your administrator."
        )


class SelfProtectionError(AccountError):
    """Raised when a caller targets their own account with a protected action."""

    def __init__(self, action: str):
        super().__init__(
            message=f"You cannot {action} your own account",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"action": action},
        )


class ProtectedAccountError(AccountError):
    """Raised when an action targets an account holding ADMIN."""

    def __init__(self, message: str = "Administrator accounts cannot be deleted"):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST)


class InvalidPasswordError(AccountError):
    """Raised when the current password supplied for a change is wrong."""

    def __init__(self):
        super().__init__(
            message="Current password is incorrect",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


# ==========================
# Resource Exceptions
# ==========================

class NotFoundError(PortalException):
    """Raised when a resource is not found."""

    def __init__(self, resource: str = "Resource", identifier: Optional[str] = None):
        message = f"{resource} not found"
        details = {"resource": resource}
        if identifier:
            details["identifier"] = identifier
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class UserNotFoundError(NotFoundError):
    """Raised when a user is not found."""

    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="User", identifier=identifier)


class DocumentNotFoundError(NotFoundError):
    """Raised when a document is not found."""

    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Document", identifier=identifier)


class MemberNotFoundError(NotFoundError):
    """Raised when a member profile is not found."""

    def __init__(self, identifier: Optional[str] = None):
        super().__init__(resource="Member", identifier=identifier)


# ==========================
# Conflict Exceptions
# ==========================

class ConflictError(PortalException):
    """Raised when a write collides with existing state."""

    def __init__(
        self,
        message: str = "Resource conflict",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class DuplicateDocumentError(ConflictError):
    """Raised when a document slug is already taken."""

    def __init__(self, slug: str):
        super().__init__(
            message="A document with this title already exists",
            details={"slug": slug},
        )


class UserHasContentError(ConflictError):
    """
    Raised when an account cannot be deleted because it still owns content.

    The blocking items are enumerated so the caller can transfer or
    remove them before retrying.
    """

    def __init__(self, content_summary: Dict[str, int], content_details: Dict[str, List[str]]):
        super().__init__(
            message="Cannot delete a user who owns content. "
                    "Transfer or delete their content first.",
            details={
                "content_summary": content_summary,
                "content_details": content_details,
            },
        )


# ==========================
# Validation Exceptions
# ==========================

class ValidationError(PortalException):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class EmailAlreadyExistsError(ValidationError):
    """Raised when an email is already used by another account or member."""

    def __init__(self, resource: str = "account"):
        super().__init__(
            message="This email is already in use",
            details={"resource": resource},
        )


class ConfirmationMismatchError(PortalException):
    """
    Raised when a typed deletion confirmation does not match the target.

    Recoverable: the caller may submit again with the exact value.
    """

    def __init__(self, field: str):
        super().__init__(
            message=f"Confirmation does not match the {field}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"field": field},
        )


# ==========================
# Rate Limiting Exceptions
# ==========================

class RateLimitError(PortalException):
    """Raised when rate limit is exceeded."""

    def __init__(self, retry_after: int = 60):
        super().__init__(
            message="Too many requests. Please try again later.",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details={"retry_after_seconds": retry_after}
        )


class LoginRateLimitError(RateLimitError):
    """Raised when login rate limit is exceeded."""

    def __init__(self, retry_after: int = 60):
        super().__init__(retry_after=retry_after)
        self.message = "Too many login attempts. Please try again later."
