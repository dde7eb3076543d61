"""
Authentication Dependencies Module
==================================

FastAPI dependencies for authentication and user extraction.

Features:
- JWT token validation
- User and role set loaded from the database on every request
- Account status verification
- Lifecycle gate for accounts still awaiting approval

Usage:
    @router.get("/protected")
    def protected_route(user: User = Depends(require_active_account)):
        return {"user": user.email}
"""

from typing import Optional

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from portal.core.enums import LifecycleState
from portal.core.exceptions import (
    AccountDisabledError,
    AccountLockedError,
    AccountPendingError,
    AuthenticationError,
    TokenVersionMismatchError,
)
from portal.core.logging import get_logger, security_logger, user_id_context
from portal.core.policy.account_lifecycle import PENDING_PATH, lifecycle_state
from portal.db.session import get_db
from portal.models.user import User
from portal.services.auth_service import AuthService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# OAuth2 Schemes
# =====================================

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/auth/login",
    auto_error=True,
    description="OAuth2 token for authentication",
)

optional_oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/auth/login",
    auto_error=False,
)


def _bind_request_user(request: Request, user: User) -> None:
    request.state.user_id = str(user.id)
    user_id_context.set(str(user.id))


# =====================================
# Get Current User
# =====================================

def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate JWT and return current user from database.

    Security checks performed:
    - Token signature, expiry and type
    - Token version (for revocation)
    - Account status (locked/disabled)

    Raises:
        HTTPException: If authentication fails
    """
    auth_service = AuthService(db)

    try:
        user = auth_service.validate_access_token(token)
        _bind_request_user(request, user)
        return user

    except TokenVersionMismatchError:
        security_logger.log_token_invalid(
            reason="token_version_mismatch",
            ip_address=request.client.host if request.client else "unknown"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been invalidated. Please log in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    except AuthenticationError as e:
        logger.warning(
            "Invalid token presented",
            extra={"reason": e.message}
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    except AccountLockedError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is locked. Please contact your administrator.",
        )

    except AccountDisabledError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account has been disabled. Please contact your administrator.",
        )


def get_current_user_optional(
    request: Request,
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Get current user if authenticated, otherwise return None.

    Used by routing checks that must answer for anonymous callers too.
    """
    if token is None:
        return None

    try:
        user = AuthService(db).validate_access_token(token)
    except (AuthenticationError, AccountLockedError, AccountDisabledError):
        return None

    _bind_request_user(request, user)
    return user


# =====================================
# Lifecycle Gate
# =====================================

def require_active_account(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Reject accounts that are still pending approval.

    Raises:
        AccountPendingError: The account has no roles
    """
    if lifecycle_state(current_user.roles) is LifecycleState.PENDING:
        security_logger.log_pending_account_blocked(
            user_id=str(current_user.id),
            path=request.url.path,
        )
        raise AccountPendingError(redirect_to=PENDING_PATH)
    return current_user
