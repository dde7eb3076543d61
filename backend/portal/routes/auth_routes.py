"""
Authentication Routes Module
============================

Handles:
- Self-service registration (account starts pending)
- User login with account lockout protection
- Token refresh
- Logout (token invalidation)
- Current account and its lifecycle state
- Route decisions for UI navigation
- The pending-approval surface

Errors raised by the auth service propagate to the application's
exception handler.
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from portal.core.dependencies.auth import get_current_user, get_current_user_optional
from portal.core.enums import LifecycleState
from portal.core.logging import get_logger
from portal.core.policy.account_lifecycle import (
    PENDING_PATH,
    lifecycle_state,
    reachable_surfaces,
    route_decision,
)
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas import (
    ErrorResponse,
    LoginRequest,
    LogoutResponse,
    MeResponse,
    NavigationResponse,
    RefreshTokenRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from portal.services.auth_service import AuthService
from portal.services.notification_service import (
    NotificationService,
    Recipient,
    get_notification_service,
)

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"model": ErrorResponse, "description": "Authentication failed"},
        403: {"model": ErrorResponse, "description": "Access forbidden"},
    },
)


# =====================================
# Registration
# =====================================

@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    responses={422: {"model": ErrorResponse, "description": "Email already in use"}},
)
def register(
    payload: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> dict:
    """
    Create an account with no roles.

    The account can sign in but stays on the pending-approval surface
    until an administrator assigns roles. A welcome email is sent
    after the response; its failure does not affect registration.
    """
    user = AuthService(db).register_user(payload.name, payload.email, payload.password)
    background_tasks.add_task(notifications.send_welcome_email, Recipient(user.email, user.name))

    return {
        "message": "User registered successfully",
        "user_id": str(user.id),
        "lifecycle_state": LifecycleState.PENDING,
    }


# =====================================
# Login / Refresh / Logout
# =====================================

@router.post(
    "/login",
    response_model=TokenResponse,
    summary="User Login",
    responses={
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
)
def login(
    request: Request,
    login_data: LoginRequest,
    db: Session = Depends(get_db),
) -> dict:
    """
    Authenticate user and return JWT tokens.

    Security features:
    - Account locks after MAX_LOGIN_ATTEMPTS failed attempts
    - Rate limited per IP
    - All attempts are logged
    """
    client_ip = request.client.host if request.client else "unknown"
    user, tokens = AuthService(db).authenticate_user(
        email=login_data.email,
        password=login_data.password,
        ip_address=client_ip,
        user_agent=request.headers.get("user-agent"),
    )

    logger.info(
        "User logged in successfully",
        extra={
            "user_id": str(user.id),
            "lifecycle_state": lifecycle_state(user.roles).value,
            "ip_address": client_ip,
        }
    )
    return tokens


@router.post("/refresh", response_model=TokenResponse, summary="Refresh Access Token")
def refresh_token(
    refresh_data: RefreshTokenRequest,
    db: Session = Depends(get_db),
) -> dict:
    return AuthService(db).refresh_tokens(refresh_data.refresh_token)


@router.post("/logout", response_model=LogoutResponse, summary="Logout")
def logout(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Invalidate every token issued to the caller."""
    AuthService(db).logout(current_user)
    return {"message": "Successfully logged out"}


# =====================================
# Session Information
# =====================================

@router.get("/me", response_model=MeResponse, summary="Current Account")
def me(current_user: User = Depends(get_current_user)) -> dict:
    """Available to pending accounts too, so the UI can route them."""
    state = lifecycle_state(current_user.roles)
    return {
        "id": str(current_user.id),
        "email": current_user.email,
        "name": current_user.name,
        "bio": current_user.bio,
        "roles": sorted(current_user.roles, key=lambda r: r.value),
        "lifecycle_state": state,
        "reachable_surfaces": sorted(reachable_surfaces(state)),
    }


@router.get("/navigation", response_model=NavigationResponse, summary="Route Decision")
def navigation(
    path: str = Query(..., description="UI path being requested"),
    current_user: Optional[User] = Depends(get_current_user_optional),
) -> dict:
    """
    Decide whether the caller may open ``path`` or where to send them.

    Anonymous callers are answered as well.
    """
    roles = current_user.roles if current_user is not None else None
    decision = route_decision(path, roles)
    return {
        "path": path,
        "allowed": decision.allowed,
        "redirect_to": decision.redirect_to,
        "lifecycle_state": lifecycle_state(roles) if roles is not None else None,
    }


# =====================================
# Pending Approval Surface
# =====================================

pending_router = APIRouter(tags=["Authentication"])


@pending_router.get(PENDING_PATH, summary="Pending Approval")
def pending_approval(current_user: Optional[User] = Depends(get_current_user_optional)):
    """
    Informational surface for accounts awaiting approval.

    Anyone else is redirected: anonymous callers to sign-in, approved
    accounts to home.
    """
    decision = route_decision(PENDING_PATH, current_user.roles if current_user else None)
    if not decision.allowed:
        return RedirectResponse(decision.redirect_to, status_code=status.HTTP_303_SEE_OTHER)

    return {
        "message": "Your account is awaiting administrator approval.",
        "email": current_user.email,
        "lifecycle_state": LifecycleState.PENDING,
        "reachable_surfaces": sorted(reachable_surfaces(LifecycleState.PENDING)),
    }
