"""
Admin Routes Module
===================

Administrative endpoints for account management.

Features:
- Dashboard statistics
- Account search, including pending accounts (``role=none``)
- Accounts available for member linking
- Role assignment, the only way out of the pending state
- Account deletion with typed email confirmation

Security:
- All endpoints require ADMIN
- Nobody can change their own roles or delete their own account
- All mutations are audit logged
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from portal.core.dependencies.rbac import require_admin
from portal.core.logging import get_logger
from portal.core.policy.account_lifecycle import lifecycle_state
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas import (
    AccountDeleteRequest,
    AccountDeleteResponse,
    DashboardResponse,
    ErrorResponse,
    LinkableUserResponse,
    RoleAssignmentRequest,
    UserListResponse,
    UserResponse,
)
from portal.services.account_service import AccountService
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
    prefix="/admin",
    tags=["Admin"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Insufficient permissions"},
    },
)


@router.get("/dashboard", response_model=DashboardResponse, summary="Admin Dashboard")
def admin_dashboard(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    return AccountService(db).dashboard_stats(current_user)


# =====================================
# Accounts
# =====================================

@router.get("/users", response_model=UserListResponse, summary="List Accounts")
def list_users(
    search: Optional[str] = Query(default=None, description="Match on name or email"),
    role: Optional[str] = Query(default=None, description="Role name, or 'none' for pending accounts"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    users = AccountService(db).list_users(current_user, search=search, role=role)
    return {"users": [u.to_dict() for u in users], "total": len(users)}


@router.get(
    "/users/linkable",
    response_model=List[LinkableUserResponse],
    summary="Accounts Without Member Profile",
)
def list_linkable_users(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list:
    users = AccountService(db).list_linkable_users(current_user)
    return [{"id": str(u.id), "email": u.email, "name": u.name} for u in users]


@router.get("/users/{user_id}", response_model=UserResponse, summary="Get Account")
def get_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    return AccountService(db).get_user(user_id).to_dict()


@router.put("/users/{user_id}/roles", response_model=UserResponse, summary="Assign Roles")
def assign_roles(
    user_id: UUID,
    payload: RoleAssignmentRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> dict:
    """
    Replace the account's role set.

    An empty list sends the account back to pending. The account
    holder is emailed after the response.
    """
    user, previous = AccountService(db).assign_roles(user_id, current_user, payload.roles)

    logger.info(
        "Roles assigned",
        extra={
            "target_id": str(user.id),
            "from_state": lifecycle_state(previous).value,
            "to_state": lifecycle_state(user.roles).value,
        }
    )
    background_tasks.add_task(
        notifications.send_role_assignment_email,
        Recipient(user.email, user.name),
        sorted(user.roles, key=lambda r: r.value),
    )
    return user.to_dict()


@router.delete("/users/{user_id}", response_model=AccountDeleteResponse, summary="Delete Account")
def delete_user(
    user_id: UUID,
    payload: Optional[AccountDeleteRequest] = None,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    """
    Delete an account and its member profile.

    Blocked with 409 while the account still authors documents,
    articles or news; the blocking titles are returned in ``details``.
    """
    deleted = AccountService(db).delete_account(
        user_id, current_user, payload.email_confirmation if payload else None
    )
    return {"message": "User deleted successfully", "deleted_user": deleted}
