"""
Profile Routes Module
=====================

Self-service account endpoints:
- GET  /user/profile            own account and linked member profile
- PUT  /user/profile            update own account and member fields
- POST /user/change-password    change password and sign out everywhere
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal.core.dependencies.auth import require_active_account
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas import ErrorResponse, PasswordChangeRequest, PasswordChangeResponse, ProfileUpdate
from portal.services.account_service import AccountService
from portal.services.auth_service import AuthService

router = APIRouter(
    prefix="/user",
    tags=["Profile"],
    responses={401: {"model": ErrorResponse, "description": "Authentication required"}},
)


@router.get("/profile")
def get_profile(current_user: User = Depends(require_active_account)) -> dict:
    return AccountService.profile(current_user)


@router.put("/profile")
def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> dict:
    user = AccountService(db).update_profile(current_user, payload)
    return {"message": "Profile updated successfully", "user": AccountService.profile(user)}


@router.post("/change-password", response_model=PasswordChangeResponse)
def change_password(
    payload: PasswordChangeRequest,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> dict:
    """Every issued token is invalidated; the client must sign in again."""
    AuthService(db).change_password(current_user, payload.current_password, payload.new_password)
    return {"message": "Password changed successfully", "should_logout": True}
