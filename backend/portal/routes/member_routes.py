"""
Member Routes Module
====================

Endpoints:
- GET    /members                    directory listing (status, search)
- POST   /members                    create (ADMIN)
- GET    /members/by-name/{slug}     lookup by public name slug
- GET    /members/{member_id}        read
- PUT    /members/{member_id}        update (ADMIN, MODERATOR or owner)
- DELETE /members/{member_id}        delete (ADMIN, typed name confirmation)
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from portal.core.dependencies.auth import require_active_account
from portal.core.enums import MemberStatus
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas import (
    ErrorResponse,
    MemberCreate,
    MemberDeleteRequest,
    MemberListResponse,
    MemberResponse,
    MemberUpdate,
)
from portal.services.member_service import MemberService

router = APIRouter(
    prefix="/members",
    tags=["Members"],
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        403: {"model": ErrorResponse, "description": "Access denied"},
        404: {"model": ErrorResponse, "description": "Member not found"},
    },
)


@router.get("", response_model=MemberListResponse)
def list_members(
    status_filter: Optional[MemberStatus] = Query(default=None, alias="status"),
    search: Optional[str] = None,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> dict:
    members = MemberService(db).list_members(status=status_filter, search=search)
    return {"members": [m.to_dict() for m in members], "total": len(members)}


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
def create_member(
    payload: MemberCreate,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> dict:
    return MemberService(db).create_member(current_user, payload).to_dict()


@router.get("/by-name/{slug}", response_model=MemberResponse)
def get_member_by_name(
    slug: str,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> dict:
    return MemberService(db).get_member_by_slug(slug).to_dict()


@router.get("/{member_id}", response_model=MemberResponse)
def get_member(
    member_id: UUID,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> dict:
    return MemberService(db).get_member(member_id).to_dict()


@router.put("/{member_id}", response_model=MemberResponse)
def update_member(
    member_id: UUID,
    payload: MemberUpdate,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> dict:
    return MemberService(db).update_member(member_id, current_user, payload).to_dict()


@router.delete("/{member_id}")
def delete_member(
    member_id: UUID,
    payload: Optional[MemberDeleteRequest] = None,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> dict:
    """Irreversible. ``name_confirmation`` must equal the member name exactly."""
    MemberService(db).delete_member(
        member_id, current_user, payload.name_confirmation if payload else None
    )
    return {"message": "Member deleted successfully"}
