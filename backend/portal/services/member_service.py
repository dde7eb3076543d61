"""
Member Service Module
=====================

Member directory CRUD with policy enforcement.

A member profile linked to an ADMIN account is protected: only that
account may edit it and nobody may delete it.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from portal.core.enums import MemberStatus
from portal.core.exceptions import (
    AuthorizationError,
    ConflictError,
    MemberNotFoundError,
    RoleNotAuthorizedError,
    UserNotFoundError,
)
from portal.core.logging import get_logger, audit_logger, security_logger
from portal.core.policy import access_policy
from portal.core.policy.confirmation import require_confirmation
from portal.models.member import Member, member_slug
from portal.models.role_enum import Role
from portal.models.user import User
from portal.schemas.member import MemberCreate, MemberUpdate

logger = get_logger(__name__)


class MemberService:

    def __init__(self, db: Session):
        self.db = db

    def list_members(
        self,
        status: Optional[MemberStatus] = None,
        search: Optional[str] = None,
    ) -> List[Member]:
        query = self.db.query(Member)
        if status is not None:
            query = query.filter(Member.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Member.name.ilike(pattern),
                    Member.title.ilike(pattern),
                    Member.organization.ilike(pattern),
                    Member.email.ilike(pattern),
                )
            )
        return query.order_by(Member.name.asc()).all()

    def get_member(self, member_id: UUID) -> Member:
        member = self.db.get(Member, member_id)
        if member is None:
            raise MemberNotFoundError(identifier=str(member_id))
        return member

    def get_member_by_slug(self, slug: str) -> Member:
        # Slugs are compared in Python; SQLite's ILIKE folds ASCII only.
        wanted = slug.lower()
        for member in self.db.query(Member).order_by(Member.created_at.asc()):
            if member_slug(member.name) == wanted:
                return member
        raise MemberNotFoundError(identifier=slug)

    def _ensure_email_free(self, email: str, exclude_id: Optional[UUID] = None) -> None:
        query = self.db.query(Member.id).filter(Member.email == email)
        if exclude_id is not None:
            query = query.filter(Member.id != exclude_id)
        if query.first():
            raise ConflictError("A member with this email already exists", details={"email": email})

    def create_member(self, caller: User, payload: MemberCreate) -> Member:
        """
        Create a member profile, optionally linked to an account.

        Raises:
            RoleNotAuthorizedError: Caller lacks ADMIN
            ConflictError: Email taken, or the account already has a profile
            UserNotFoundError: ``user_id`` does not exist
        """
        if not access_policy.can_create_member(caller.roles):
            security_logger.log_unauthorized_access(str(caller.id), "member", "create")
            raise RoleNotAuthorizedError(required_roles=[Role.ADMIN.value])

        email = payload.email.lower()
        self._ensure_email_free(email)

        linked = None
        if payload.user_id is not None:
            linked = self.db.get(User, payload.user_id)
            if linked is None:
                raise UserNotFoundError(identifier=str(payload.user_id))
            if self.db.query(Member.id).filter(Member.user_id == payload.user_id).first():
                raise ConflictError(
                    "This user is already linked to a member profile",
                    details={"user_id": str(payload.user_id)},
                )

        data = payload.model_dump(exclude_none=True)
        data["email"] = email
        member = Member(**data)
        if linked is not None:
            member.user = linked
        self.db.add(member)
        self.db.commit()
        self.db.refresh(member)

        logger.info("Member created", extra={"member_id": str(member.id), "linked": member.user_id is not None})
        return member

    def update_member(self, member_id: UUID, caller: User, payload: MemberUpdate) -> Member:
        """
        Raises:
            MemberNotFoundError: No such member
            AuthorizationError: Edit policy denied the caller
            ConflictError: New email is taken
        """
        member = self.get_member(member_id)

        if not access_policy.can_edit_member(
            member.user_id, member.linked_account_is_admin, caller.roles, caller.id
        ):
            security_logger.log_unauthorized_access(str(caller.id), f"member:{member_id}", "edit")
            raise AuthorizationError("You don't have permission to edit this member")

        changes = payload.model_dump(exclude_unset=True)
        if changes.get("email"):
            changes["email"] = changes["email"].lower()
            self._ensure_email_free(changes["email"], exclude_id=member.id)

        for field, value in changes.items():
            if value is None and field in ("name", "email", "status", "mobile_numbers"):
                continue
            setattr(member, field, value)

        self.db.commit()
        self.db.refresh(member)
        logger.info("Member updated", extra={"member_id": str(member.id), "fields": sorted(changes)})
        return member

    def delete_member(self, member_id: UUID, caller: User, name_confirmation: Optional[str]) -> None:
        """
        Delete a member profile after an exact name confirmation.

        Raises:
            RoleNotAuthorizedError: Caller lacks ADMIN
            MemberNotFoundError: No such member
            AuthorizationError: The profile belongs to an ADMIN account
            ConfirmationMismatchError: Typed name does not match
        """
        if not access_policy.can_manage_users(caller.roles):
            security_logger.log_unauthorized_access(str(caller.id), f"member:{member_id}", "delete")
            raise RoleNotAuthorizedError(required_roles=[Role.ADMIN.value])

        member = self.get_member(member_id)

        if not access_policy.can_delete_member(member.linked_account_is_admin, caller.roles):
            security_logger.log_unauthorized_access(str(caller.id), f"member:{member_id}", "delete")
            raise AuthorizationError("Cannot delete a member profile linked to an administrator")

        flow = require_confirmation(member.name, name_confirmation, field="name")
        name, linked_user = member.name, member.user

        self.db.delete(member)
        self.db.commit()
        if linked_user is not None:
            self.db.expire(linked_user, ["member"])
        flow.complete()

        audit_logger.log_member_deleted(str(caller.id), str(member_id), name)
