"""
Account Service Module
======================

Account administration and self-service profile management.

Administration:
- list and search accounts, including pending ones
- replace an account's role set (never one's own)
- delete an account (never one's own, never an ADMIN, never while
  the account still owns content)

Role changes are the only way an account moves between pending,
active and administrator states.
"""

from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from portal.core.enums import ContentStatus
from portal.core.exceptions import (
    EmailAlreadyExistsError,
    ProtectedAccountError,
    RoleNotAuthorizedError,
    SelfProtectionError,
    UserHasContentError,
    UserNotFoundError,
    ValidationError,
)
from portal.core.logging import get_logger, audit_logger, security_logger
from portal.core.policy import access_policy
from portal.core.policy.confirmation import require_confirmation
from portal.models.content import Article, NewsItem
from portal.models.document import Document
from portal.models.member import Member
from portal.models.role_enum import Role
from portal.models.user import User, UserRoleAssignment
from portal.schemas.user import ProfileUpdate

logger = get_logger(__name__)

NO_ROLE_FILTER = "none"

MEMBER_PROFILE_FIELDS = (
    "date_of_birth",
    "place_of_birth",
    "avatar_url",
    "mobile_numbers",
    "title",
    "organization",
    "instagram",
    "github",
    "facebook",
    "x",
    "linkedin",
)


class AccountService:
    """
    Usage:
        service = AccountService(db)
        user, old_roles = service.assign_roles(target_id, current_user, [Role.USER])
    """

    def __init__(self, db: Session):
        self.db = db

    # --------------------------
    # Guards
    # --------------------------

    def _require_admin(self, caller: User, resource: str, action: str) -> None:
        if not access_policy.can_manage_users(caller.roles):
            security_logger.log_unauthorized_access(str(caller.id), resource, action)
            raise RoleNotAuthorizedError(required_roles=[Role.ADMIN.value])

    def get_user(self, user_id: UUID) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(identifier=str(user_id))
        return user

    # --------------------------
    # Listing
    # --------------------------

    def list_users(
        self,
        caller: User,
        search: Optional[str] = None,
        role: Optional[str] = None,
    ) -> List[User]:
        """
        List accounts for administration.

        Args:
            search: Case-insensitive match on name or email
            role: A role name, or ``"none"`` for pending accounts

        Raises:
            ValidationError: Unknown role filter
        """
        self._require_admin(caller, "users", "list")

        query = self.db.query(User)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

        if role:
            if role.lower() == NO_ROLE_FILTER:
                query = query.filter(~User.role_assignments.any())
            else:
                try:
                    wanted = Role(role.upper())
                except ValueError:
                    raise ValidationError("Unknown role filter", details={"role": role})
                query = query.filter(User.role_assignments.any(UserRoleAssignment.role == wanted))

        return query.order_by(User.created_at.desc()).all()

    def list_linkable_users(self, caller: User) -> List[User]:
        """Accounts without a member profile, for linking new members."""
        self._require_admin(caller, "users", "list_linkable")
        return self.db.query(User).filter(~User.member.has()).order_by(User.name.asc()).all()

    def dashboard_stats(self, caller: User) -> dict:
        self._require_admin(caller, "dashboard", "view")

        role_counts = {role.value: 0 for role in Role}
        for role, count in (
            self.db.query(UserRoleAssignment.role, func.count(UserRoleAssignment.user_id))
            .group_by(UserRoleAssignment.role)
            .all()
        ):
            role_counts[role.value] = count

        documents_by_status = {status.value: 0 for status in ContentStatus}
        for status, count in (
            self.db.query(Document.status, func.count(Document.id)).group_by(Document.status).all()
        ):
            documents_by_status[status.value] = count

        return {
            "total_users": self.db.query(func.count(User.id)).scalar(),
            "pending_users": self.db.query(func.count(User.id)).filter(~User.role_assignments.any()).scalar(),
            "role_counts": role_counts,
            "total_documents": sum(documents_by_status.values()),
            "documents_by_status": documents_by_status,
            "total_members": self.db.query(func.count(Member.id)).scalar(),
        }

    # --------------------------
    # Role Assignment
    # --------------------------

    def assign_roles(self, target_id: UUID, caller: User, roles: List[Role]) -> Tuple[User, frozenset]:
        """
        Replace the target's role set. An empty list makes it pending.

        Returns:
            (user, previous_roles)

        Raises:
            RoleNotAuthorizedError: Caller lacks ADMIN
            UserNotFoundError: No such account
            SelfProtectionError: Caller targeted their own account
        """
        self._require_admin(caller, f"user:{target_id}", "assign_roles")
        target = self.get_user(target_id)

        if not access_policy.can_assign_roles(target.id, caller.roles, caller.id):
            security_logger.log_unauthorized_access(str(caller.id), f"user:{target_id}", "assign_roles")
            raise SelfProtectionError("change the roles of")

        previous = target.roles
        target.set_roles(roles)
        self.db.commit()
        self.db.refresh(target)

        audit_logger.log_roles_assigned(
            actor_id=str(caller.id),
            target_id=str(target.id),
            old_roles=sorted(r.value for r in previous),
            new_roles=sorted(r.value for r in target.roles),
        )
        return target, previous

    # --------------------------
    # Account Deletion
    # --------------------------

    def owned_content(self, user_id: UUID) -> Tuple[Dict[str, int], Dict[str, List[str]]]:
        """Titles of every document, article and news item the account authored."""
        details = {
            "documents": [t for (t,) in self.db.query(Document.title).filter(Document.author_id == user_id)],
            "articles": [t for (t,) in self.db.query(Article.title).filter(Article.author_id == user_id)],
            "news": [t for (t,) in self.db.query(NewsItem.title).filter(NewsItem.author_id == user_id)],
        }
        summary = {kind: len(titles) for kind, titles in details.items()}
        return summary, details

    def delete_account(self, target_id: UUID, caller: User, email_confirmation: Optional[str]) -> dict:
        """
        Delete an account and its member profile.

        Returns:
            Summary of the deleted account

        Raises:
            RoleNotAuthorizedError: Caller lacks ADMIN
            UserNotFoundError: No such account
            ConfirmationMismatchError: Typed email does not match
            SelfProtectionError: Caller targeted their own account
            ProtectedAccountError: Target holds ADMIN
            UserHasContentError: Target still authors content
        """
        self._require_admin(caller, f"user:{target_id}", "delete")
        target = self.get_user(target_id)

        flow = require_confirmation(target.email, email_confirmation, field="email")

        if not access_policy.can_delete_account(target.id, target.roles, caller.roles, caller.id):
            security_logger.log_unauthorized_access(str(caller.id), f"user:{target_id}", "delete")
            if target.id == caller.id:
                raise SelfProtectionError("delete")
            raise ProtectedAccountError()

        summary, details = self.owned_content(target.id)
        if any(summary.values()):
            raise UserHasContentError(content_summary=summary, content_details=details)

        deleted = {
            "id": str(target.id),
            "name": target.name,
            "email": target.email,
            "had_member_profile": target.member is not None,
        }
        self.db.delete(target)
        self.db.commit()
        flow.complete()

        audit_logger.log_account_deleted(str(caller.id), deleted["id"], deleted["email"])
        return deleted

    # --------------------------
    # Profile
    # --------------------------

    @staticmethod
    def profile(user: User) -> dict:
        data = user.to_dict()
        data["member"] = user.member.to_dict() if user.member else None
        return data

    def update_profile(self, user: User, payload: ProfileUpdate) -> User:
        """
        Update the caller's own account and linked member profile.

        Raises:
            EmailAlreadyExistsError: Email used by another account
        """
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("name"):
            user.name = changes["name"].strip()

        if changes.get("email"):
            email = changes["email"].lower()
            taken = self.db.query(User.id).filter(User.email == email, User.id != user.id).first()
            if taken:
                raise EmailAlreadyExistsError()
            user.email = email

        if "bio" in changes:
            user.bio = changes["bio"]

        member = user.member
        if member is not None:
            if "bio" in changes:
                member.bio = changes["bio"]
            for field in MEMBER_PROFILE_FIELDS:
                if field in changes and not (field == "mobile_numbers" and changes[field] is None):
                    setattr(member, field, changes[field])

        self.db.commit()
        self.db.refresh(user)
        logger.info("Profile updated", extra={"user_id": str(user.id), "fields": sorted(changes)})
        return user
