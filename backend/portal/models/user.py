"""
User Model
==========

Security Features:
- Roles stored as a set of independent flags (``user_roles`` table)
- Account lock after configurable failed attempts
- Token version for JWT invalidation
- Soft disable via is_active flag

Database Indexes:
- Primary key: id (UUID)
- Unique index: email
- Composite primary key on user_roles: (user_id, role)
"""

import uuid
from datetime import datetime, UTC
from typing import TYPE_CHECKING, FrozenSet, Iterable, List, Optional

from sqlalchemy import (
    String,
    Text,
    Boolean,
    Integer,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship, Mapped, mapped_column

from portal.db.base import Base
from portal.models.role_enum import Role

if TYPE_CHECKING:
    from portal.models.member import Member


def utcnow() -> datetime:
    return datetime.now(UTC)


role_enum = SAEnum(Role, name="role_enum")


class UserRoleAssignment(Base):
    """One role flag held by one account."""

    __tablename__ = "user_roles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    role: Mapped[Role] = mapped_column(role_enum, primary_key=True)

    user: Mapped["User"] = relationship("User", back_populates="role_assignments")

    def __repr__(self) -> str:
        return f"<UserRoleAssignment(user_id={self.user_id}, role={self.role.value})>"


class User(Base):
    """
    User entity representing authenticated portal accounts.

    Role Model:
        An account holds zero or more roles. An account with no roles
        is pending approval; only an administrator can grant roles.

    Security Controls:
        - failed_attempts: Counter for failed login attempts
        - is_locked: Account lock flag
        - token_version: For forced logout/token invalidation
        - is_active: Soft disable flag

    Attributes:
        id: UUID primary key
        email: Unique email address (stored lower-cased)
        name: Display name
        bio: Free-text biography
        hashed_password: Argon2 hashed password
        role_assignments: Role rows (see ``roles``)
        member: Linked member profile, if any
    """

    __tablename__ = "users"

    def __init__(self, **kwargs):
        """Initialize User with Python-level defaults."""
        roles = kwargs.pop("roles", None)
        kwargs.setdefault("is_active", True)
        kwargs.setdefault("failed_attempts", 0)
        kwargs.setdefault("is_locked", False)
        kwargs.setdefault("token_version", 1)
        super().__init__(**kwargs)
        if roles:
            self.set_roles(roles)

    # ==========================
    # Primary Key
    # ==========================
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True,
    )

    # ==========================
    # Identity
    # ==========================
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # ==========================
    # Authorization
    # ==========================
    role_assignments: Mapped[List[UserRoleAssignment]] = relationship(
        UserRoleAssignment,
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    member: Mapped[Optional["Member"]] = relationship(
        "Member",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    # ==========================
    # Account Status
    # ==========================
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Lockout Protection
    failed_attempts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    is_locked: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # JWT Version Control
    token_version: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )

    # ==========================
    # Timestamps
    # ==========================
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    # ==========================
    # Methods
    # ==========================

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, roles={sorted(r.value for r in self.roles)})>"

    @property
    def roles(self) -> FrozenSet[Role]:
        """The account's current role set."""
        return frozenset(assignment.role for assignment in self.role_assignments)

    def set_roles(self, roles: Iterable[Role]) -> None:
        """
        Replace the account's role set.

        Existing rows for roles that are kept are left untouched.
        """
        wanted = {Role(r) for r in roles}
        self.role_assignments = [a for a in self.role_assignments if a.role in wanted]
        present = {a.role for a in self.role_assignments}
        for role in sorted(wanted - present, key=lambda r: r.value):
            self.role_assignments.append(UserRoleAssignment(role=role))

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles

    def lock_account(self) -> None:
        """Lock the user account."""
        self.is_locked = True

    def unlock_account(self) -> None:
        """Unlock the user account and reset failed attempts."""
        self.is_locked = False
        self.failed_attempts = 0

    def increment_failed_attempts(self, max_attempts: int = 5) -> bool:
        """
        Increment failed login attempts.

        Args:
            max_attempts: Maximum attempts before lockout

        Returns:
            True if account should be locked
        """
        self.failed_attempts += 1
        if self.failed_attempts >= max_attempts:
            self.lock_account()
            return True
        return False

    def invalidate_tokens(self) -> None:
        """Invalidate all tokens by incrementing version."""
        self.token_version += 1

    def to_dict(self) -> dict:
        """
        Convert user to dictionary (excludes sensitive data).

        Returns:
            Dictionary with user data
        """
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "bio": self.bio,
            "roles": sorted(r.value for r in self.roles),
            "is_active": self.is_active,
            "is_locked": self.is_locked,
            "has_member_profile": self.member is not None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
