"""
Member Model
============

Community directory profile. A member may be linked 1:1 to a user
account through ``user_id``; the link decides who owns the profile
and whether it is protected as an administrator's profile.

``status`` is descriptive only and never gates access.
"""

import re
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    String,
    Text,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    JSON,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship, Mapped, mapped_column

from portal.core.enums import MemberStatus
from portal.db.base import Base
from portal.models.role_enum import Role
from portal.models.user import utcnow

if TYPE_CHECKING:
    from portal.models.user import User


SOCIAL_FIELDS = ("instagram", "github", "facebook", "x", "linkedin")


def member_slug(name: str) -> str:
    """Public URL identifier for a member: lower-cased, whitespace to dashes."""
    return re.sub(r"\s+", "-", name.strip().lower())


class Member(Base):
    """Member directory entry."""

    __tablename__ = "members"

    def __init__(self, **kwargs):
        kwargs.setdefault("status", MemberStatus.ACTIVE)
        kwargs.setdefault("mobile_numbers", [])
        super().__init__(**kwargs)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[MemberStatus] = mapped_column(
        SAEnum(MemberStatus, name="member_status_enum"),
        nullable=False,
        default=MemberStatus.ACTIVE,
    )

    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    place_of_birth: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    mobile_numbers: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    organization: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Social links
    instagram: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    github: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    facebook: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    x: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    linkedin: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=True,
    )
    user: Mapped[Optional["User"]] = relationship("User", back_populates="member")

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

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, name={self.name}, user_id={self.user_id})>"

    @property
    def slug(self) -> str:
        return member_slug(self.name)

    @property
    def linked_account_is_admin(self) -> bool:
        """True when the linked account currently holds ADMIN."""
        return self.user is not None and Role.ADMIN in self.user.roles

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "slug": self.slug,
            "name": self.name,
            "email": self.email,
            "bio": self.bio,
            "status": self.status.value,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "place_of_birth": self.place_of_birth,
            "avatar_url": self.avatar_url,
            "mobile_numbers": list(self.mobile_numbers or []),
            "title": self.title,
            "organization": self.organization,
            "social": {field: getattr(self, field) for field in SOCIAL_FIELDS},
            "user_id": str(self.user_id) if self.user_id else None,
            "linked_account_is_admin": self.linked_account_is_admin,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
