"""
Document Model
==============

Legal and official documents published through the portal.

Access attributes consumed by the policy layer:
- classification: confidentiality tier
- status: publication stage
- author_id: the single owning account

Database Indexes:
- Primary key: id (UUID)
- Unique index: slug
- Index: author_id, status
"""

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

from portal.core.enums import ContentStatus, DocumentCategory, DocumentClassification
from portal.db.base import Base
from portal.models.user import utcnow

if TYPE_CHECKING:
    from portal.models.user import User


content_status_enum = SAEnum(ContentStatus, name="content_status_enum")


class Document(Base):
    """
    Document entity.

    Attributes:
        slug: URL identifier derived from the title
        tags: List of free-form tags
        version: Free-form version label (e.g. "1.0")
        effective_date: Date the document takes legal effect
        published_at: Set when the document first becomes PUBLISHED
    """

    __tablename__ = "documents"

    def __init__(self, **kwargs):
        kwargs.setdefault("classification", DocumentClassification.PUBLIC)
        kwargs.setdefault("status", ContentStatus.DRAFT)
        kwargs.setdefault("category", DocumentCategory.OTHER)
        kwargs.setdefault("tags", [])
        kwargs.setdefault("version", "1.0")
        super().__init__(**kwargs)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    category: Mapped[DocumentCategory] = mapped_column(
        SAEnum(DocumentCategory, name="document_category_enum"),
        nullable=False,
        default=DocumentCategory.OTHER,
    )
    classification: Mapped[DocumentClassification] = mapped_column(
        SAEnum(DocumentClassification, name="document_classification_enum"),
        nullable=False,
        default=DocumentClassification.PUBLIC,
    )
    status: Mapped[ContentStatus] = mapped_column(
        content_status_enum,
        nullable=False,
        default=ContentStatus.DRAFT,
        index=True,
    )

    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[str] = mapped_column(String(50), nullable=False, default="1.0")
    effective_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Authors with content cannot be deleted; see AccountService.delete_account
    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    author: Mapped["User"] = relationship("User", lazy="joined")

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
        return f"<Document(slug={self.slug}, status={self.status.value}, classification={self.classification.value})>"

    @property
    def is_published(self) -> bool:
        return self.status == ContentStatus.PUBLISHED

    def to_dict(self, include_content: bool = True) -> dict:
        data = {
            "id": str(self.id),
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "classification": self.classification.value,
            "status": self.status.value,
            "tags": list(self.tags or []),
            "version": self.version,
            "effective_date": self.effective_date.isoformat() if self.effective_date else None,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "author": {
                "id": str(self.author_id),
                "name": self.author.name if self.author else None,
            },
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_content:
            data["content"] = self.content
        return data
