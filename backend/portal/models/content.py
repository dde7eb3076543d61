"""
Authored Content Models
=======================

Articles and news items. The portal only needs them as authored
content: their existence blocks deletion of the authoring account.
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from portal.core.enums import ContentStatus
from portal.db.base import Base
from portal.models.document import content_status_enum
from portal.models.user import utcnow


class AuthoredContentMixin:
    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[ContentStatus] = mapped_column(
        content_status_enum,
        nullable=False,
        default=ContentStatus.DRAFT,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )


class Article(AuthoredContentMixin, Base):
    __tablename__ = "articles"

    def __repr__(self) -> str:
        return f"<Article(slug={self.slug})>"


class NewsItem(AuthoredContentMixin, Base):
    __tablename__ = "news"

    def __repr__(self) -> str:
        return f"<NewsItem(slug={self.slug})>"
