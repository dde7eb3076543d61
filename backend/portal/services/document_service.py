"""
Document Service Module
=======================

Document CRUD with policy enforcement.

Every mutation asks the access policy first and raises before the
session is touched when the answer is no. A transition into
PUBLISHED is reported back to the caller so the route can schedule
publish notifications after the response.
"""

import re
import time
import uuid
from datetime import datetime, UTC
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from portal.core.enums import ContentStatus, DocumentCategory
from portal.core.exceptions import (
    AuthorizationError,
    DocumentNotFoundError,
    DuplicateDocumentError,
    RoleNotAuthorizedError,
)
from portal.core.logging import get_logger, audit_logger, security_logger
from portal.core.policy import access_policy
from portal.core.policy.confirmation import require_confirmation
from portal.core.policy.document_query import DocumentVisibilityQuery
from portal.models.document import Document
from portal.models.role_enum import Role
from portal.models.user import User, UserRoleAssignment
from portal.schemas.document import DocumentCreate, DocumentUpdate
from portal.services.notification_service import PublishedDocumentNotice, Recipient

logger = get_logger(__name__)


def slugify(title: str) -> str:
    """Lower-case, collapse non-alphanumerics to dashes, trim dashes."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or f"document-{uuid.uuid4().hex[:8]}"


class DocumentService:
    """
    Usage:
        service = DocumentService(db)
        document, published = service.create_document(current_user, payload)
    """

    def __init__(self, db: Session):
        self.db = db

    # --------------------------
    # Reads
    # --------------------------

    def list_documents(
        self,
        caller: User,
        status: Optional[ContentStatus] = None,
        category: Optional[DocumentCategory] = None,
        search: Optional[str] = None,
    ) -> List[Document]:
        query = DocumentVisibilityQuery(self.db, caller.roles)
        return query.filter(status=status, category=category, search=search).all()

    def _get(self, slug: str) -> Document:
        document = self.db.query(Document).filter(Document.slug == slug).first()
        if document is None:
            raise DocumentNotFoundError(identifier=slug)
        return document

    def get_document(self, slug: str, caller: User) -> Document:
        """
        Fetch a document the caller may read.

        Raises:
            DocumentNotFoundError: No document with this slug
            AuthorizationError: Classification or status gate failed
        """
        document = self._get(slug)
        roles = caller.roles

        if not access_policy.can_view_document(document.classification, roles):
            security_logger.log_unauthorized_access(str(caller.id), f"document:{slug}", "view")
            raise AuthorizationError("Access denied")

        if not access_policy.can_view_document_status(document.status, roles):
            security_logger.log_unauthorized_access(str(caller.id), f"document:{slug}", "view")
            raise AuthorizationError("Document not available")

        return document

    # --------------------------
    # Writes
    # --------------------------

    def create_document(self, caller: User, payload: DocumentCreate) -> Tuple[Document, bool]:
        """
        Create a document authored by the caller.

        Returns:
            (document, published) where ``published`` is True when the
            document was created directly as PUBLISHED

        Raises:
            RoleNotAuthorizedError: Caller lacks OFFICIAL
            DuplicateDocumentError: Slug derived from the title is taken
        """
        if not access_policy.can_create_document(caller.roles):
            security_logger.log_unauthorized_access(str(caller.id), "document", "create")
            raise RoleNotAuthorizedError(required_roles=[Role.OFFICIAL.value])

        slug = slugify(payload.title)
        if self.db.query(Document.id).filter(Document.slug == slug).first():
            raise DuplicateDocumentError(slug)

        published = payload.status == ContentStatus.PUBLISHED
        document = Document(
            slug=slug,
            title=payload.title,
            description=payload.description,
            content=payload.content,
            category=payload.category,
            classification=payload.classification,
            status=payload.status,
            tags=payload.tags,
            version=payload.version,
            effective_date=payload.effective_date,
            published_at=datetime.now(UTC) if published else None,
            author_id=caller.id,
        )
        self.db.add(document)
        self.db.commit()
        self.db.refresh(document)

        logger.info("Document created", extra={"slug": slug, "author_id": str(caller.id)})
        if published:
            audit_logger.log_document_published(str(caller.id), str(document.id), document.title)
        return document, published

    def _unique_slug_for_rename(self, title: str, document_id: uuid.UUID) -> str:
        slug = slugify(title)
        clash = (
            self.db.query(Document.id)
            .filter(Document.slug == slug, Document.id != document_id)
            .first()
        )
        if clash:
            slug = f"{slug}-{int(time.time() * 1000)}"
        return slug

    def update_document(self, slug: str, caller: User, payload: DocumentUpdate) -> Tuple[Document, bool]:
        """
        Apply a partial update.

        Returns:
            (document, became_published) where ``became_published`` is
            True only for a transition from another status into PUBLISHED

        Raises:
            DocumentNotFoundError: No document with this slug
            AuthorizationError: Edit policy denied the caller
        """
        document = self._get(slug)

        if not access_policy.can_edit_document(document.author_id, caller.roles, caller.id):
            security_logger.log_unauthorized_access(str(caller.id), f"document:{slug}", "edit")
            raise AuthorizationError("You don't have permission to edit this document")

        changes = payload.model_dump(exclude_unset=True)
        previous_status = document.status

        if changes.get("title") and changes["title"] != document.title:
            document.slug = self._unique_slug_for_rename(changes["title"], document.id)

        for field, value in changes.items():
            if value is None and field in ("title", "status", "category", "classification", "tags", "version"):
                continue
            setattr(document, field, value)

        became_published = (
            previous_status != ContentStatus.PUBLISHED
            and document.status == ContentStatus.PUBLISHED
        )
        if became_published:
            document.published_at = datetime.now(UTC)

        self.db.commit()
        self.db.refresh(document)

        logger.info("Document updated", extra={"slug": document.slug, "fields": sorted(changes)})
        if became_published:
            audit_logger.log_document_published(str(caller.id), str(document.id), document.title)
        return document, became_published

    def delete_document(self, slug: str, caller: User, title_confirmation: Optional[str]) -> None:
        """
        Delete a document after an exact title confirmation.

        Raises:
            RoleNotAuthorizedError: Caller lacks ADMIN
            DocumentNotFoundError: No document with this slug
            ConfirmationMismatchError: Typed title does not match
        """
        if not access_policy.can_delete_document(caller.roles):
            security_logger.log_unauthorized_access(str(caller.id), f"document:{slug}", "delete")
            raise RoleNotAuthorizedError(required_roles=[Role.ADMIN.value])

        document = self._get(slug)
        flow = require_confirmation(document.title, title_confirmation, field="title")
        document_id, title = str(document.id), document.title

        self.db.delete(document)
        self.db.commit()
        flow.complete()

        audit_logger.log_document_deleted(str(caller.id), document_id, title)

    # --------------------------
    # Notifications
    # --------------------------

    def notification_recipients(self, author_id: uuid.UUID) -> List[Recipient]:
        """Every account holding at least one role, except the author."""
        users = (
            self.db.query(User)
            .join(UserRoleAssignment, UserRoleAssignment.user_id == User.id)
            .filter(User.id != author_id, User.is_active.is_(True))
            .distinct()
            .all()
        )
        return [Recipient(email=u.email, name=u.name) for u in users]

    @staticmethod
    def publish_notice(document: Document) -> PublishedDocumentNotice:
        return PublishedDocumentNotice(
            title=document.title,
            slug=document.slug,
            category=document.category.value,
            description=document.description,
            author_name=document.author.name if document.author else "",
        )
