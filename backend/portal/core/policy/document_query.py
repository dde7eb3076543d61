"""
Document Visibility Query Module
================================

Builds list queries that return only documents the caller may access.

The allowed classifications and statuses are derived from the pure
access-policy functions, so list filtering and single-document
checks cannot drift apart.
"""

from typing import Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from portal.core.enums import ContentStatus, DocumentCategory
from portal.core.policy.access_policy import visible_classifications, visible_statuses
from portal.models.document import Document
from portal.models.role_enum import Role


class DocumentVisibilityQuery:
    """
    Helper for role-filtered document queries.

    Usage:
        query = DocumentVisibilityQuery(db, current_user.roles)
        documents = query.filter(search="budget").all()
    """

    def __init__(self, db: Session, caller_roles: Iterable[Role]):
        self.db = db
        self.caller_roles = frozenset(caller_roles)

    def visible(self) -> Query:
        """Base query restricted to what the caller passes both gates for."""
        return self.db.query(Document).filter(
            Document.classification.in_(list(visible_classifications(self.caller_roles))),
            Document.status.in_(list(visible_statuses(self.caller_roles))),
        )

    def filter(
        self,
        status: Optional[ContentStatus] = None,
        category: Optional[DocumentCategory] = None,
        search: Optional[str] = None,
    ) -> Query:
        query = self.visible()
        if status is not None:
            query = query.filter(Document.status == status)
        if category is not None:
            query = query.filter(Document.category == category)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Document.title.ilike(pattern),
                    Document.description.ilike(pattern),
                )
            )
        return query.order_by(Document.created_at.desc())
