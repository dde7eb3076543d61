"""
Document Routes Module
======================

Endpoints:
- GET    /documents                      list documents the caller may access
- POST   /documents                      create (OFFICIAL)
- GET    /documents/{slug}               read
- PUT    /documents/{slug}               update (ADMIN, or OFFICIAL author)
- DELETE /documents/{slug}               delete (ADMIN, typed title confirmation)
- GET    /documents/{slug}/download      export as md, txt or pdf

Publishing a document, on create or by a later update, emails every
approved account after the response has been sent.
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from sqlalchemy.orm import Session

from portal.core.dependencies.auth import require_active_account
from portal.core.enums import ContentStatus, DocumentCategory, ExportFormat
from portal.core.logging import get_logger
from portal.db.session import get_db
from portal.models.document import Document
from portal.models.user import User
from portal.schemas import (
    DocumentCreate,
    DocumentDeleteRequest,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdate,
    ErrorResponse,
)
from portal.services.document_service import DocumentService
from portal.services.export_service import ExportService
from portal.services.notification_service import NotificationService, get_notification_service

logger = get_logger(__name__)

router = APIRouter(
    prefix="/documents",
    tags=["Documents"],
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        403: {"model": ErrorResponse, "description": "Access denied"},
        404: {"model": ErrorResponse, "description": "Document not found"},
    },
)


def _schedule_publish_notifications(
    service: DocumentService,
    document: Document,
    background_tasks: BackgroundTasks,
    notifications: NotificationService,
) -> None:
    recipients = service.notification_recipients(document.author_id)
    background_tasks.add_task(
        notifications.notify_document_published,
        recipients,
        service.publish_notice(document),
    )


@router.get("", response_model=DocumentListResponse)
def list_documents(
    status_filter: Optional[ContentStatus] = Query(default=None, alias="status"),
    category: Optional[DocumentCategory] = None,
    search: Optional[str] = None,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> dict:
    documents = DocumentService(db).list_documents(
        current_user, status=status_filter, category=category, search=search
    )
    return {
        "documents": [d.to_dict(include_content=False) for d in documents],
        "total": len(documents),
    }


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def create_document(
    payload: DocumentCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> dict:
    service = DocumentService(db)
    document, published = service.create_document(current_user, payload)
    if published:
        _schedule_publish_notifications(service, document, background_tasks, notifications)
    return document.to_dict()


@router.get("/{slug}", response_model=DocumentResponse)
def get_document(
    slug: str,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> dict:
    return DocumentService(db).get_document(slug, current_user).to_dict()


@router.put("/{slug}", response_model=DocumentResponse)
def update_document(
    slug: str,
    payload: DocumentUpdate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> dict:
    service = DocumentService(db)
    document, became_published = service.update_document(slug, current_user, payload)
    if became_published:
        _schedule_publish_notifications(service, document, background_tasks, notifications)
    return document.to_dict()


@router.delete("/{slug}")
def delete_document(
    slug: str,
    payload: Optional[DocumentDeleteRequest] = None,
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> dict:
    """Irreversible. ``title_confirmation`` must equal the title exactly."""
    DocumentService(db).delete_document(
        slug, current_user, payload.title_confirmation if payload else None
    )
    return {"message": "Document deleted successfully"}


@router.get("/{slug}/download")
def download_document(
    slug: str,
    export_format: ExportFormat = Query(default=ExportFormat.MD, alias="format"),
    current_user: User = Depends(require_active_account),
    db: Session = Depends(get_db),
) -> Response:
    """Same access gates as reading the document."""
    document = DocumentService(db).get_document(slug, current_user)
    exported = ExportService().export(document, export_format)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{exported.filename}"',
            "Cache-Control": "no-cache",
        },
    )
