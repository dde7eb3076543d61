"""
Document Schemas Module
=======================

Pydantic models for document requests and responses.
"""

from datetime import date
from typing import List, Optional, Union
from pydantic import BaseModel, Field, field_validator

from portal.core.enums import ContentStatus, DocumentCategory, DocumentClassification


def split_tags(value: Union[str, List[str], None]) -> Optional[List[str]]:
    """Accept tags as a list or as a comma-separated string."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    return [tag.strip() for tag in value if tag and tag.strip()]


class DocumentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    content: str = Field(default="")
    category: DocumentCategory = DocumentCategory.OTHER
    classification: DocumentClassification = DocumentClassification.PUBLIC
    status: ContentStatus = ContentStatus.DRAFT
    tags: List[str] = Field(default_factory=list)
    version: str = Field(default="1.0", max_length=50)
    effective_date: Optional[date] = None

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        return split_tags(v) or []


class DocumentUpdate(BaseModel):
    """Partial update. Only supplied fields are changed."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    content: Optional[str] = None
    category: Optional[DocumentCategory] = None
    classification: Optional[DocumentClassification] = None
    status: Optional[ContentStatus] = None
    tags: Optional[List[str]] = None
    version: Optional[str] = Field(default=None, max_length=50)
    effective_date: Optional[date] = None

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        return split_tags(v)


class DocumentDeleteRequest(BaseModel):
    title_confirmation: Optional[str] = Field(
        default=None,
        description="Must equal the document title exactly"
    )


class DocumentAuthor(BaseModel):
    id: str
    name: Optional[str] = None


class DocumentResponse(BaseModel):
    id: str
    slug: str
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    category: DocumentCategory
    classification: DocumentClassification
    status: ContentStatus
    tags: List[str]
    version: str
    effective_date: Optional[str] = None
    published_at: Optional[str] = None
    author: DocumentAuthor
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class DocumentListResponse(BaseModel):
    documents: List[DocumentResponse]
    total: int
