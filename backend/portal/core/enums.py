"""
Enumeration Module
==================

Defines enumerations used across the application.

Every enum is closed: decision tables keyed by these members are
checked for completeness in the test suite, so adding a value forces
each decision site to be revisited.
"""

from enum import Enum


class DocumentClassification(str, Enum):
    """Confidentiality tier of a document, independent of its status."""

    PUBLIC = "PUBLIC"
    INTERNAL = "INTERNAL"
    RESTRICTED = "RESTRICTED"


class ContentStatus(str, Enum):
    """Publication stage of a document or other authored content."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class DocumentCategory(str, Enum):
    """Legal category of a document."""

    CONSTITUTION = "CONSTITUTION"
    LAW = "LAW"
    CODE = "CODE"
    DECREE = "DECREE"
    RESOLUTION = "RESOLUTION"
    REGULATION = "REGULATION"
    OTHER = "OTHER"


class MemberStatus(str, Enum):
    """Descriptive standing of a member profile. Never an access gate."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    BANNED = "BANNED"


class LifecycleState(str, Enum):
    """Account state derived from the account's role set."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    ADMINISTRATOR = "ADMINISTRATOR"


class ExportFormat(str, Enum):
    """Supported document download formats."""

    MD = "md"
    TXT = "txt"
    PDF = "pdf"
