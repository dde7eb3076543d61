"""
Model Package Initialization
============================

Ensures models are properly registered when imported by the application.

All SQLAlchemy ORM models are exported from this module.

Usage:
    from portal.models import User, Document, Member, Role
"""

from .role_enum import Role
from .user import User, UserRoleAssignment
from .document import Document
from .member import Member
from .content import Article, NewsItem

__all__ = [
    "Role",
    "User",
    "UserRoleAssignment",
    "Document",
    "Member",
    "Article",
    "NewsItem",
]
