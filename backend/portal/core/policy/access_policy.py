"""
Access Policy Module
====================

Pure decision functions for resource-level authorization.

Every function takes the caller's role set and the already-fetched
facts about the target resource, and returns a plain ``bool``. They
never raise, never read request state and never touch the database;
enforcement (turning ``False`` into a 403) belongs to the caller.

Rules:
- Documents are gated twice: by classification and by status.
- Editing a document needs ADMIN, or OFFICIAL on one's own document.
- Deleting a document needs ADMIN.
- Member profiles linked to an ADMIN account are editable only by
  their owner and are never deletable.
- Nobody may change their own roles or delete their own account.
"""

from typing import Callable, Dict, FrozenSet, Iterable, Optional
from uuid import UUID

from portal.core.enums import ContentStatus, DocumentClassification
from portal.models.role_enum import Role

RoleSet = Iterable[Role]


def _roles(caller_roles: RoleSet) -> FrozenSet[Role]:
    return frozenset(caller_roles or ())


# =====================================
# Document Visibility
# =====================================

CLASSIFICATION_RULES: Dict[DocumentClassification, Callable[[FrozenSet[Role]], bool]] = {
    DocumentClassification.PUBLIC: lambda roles: True,
    DocumentClassification.INTERNAL: lambda roles: Role.ADMIN in roles or Role.MODERATOR in roles,
    DocumentClassification.RESTRICTED: lambda roles: Role.ADMIN in roles,
}

STATUS_RULES: Dict[ContentStatus, Callable[[FrozenSet[Role]], bool]] = {
    ContentStatus.PUBLISHED: lambda roles: True,
    ContentStatus.DRAFT: lambda roles: Role.OFFICIAL in roles,
    ContentStatus.ARCHIVED: lambda roles: Role.OFFICIAL in roles,
}


def can_view_document(classification, caller_roles: RoleSet) -> bool:
    """
    Classification gate for reading a document.

    Unrecognized classifications are denied.
    """
    rule = CLASSIFICATION_RULES.get(classification)
    if rule is None:
        return False
    return rule(_roles(caller_roles))


def can_view_document_status(status, caller_roles: RoleSet) -> bool:
    """
    Status gate for reading a document.

    Any OFFICIAL may see any DRAFT or ARCHIVED document, not only
    their own. Unrecognized statuses are denied.
    """
    rule = STATUS_RULES.get(status)
    if rule is None:
        return False
    return rule(_roles(caller_roles))


def can_access_document(classification, status, caller_roles: RoleSet) -> bool:
    """Both document gates ANDed together."""
    roles = _roles(caller_roles)
    return can_view_document(classification, roles) and can_view_document_status(status, roles)


# =====================================
# Document Mutation
# =====================================

def can_create_document(caller_roles: RoleSet) -> bool:
    return Role.OFFICIAL in _roles(caller_roles)


def can_edit_document(author_id: Optional[UUID], caller_roles: RoleSet, caller_id: Optional[UUID]) -> bool:
    roles = _roles(caller_roles)
    if Role.ADMIN in roles:
        return True
    if Role.OFFICIAL in roles:
        return author_id is not None and author_id == caller_id
    return False


def can_delete_document(caller_roles: RoleSet) -> bool:
    return Role.ADMIN in _roles(caller_roles)


# =====================================
# Member Profiles
# =====================================

def can_create_member(caller_roles: RoleSet) -> bool:
    return Role.ADMIN in _roles(caller_roles)


def can_edit_member(
    owner_id: Optional[UUID],
    linked_account_is_admin: bool,
    caller_roles: RoleSet,
    caller_id: Optional[UUID],
) -> bool:
    """
    Decide whether the caller may edit a member profile.

    The admin-linked check runs first: such a profile can only be
    edited through its own linked account, even by another ADMIN.
    An unlinked profile (``owner_id is None``) has no owner.
    """
    is_owner = owner_id is not None and owner_id == caller_id
    if linked_account_is_admin:
        return is_owner

    roles = _roles(caller_roles)
    if Role.ADMIN in roles or Role.MODERATOR in roles:
        return True
    return is_owner


def can_delete_member(linked_account_is_admin: bool, caller_roles: RoleSet) -> bool:
    if linked_account_is_admin:
        return False
    return Role.ADMIN in _roles(caller_roles)


# =====================================
# Account Administration
# =====================================

def can_manage_users(caller_roles: RoleSet) -> bool:
    return Role.ADMIN in _roles(caller_roles)


def can_assign_roles(target_id: UUID, caller_roles: RoleSet, caller_id: UUID) -> bool:
    # Self-check precedes the ADMIN check
    if target_id == caller_id:
        return False
    return Role.ADMIN in _roles(caller_roles)


def can_delete_account(
    target_id: UUID,
    target_roles: RoleSet,
    caller_roles: RoleSet,
    caller_id: UUID,
) -> bool:
    """
    Decide whether the caller may delete another account.

    Owned content is checked separately by the account service,
    which needs to enumerate the blocking items.
    """
    if target_id == caller_id:
        return False
    if Role.ADMIN in _roles(target_roles):
        return False
    return Role.ADMIN in _roles(caller_roles)


def visible_classifications(caller_roles: RoleSet) -> FrozenSet[DocumentClassification]:
    """Classifications the caller passes, for building list queries."""
    roles = _roles(caller_roles)
    return frozenset(c for c in DocumentClassification if can_view_document(c, roles))


def visible_statuses(caller_roles: RoleSet) -> FrozenSet[ContentStatus]:
    """Statuses the caller passes, for building list queries."""
    roles = _roles(caller_roles)
    return frozenset(s for s in ContentStatus if can_view_document_status(s, roles))
