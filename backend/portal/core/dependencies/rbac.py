"""
Role-Based Access Control (RBAC) Dependencies Module
=====================================================

FastAPI dependencies for coarse role requirements on whole routes.

Roles are independent flags, so a requirement is satisfied when the
caller holds any one of the listed roles. Per-resource decisions
(ownership, classification, admin-linked profiles) are made in the
services through ``portal.core.policy.access_policy``.

Usage:
    @router.get("/admin/dashboard")
    def dashboard(user: User = Depends(require_admin)):
        ...
"""

from typing import Callable

from fastapi import Depends, Request

from portal.core.dependencies.auth import require_active_account
from portal.core.exceptions import RoleNotAuthorizedError
from portal.core.logging import get_logger, security_logger
from portal.models.role_enum import Role
from portal.models.user import User

# Initialize logger
logger = get_logger(__name__)


def has_any_role(user: User, *roles: Role) -> bool:
    return bool(user.roles & set(roles))


def require_roles(*allowed_roles: Role) -> Callable:
    """
    Create a dependency that requires at least one of ``allowed_roles``.

    The caller must also have left the pending state.
    """
    def role_checker(
        request: Request,
        current_user: User = Depends(require_active_account),
    ) -> User:
        if not has_any_role(current_user, *allowed_roles):
            security_logger.log_unauthorized_access(
                user_id=str(current_user.id),
                resource=request.url.path,
                action=request.method,
            )
            logger.warning(
                "Role-based access denied",
                extra={
                    "user_roles": sorted(r.value for r in current_user.roles),
                    "required_roles": [r.value for r in allowed_roles],
                    "path": request.url.path,
                }
            )
            raise RoleNotAuthorizedError(required_roles=[r.value for r in allowed_roles])

        return current_user

    return role_checker


require_admin = require_roles(Role.ADMIN)
