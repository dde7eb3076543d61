"""
Account Lifecycle Module
========================

Derives an account's lifecycle state from its role set and decides,
per request path, whether the caller may proceed or must be sent
elsewhere.

States:
- PENDING: no roles. Only the approval notice and sign-out.
- ACTIVE: at least one role, no ADMIN.
- ADMINISTRATOR: holds ADMIN. Everything ACTIVE has plus user management.

Transitions only happen through an administrator's role assignment.
Nothing here is cached; the decision is recomputed on every request.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from portal.core.enums import LifecycleState
from portal.models.role_enum import Role


# =====================================
# Surfaces
# =====================================

SIGN_IN_PATH = "/login"
REGISTER_PATH = "/register"
PENDING_PATH = "/pending-approval"
SIGN_OUT_PATH = "/logout"
HOME_PATH = "/"
ADMIN_PREFIX = "/admin"

ACTIVE_SURFACES: FrozenSet[str] = frozenset({
    HOME_PATH, "/documents", "/members", "/profile", SIGN_OUT_PATH,
})

SURFACES = {
    LifecycleState.PENDING: frozenset({PENDING_PATH, SIGN_OUT_PATH}),
    LifecycleState.ACTIVE: ACTIVE_SURFACES,
    LifecycleState.ADMINISTRATOR: ACTIVE_SURFACES | {ADMIN_PREFIX},
}


@dataclass(frozen=True)
class RouteDecision:
    """Outcome of a routing check: proceed, or redirect elsewhere."""

    allowed: bool
    redirect_to: Optional[str] = None

    @classmethod
    def allow(cls) -> "RouteDecision":
        return cls(allowed=True)

    @classmethod
    def redirect(cls, path: str) -> "RouteDecision":
        return cls(allowed=False, redirect_to=path)


# =====================================
# State Derivation
# =====================================

def lifecycle_state(roles: Iterable[Role]) -> LifecycleState:
    role_set = frozenset(roles or ())
    if not role_set:
        return LifecycleState.PENDING
    if Role.ADMIN in role_set:
        return LifecycleState.ADMINISTRATOR
    return LifecycleState.ACTIVE


def reachable_surfaces(state: LifecycleState) -> FrozenSet[str]:
    return SURFACES.get(state, frozenset())


def _is_admin_path(path: str) -> bool:
    return path == ADMIN_PREFIX or path.startswith(ADMIN_PREFIX + "/")


def route_decision(path: str, roles: Optional[Iterable[Role]]) -> RouteDecision:
    """
    Decide what happens to a request for ``path``.

    Args:
        path: Requested UI path
        roles: Caller's role set, or ``None`` when unauthenticated

    Returns:
        RouteDecision with ``redirect_to`` set when not allowed
    """
    path = path.rstrip("/") or HOME_PATH
    authenticated = roles is not None
    state = lifecycle_state(roles) if authenticated else None

    if path in (SIGN_IN_PATH, REGISTER_PATH):
        if not authenticated:
            return RouteDecision.allow()
        if state is LifecycleState.PENDING:
            return RouteDecision.redirect(PENDING_PATH)
        return RouteDecision.redirect(HOME_PATH)

    if not authenticated:
        return RouteDecision.redirect(SIGN_IN_PATH)

    if path == SIGN_OUT_PATH:
        return RouteDecision.allow()

    if path == PENDING_PATH:
        if state is LifecycleState.PENDING:
            return RouteDecision.allow()
        return RouteDecision.redirect(HOME_PATH)

    if state is LifecycleState.PENDING:
        return RouteDecision.redirect(PENDING_PATH)

    if _is_admin_path(path) and state is not LifecycleState.ADMINISTRATOR:
        return RouteDecision.redirect(HOME_PATH)

    return RouteDecision.allow()
