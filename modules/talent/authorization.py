"""Authorization gate for staff operations.

One policy interface for every mutating operation: evaluate() returns a
typed decision, require_roles() turns a non-allow decision into the
matching exception. Identity resolution (token → principal) happens before
this module; a missing principal is already an Unauthorized.

Usage:
    from modules.talent.authorization import require_roles, STAFF_ROLES

    require_roles(session, principal)                # auth.sync_roles from config
    require_roles(session, principal, STAFF_ROLES)   # raises on deny/error
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from common.config import get_config
from .store import StoreError, TalentStore

logger = logging.getLogger(__name__)

STAFF_ROLES = frozenset({"admin", "editor", "viewer"})
ADMIN_ROLES = frozenset({"admin"})


class AuthorizationError(Exception):
    """Base class for gate failures."""


class Unauthorized(AuthorizationError):
    """No valid caller identity."""


class PermissionDenied(AuthorizationError):
    """Identity resolved, but it holds none of the required roles."""


class PermissionCheckFailed(AuthorizationError):
    """The role lookup itself failed."""


@dataclass(frozen=True)
class Principal:
    """An authenticated caller, as resolved from its credentials."""
    user_id: str
    email: Optional[str] = None


class Outcome(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"
    ERROR = "error"


@dataclass
class PolicyDecision:
    outcome: Outcome
    roles: set[str] = field(default_factory=set)
    reason: str = ""

    @property
    def allowed(self) -> bool:
        return self.outcome is Outcome.ALLOW


def evaluate(
    session: Session,
    principal: Optional[Principal],
    required_roles: Optional[Iterable[str]] = None,
) -> PolicyDecision:
    """Decide whether principal holds any of required_roles. No side effects.

    required_roles defaults to auth.sync_roles, the roles allowed to run
    staff mutations (sync, migration, review).
    """
    if required_roles is None:
        required_roles = get_config().auth.sync_roles
    required = set(required_roles)
    if principal is None or not principal.user_id:
        return PolicyDecision(Outcome.DENY, reason="unauthenticated")

    try:
        roles = TalentStore(session).get_roles(principal.user_id)
    except StoreError as e:
        logger.error(f"Permission check failed for {principal.user_id}: {e}")
        return PolicyDecision(Outcome.ERROR, reason=str(e))

    if roles & required:
        return PolicyDecision(Outcome.ALLOW, roles=roles)
    return PolicyDecision(
        Outcome.DENY,
        roles=roles,
        reason=f"requires one of {sorted(required)}",
    )


def require_roles(
    session: Session,
    principal: Optional[Principal],
    required_roles: Optional[Iterable[str]] = None,
) -> Principal:
    """Raise unless principal holds one of required_roles.

    Raises:
        Unauthorized: principal is missing.
        PermissionCheckFailed: role lookup errored.
        PermissionDenied: no qualifying role.
    """
    if principal is None or not principal.user_id:
        raise Unauthorized("Authentication required")

    decision = evaluate(session, principal, required_roles)
    if decision.outcome is Outcome.ERROR:
        raise PermissionCheckFailed(f"Could not verify permissions: {decision.reason}")
    if decision.outcome is Outcome.DENY:
        logger.info(
            f"Denied {principal.user_id} (roles={sorted(decision.roles)}): "
            f"{decision.reason}"
        )
        raise PermissionDenied(f"Insufficient permissions: {decision.reason}")
    return principal
