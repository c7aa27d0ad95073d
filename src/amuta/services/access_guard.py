"""Access guard - one state machine deciding allow/block for protected actions.

``evaluate`` never raises; it returns an ``AccessDecision`` that callers render
(block reason plus a sign-out affordance). HTTP routes turn blocked decisions
into errors with ``raise_for_decision``.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

from src.amuta.core.config import get_settings
from src.amuta.core.exceptions import (
    AppError,
    AuthRequired,
    NoRoleForOrganization,
    OrganizationInactive,
    OrganizationNotSelected,
    OrganizationUnavailable,
    PermissionDenied,
    RoleSuspended,
    Unauthorized,
)
from src.amuta.core.logging import get_logger
from src.amuta.core.permissions import Permission
from src.amuta.models import Organization
from src.amuta.repositories import OrganizationRepository
from src.amuta.services.identity_service import ResolvedIdentity
from src.amuta.services.organization_selector import OrganizationSelection
from src.amuta.services.permission_service import permissions_for

logger = get_logger(__name__)

SIGN_OUT = "sign_out"


class AccessState(str, Enum):
    LOADING = "LOADING"
    NO_SESSION = "NO_SESSION"
    SUPER_ADMIN_OK = "SUPER_ADMIN_OK"
    NO_ORG_SELECTED = "NO_ORG_SELECTED"
    ORG_NOT_FOUND = "ORG_NOT_FOUND"
    ORG_INACTIVE = "ORG_INACTIVE"
    NO_ROLE_FOR_ORG = "NO_ROLE_FOR_ORG"
    ROLE_SUSPENDED = "ROLE_SUSPENDED"
    OK = "OK"


_ALLOWED_STATES = frozenset({AccessState.SUPER_ADMIN_OK, AccessState.OK})

_BLOCK_REASONS: dict[AccessState, str] = {
    AccessState.LOADING: "Loading account information",
    AccessState.NO_SESSION: "You are not signed in",
    AccessState.NO_ORG_SELECTED: "No organization is selected",
    AccessState.ORG_NOT_FOUND: "The selected organization was not found",
    AccessState.ORG_INACTIVE: "This organization's subscription is inactive",
    AccessState.NO_ROLE_FOR_ORG: "You do not have a role in this organization",
    AccessState.ROLE_SUSPENDED: "Your role in this organization is suspended",
}

_BLOCK_ERRORS: dict[AccessState, type[AppError]] = {
    AccessState.NO_SESSION: AuthRequired,
    AccessState.NO_ORG_SELECTED: OrganizationNotSelected,
    AccessState.ORG_NOT_FOUND: OrganizationUnavailable,
    AccessState.ORG_INACTIVE: OrganizationInactive,
    AccessState.NO_ROLE_FOR_ORG: NoRoleForOrganization,
    AccessState.ROLE_SUSPENDED: RoleSuspended,
}


@dataclass(frozen=True)
class AccessDecision:
    state: AccessState
    reason: str | None = None
    recovery_action: str | None = None

    @property
    def allowed(self) -> bool:
        return self.state in _ALLOWED_STATES

    @classmethod
    def of(cls, state: AccessState) -> "AccessDecision":
        if state in _ALLOWED_STATES:
            return cls(state=state)
        recovery = None if state is AccessState.LOADING else SIGN_OUT
        return cls(state=state, reason=_BLOCK_REASONS[state], recovery_action=recovery)

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "allowed": self.allowed,
            "reason": self.reason,
            "recovery_action": self.recovery_action,
        }


@dataclass(frozen=True)
class PermissionOutcome:
    """Result of a permission-scoped check under the configured policy."""

    allowed: bool
    policy: str = "deny"
    reason: str | None = None
    redirect_to: str | None = None


def evaluate(
    identity: ResolvedIdentity | None,
    selection: OrganizationSelection,
    organizations: Mapping[UUID, Organization],
    loading: bool = False,
) -> AccessDecision:
    """Run the guard rules in order and return the first matching state."""
    if loading:
        return AccessDecision.of(AccessState.LOADING)
    if identity is None:
        return AccessDecision.of(AccessState.NO_SESSION)
    if identity.is_super_admin:
        return AccessDecision.of(AccessState.SUPER_ADMIN_OK)
    if selection.organization_id is None:
        return AccessDecision.of(AccessState.NO_ORG_SELECTED)

    organization = organizations.get(selection.organization_id)
    if organization is None:
        return AccessDecision.of(AccessState.ORG_NOT_FOUND)
    if not organization.is_active:
        return AccessDecision.of(AccessState.ORG_INACTIVE)

    role = identity.role_for(selection.organization_id)
    if role is None:
        return AccessDecision.of(AccessState.NO_ROLE_FOR_ORG)
    if role.suspended:
        return AccessDecision.of(AccessState.ROLE_SUSPENDED)
    return AccessDecision.of(AccessState.OK)


def check_permission(
    decision: AccessDecision,
    permissions: frozenset[Permission],
    permission: Permission,
) -> PermissionOutcome:
    """Require an allowed decision plus ``permission``.

    Denials follow PERMISSION_DENIED_POLICY: ``deny`` reports a reason,
    ``redirect`` sends the caller to PERMISSION_REDIRECT_PATH.
    """
    settings = get_settings()
    policy = settings.permission_denied_policy

    if decision.state is AccessState.SUPER_ADMIN_OK:
        return PermissionOutcome(allowed=True, policy=policy)
    if decision.allowed and permission in permissions:
        return PermissionOutcome(allowed=True, policy=policy)

    reason = decision.reason or f"Missing permission: {permission.value}"
    if policy == "redirect":
        return PermissionOutcome(
            allowed=False,
            policy=policy,
            reason=reason,
            redirect_to=settings.permission_redirect_path,
        )
    return PermissionOutcome(allowed=False, policy=policy, reason=reason)


def raise_for_decision(decision: AccessDecision) -> None:
    """Raise the error matching a blocked decision. No-op when allowed."""
    if decision.allowed:
        return
    error_cls = _BLOCK_ERRORS.get(decision.state, PermissionDenied)
    raise error_cls(
        decision.reason,
        state=decision.state.value,
        recovery_action=decision.recovery_action,
    )


class AccessService:
    """Loads organization state for the guard and authorizes organization actions."""

    def __init__(self, organization_repo: OrganizationRepository):
        self.organization_repo = organization_repo

    async def organizations_for(
        self, identity: ResolvedIdentity | None, selection: OrganizationSelection
    ) -> dict[UUID, Organization]:
        ids: set[UUID] = set()
        if identity is not None:
            ids.update(identity.organization_ids)
        if selection.organization_id is not None:
            ids.add(selection.organization_id)
        return await self.organization_repo.get_by_ids(ids)

    async def evaluate(
        self, identity: ResolvedIdentity | None, selection: OrganizationSelection
    ) -> AccessDecision:
        organizations = await self.organizations_for(identity, selection)
        return evaluate(identity, selection, organizations)

    async def authorize(
        self,
        identity: ResolvedIdentity | None,
        organization_id: UUID,
        permission: Permission = Permission.MANAGE_USERS,
    ) -> None:
        """Require super-admin, or an OK guard decision for the organization plus ``permission``.

        Raises:
            Unauthorized: No authenticated principal.
            PermissionDenied: Blocked decision or missing permission.
        """
        if identity is None:
            raise Unauthorized()
        if identity.is_super_admin:
            return

        selection = OrganizationSelection.of(organization_id)
        decision = await self.evaluate(identity, selection)
        if decision.state is not AccessState.OK:
            logger.info(
                "Organization action blocked",
                user_id=str(identity.principal.id),
                organization_id=str(organization_id),
                state=decision.state.value,
            )
            raise PermissionDenied(decision.reason, state=decision.state.value)

        if permission not in permissions_for(identity, selection):
            logger.info(
                "Organization action denied",
                user_id=str(identity.principal.id),
                organization_id=str(organization_id),
                permission=permission.value,
            )
            raise PermissionDenied()
