"""Service layer - business logic."""

from src.amuta.services.access_guard import (
    AccessDecision,
    AccessService,
    AccessState,
    PermissionOutcome,
    check_permission,
    evaluate,
    raise_for_decision,
)
from src.amuta.services.auth_service import AuthService
from src.amuta.services.identity_service import IdentityService, ResolvedIdentity
from src.amuta.services.invite_service import (
    AcceptResult,
    CancelResult,
    InviteInfo,
    InviteService,
    ResendResult,
)
from src.amuta.services.membership_service import MembershipService
from src.amuta.services.organization_selector import (
    OrganizationSelection,
    OrganizationSelector,
    SelectionService,
)
from src.amuta.services.permission_service import has_permission, permissions_for
from src.amuta.services.registration_service import RegistrationResult, RegistrationService

__all__ = [
    "AccessDecision",
    "AccessService",
    "AccessState",
    "AcceptResult",
    "AuthService",
    "CancelResult",
    "IdentityService",
    "InviteInfo",
    "InviteService",
    "MembershipService",
    "OrganizationSelection",
    "OrganizationSelector",
    "PermissionOutcome",
    "RegistrationResult",
    "RegistrationService",
    "ResendResult",
    "ResolvedIdentity",
    "SelectionService",
    "check_permission",
    "evaluate",
    "has_permission",
    "permissions_for",
    "raise_for_decision",
]
