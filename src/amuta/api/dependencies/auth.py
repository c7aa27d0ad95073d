"""Authentication and authorization dependencies.

Every request re-derives identity, organization selection and the guard
decision from the current rows.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from src.amuta.api.dependencies.services import (
    AccessServiceDep,
    IdentityServiceDep,
    SelectionServiceDep,
)
from src.amuta.core.config import get_settings
from src.amuta.core.exceptions import AuthRequired, PermissionDenied
from src.amuta.core.logging import bind_user_context
from src.amuta.core.permissions import Permission
from src.amuta.models import User
from src.amuta.services import (
    AccessDecision,
    OrganizationSelection,
    ResolvedIdentity,
    check_permission,
    permissions_for,
    raise_for_decision,
)


@dataclass(frozen=True)
class AccessContext:
    """Identity, selection and guard decision for the current request."""

    identity: ResolvedIdentity | None
    selection: OrganizationSelection
    decision: AccessDecision
    permissions: frozenset[Permission]


async def get_optional_identity(
    identity_service: IdentityServiceDep,
    authorization: Annotated[str | None, Header()] = None,
) -> ResolvedIdentity | None:
    """Resolve the bearer token if present. Returns None without a valid session."""
    principal = await identity_service.get_session(authorization)
    if principal is None:
        return None
    identity = await identity_service.load_identity(principal)
    bind_user_context(principal.id, email=principal.email)
    return identity


OptionalIdentity = Annotated[ResolvedIdentity | None, Depends(get_optional_identity)]


async def get_identity(identity: OptionalIdentity) -> ResolvedIdentity:
    if identity is None:
        raise AuthRequired()
    return identity


Identity = Annotated[ResolvedIdentity, Depends(get_identity)]


async def get_optional_principal(identity: OptionalIdentity) -> User | None:
    return identity.principal if identity is not None else None


OptionalPrincipal = Annotated[User | None, Depends(get_optional_principal)]


async def get_access_context(
    request: Request,
    identity: OptionalIdentity,
    selection_service: SelectionServiceDep,
    access_service: AccessServiceDep,
) -> AccessContext:
    """Evaluate the guard for the organization selected on this request.

    The organization header (ORGANIZATION_HEADER) overrides the persisted
    selection for this request only.
    """
    if identity is None:
        selection = OrganizationSelection.none()
    else:
        preferred = request.headers.get(get_settings().organization_header)
        selection = await selection_service.select(identity, preferred)
        bind_user_context(identity.principal.id, selection.as_stored())

    decision = await access_service.evaluate(identity, selection)
    permissions = (
        permissions_for(identity, selection) if identity is not None else frozenset()
    )
    return AccessContext(
        identity=identity,
        selection=selection,
        decision=decision,
        permissions=permissions,
    )


Access = Annotated[AccessContext, Depends(get_access_context)]


async def require_access(context: Access) -> AccessContext:
    """Reject blocked decisions with the matching error."""
    raise_for_decision(context.decision)
    return context


GuardedAccess = Annotated[AccessContext, Depends(require_access)]


def require_permission(
    permission: Permission,
) -> Callable[[AccessContext], Awaitable[AccessContext]]:
    """Dependency factory: allowed decision plus ``permission``.

    Denials follow PERMISSION_DENIED_POLICY (403 or a 303 redirect).
    """

    async def dependency(context: GuardedAccess) -> AccessContext:
        outcome = check_permission(context.decision, context.permissions, permission)
        if outcome.allowed:
            return context
        if outcome.redirect_to is not None:
            raise HTTPException(
                status_code=status.HTTP_303_SEE_OTHER,
                detail=outcome.reason,
                headers={"Location": outcome.redirect_to},
            )
        raise PermissionDenied(outcome.reason, permission=permission.value)

    return dependency
