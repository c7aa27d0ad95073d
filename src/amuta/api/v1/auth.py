"""Authentication and session endpoints."""

from fastapi import APIRouter, status
from starlette.requests import Request

from src.amuta.api.dependencies import (
    Access,
    AuthServiceDep,
    Identity,
    SelectionServiceDep,
)
from src.amuta.core.rate_limit import limiter
from src.amuta.schemas import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    PrincipalRead,
    RoleRead,
    SelectionRead,
    SetActiveOrganizationRequest,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid credentials"}},
    summary="Sign in",
)
@limiter.limit("5/minute")
async def login(
    request: Request, login_data: LoginRequest, service: AuthServiceDep
) -> LoginResponse:
    """Authenticate with email and password and return an access token."""
    access_token = await service.login(login_data.email, login_data.password)
    return LoginResponse(access_token=access_token)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Current principal",
    description="Principal, role rows, active organization and effective permissions.",
)
async def me(identity: Identity, context: Access) -> MeResponse:
    return MeResponse(
        user=PrincipalRead.model_validate(identity.principal),
        roles=[RoleRead.model_validate(role) for role in identity.roles],
        is_super_admin=identity.is_super_admin,
        selection=SelectionRead(organization_id=context.selection.as_stored()),
        permissions=sorted(p.value for p in context.permissions),
    )


@router.put(
    "/me/organization",
    response_model=SelectionRead,
    status_code=status.HTTP_200_OK,
    summary="Switch active organization",
    description=(
        "Persist the active organization. Organizations the principal has no role in "
        "are ignored and the previous selection is kept."
    ),
)
async def set_active_organization(
    body: SetActiveOrganizationRequest,
    identity: Identity,
    selection_service: SelectionServiceDep,
) -> SelectionRead:
    selection = await selection_service.set_active(identity, body.organization_id)
    return SelectionRead(organization_id=selection.as_stored())
