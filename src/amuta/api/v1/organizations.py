"""Organization endpoints: registration, current organization, members."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from starlette.requests import Request

from src.amuta.api.dependencies import (
    AccessContext,
    GuardedAccess,
    MembershipServiceDep,
    OptionalIdentity,
    OrganizationRepo,
    RegistrationServiceDep,
    RoleRepo,
    require_permission,
)
from src.amuta.core.exceptions import OrganizationNotSelected, OrganizationUnavailable
from src.amuta.core.permissions import Permission
from src.amuta.core.rate_limit import limiter
from src.amuta.schemas import (
    AddMemberRequest,
    MemberRead,
    OrganizationRead,
    RegisterOrganizationRequest,
    RegisterOrganizationResponse,
)

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.post(
    "/register",
    response_model=RegisterOrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register organization",
    description=(
        "Create an organization (inactive) and its admin (suspended role). "
        "An existing principal with the same email is reused."
    ),
)
@limiter.limit("3/minute")
async def register_organization(
    request: Request,
    body: RegisterOrganizationRequest,
    service: RegistrationServiceDep,
) -> RegisterOrganizationResponse:
    result = await service.register(
        organization_name=body.organization_name,
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return RegisterOrganizationResponse(
        organization_id=result.organization_id,
        user_id=result.user_id,
    )


@router.get(
    "/current",
    response_model=OrganizationRead,
    summary="Selected organization",
)
async def get_current_organization(
    context: GuardedAccess,
    organization_repo: OrganizationRepo,
) -> OrganizationRead:
    if context.selection.organization_id is None:
        raise OrganizationNotSelected()
    organization = await organization_repo.get_by_id(context.selection.organization_id)
    if organization is None:
        raise OrganizationUnavailable()
    return OrganizationRead.model_validate(organization)


@router.get(
    "/current/members",
    response_model=list[MemberRead],
    summary="Members of the selected organization",
    description="Requires the manage_users permission.",
)
async def list_current_members(
    role_repo: RoleRepo,
    context: AccessContext = Depends(require_permission(Permission.MANAGE_USERS)),
) -> list[MemberRead]:
    if context.selection.organization_id is None:
        raise OrganizationNotSelected()
    roles = await role_repo.list_for_organization(context.selection.organization_id)
    return [MemberRead.model_validate(role) for role in roles]


@router.post(
    "/{organization_id}/members",
    response_model=MemberRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add member",
    description="Add a principal to the organization directly. Requires manage_users.",
)
async def add_member(
    organization_id: UUID,
    body: AddMemberRequest,
    identity: OptionalIdentity,
    service: MembershipServiceDep,
) -> MemberRead:
    role = await service.add_member(
        organization_id=organization_id,
        email=body.email,
        role_name=body.role_name,
        actor=identity,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return MemberRead.model_validate(role)
