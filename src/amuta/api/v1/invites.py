"""Invite API endpoints."""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, status
from starlette.requests import Request

from src.amuta.api.dependencies import (
    InviteServiceDep,
    OptionalIdentity,
    OptionalPrincipal,
)
from src.amuta.core.rate_limit import limiter
from src.amuta.schemas import (
    AcceptInviteResponse,
    CancelInviteResponse,
    CreateAccountRequest,
    CreateAccountResponse,
    InviteCreateRequest,
    InviteCreateResponse,
    InviteListResponse,
    InviteRead,
    InviteSummaryResponse,
    InviteTokenRequest,
    InviteValidateResponse,
    ResendInviteResponse,
)

router = APIRouter(prefix="/invites", tags=["invites"])


# =============================================================================
# Admin Endpoints (bearer token + manage_users in the invite's organization)
# =============================================================================


@router.post(
    "",
    response_model=InviteCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create invite",
    description=(
        "Create an invite and email its link. Requires manage_users in the "
        "organization, or super admin. Only super admins may invite super admins."
    ),
)
async def create_invite(
    body: InviteCreateRequest,
    identity: OptionalIdentity,
    invite_service: InviteServiceDep,
) -> InviteCreateResponse:
    invite, _ = await invite_service.create_invite(
        email=body.email,
        role_name=body.role_name,
        organization_id=body.organization_id,
        actor=identity,
    )
    return InviteCreateResponse(invite=InviteRead.model_validate(invite))


@router.get(
    "",
    response_model=InviteListResponse | InviteSummaryResponse,
    summary="List pending invites",
    description=(
        "Pending invites newest first, or counts by organization with `summary=true`. "
        "`organization_id=all` is limited to super admins."
    ),
)
async def list_invites(
    identity: OptionalIdentity,
    invite_service: InviteServiceDep,
    organization_id: UUID | Literal["all"] = "all",
    summary: bool = False,
) -> InviteListResponse | InviteSummaryResponse:
    result = await invite_service.list_invites(organization_id, identity, summary=summary)
    if isinstance(result, dict):
        counts = {str(org_id): count for org_id, count in result.items()}
        return InviteSummaryResponse(counts=counts, total=sum(counts.values()))
    return InviteListResponse(
        invites=[InviteRead.model_validate(inv) for inv in result],
        total=len(result),
    )


@router.post(
    "/{invite_id}/resend",
    response_model=ResendInviteResponse,
    summary="Resend invite",
    description=(
        "Email a fresh token for an open invite. The token expires with the invite; "
        "accepted, cancelled or expired invites are skipped."
    ),
)
async def resend_invite(
    invite_id: UUID,
    identity: OptionalIdentity,
    invite_service: InviteServiceDep,
) -> ResendInviteResponse:
    result = await invite_service.resend(invite_id, identity)
    return ResendInviteResponse(
        success=result.success, skipped=result.skipped, reason=result.reason
    )


@router.post(
    "/{invite_id}/cancel",
    response_model=CancelInviteResponse,
    summary="Cancel invite",
    description="Cancel an open invite. Cancelling twice succeeds; accepted invites return 410.",
)
async def cancel_invite(
    invite_id: UUID,
    identity: OptionalIdentity,
    invite_service: InviteServiceDep,
) -> CancelInviteResponse:
    result = await invite_service.cancel(invite_id, identity)
    return CancelInviteResponse(
        success=result.success, already_cancelled=result.already_cancelled
    )


# =============================================================================
# Public Endpoints (token-based)
# =============================================================================


@router.post(
    "/validate",
    response_model=InviteValidateResponse,
    summary="Validate invite token",
    description="Report the invite behind a token for the accept page. No side effects.",
)
@limiter.limit("20/minute")
async def validate_invite(
    request: Request,
    body: InviteTokenRequest,
    invite_service: InviteServiceDep,
) -> InviteValidateResponse:
    info = await invite_service.validate(body.token)
    return InviteValidateResponse(
        email=info.email,
        role_name=info.role_name,
        organization_id=info.organization_id,
        organization_name=info.organization_name,
        user_exists=info.user_exists,
        already_member=info.already_member,
    )


@router.post(
    "/accept",
    response_model=AcceptInviteResponse,
    summary="Accept invite",
    description=(
        "Accept as the signed-in principal, whose email must match the invite. "
        "Repeating the call succeeds with already_member=true."
    ),
)
@limiter.limit("10/minute")
async def accept_invite(
    request: Request,
    body: InviteTokenRequest,
    principal: OptionalPrincipal,
    invite_service: InviteServiceDep,
) -> AcceptInviteResponse:
    result = await invite_service.accept(body.token, principal)
    return AcceptInviteResponse(
        already_member=result.already_member,
        organization_id=result.organization_id,
    )


@router.post(
    "/create-account",
    response_model=CreateAccountResponse,
    summary="Create account from invite",
    description=(
        "Set up the invited email's account and accept the invite. Accounts that "
        "have signed in before must sign in and accept instead (409)."
    ),
)
@limiter.limit("5/minute")
async def create_account_from_invite(
    request: Request,
    body: CreateAccountRequest,
    invite_service: InviteServiceDep,
) -> CreateAccountResponse:
    result = await invite_service.create_account_from_invite(
        token=body.token,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return CreateAccountResponse(email=result.email, already_member=result.already_member)
