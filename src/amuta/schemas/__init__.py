"""Request and response schemas."""

from src.amuta.schemas.access import AccessDecisionRead
from src.amuta.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    PrincipalRead,
    RoleRead,
    SelectionRead,
    SetActiveOrganizationRequest,
)
from src.amuta.schemas.invite import (
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
from src.amuta.schemas.organization import (
    AddMemberRequest,
    MemberRead,
    OrganizationRead,
    RegisterOrganizationRequest,
    RegisterOrganizationResponse,
)

__all__ = [
    "AcceptInviteResponse",
    "AccessDecisionRead",
    "AddMemberRequest",
    "CancelInviteResponse",
    "CreateAccountRequest",
    "CreateAccountResponse",
    "InviteCreateRequest",
    "InviteCreateResponse",
    "InviteListResponse",
    "InviteRead",
    "InviteSummaryResponse",
    "InviteTokenRequest",
    "InviteValidateResponse",
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "MemberRead",
    "OrganizationRead",
    "PrincipalRead",
    "RegisterOrganizationRequest",
    "RegisterOrganizationResponse",
    "ResendInviteResponse",
    "RoleRead",
    "SelectionRead",
    "SetActiveOrganizationRequest",
]
