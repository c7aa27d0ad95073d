"""Invite schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.amuta.models import InviteStatus, RoleName


class InviteCreateRequest(BaseModel):
    """Request to create an invite."""

    email: EmailStr
    role_name: RoleName = RoleName.MEMBER
    organization_id: UUID


class InviteRead(BaseModel):
    """Read model for invites (admin view)."""

    id: UUID
    email: str
    organization_id: UUID
    role_name: str
    status: InviteStatus
    invited_by: UUID | None
    created_at: datetime
    expires_at: datetime

    model_config = {"from_attributes": True}


class InviteCreateResponse(BaseModel):
    success: bool = True
    invite: InviteRead


class InviteListResponse(BaseModel):
    invites: list[InviteRead]
    total: int


class InviteSummaryResponse(BaseModel):
    """Pending invite counts keyed by organization id."""

    counts: dict[str, int]
    total: int


class InviteTokenRequest(BaseModel):
    token: str = Field(min_length=1)


class InviteValidateResponse(BaseModel):
    """Public info about an invite (for the accept page)."""

    email: str
    role_name: str
    organization_id: UUID
    organization_name: str
    user_exists: bool
    already_member: bool


class AcceptInviteResponse(BaseModel):
    success: bool = True
    already_member: bool = False
    organization_id: UUID


class CreateAccountRequest(BaseModel):
    """Set a password for the invited email and accept the invite."""

    token: str = Field(min_length=1)
    password: str = Field(min_length=6, max_length=100)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class CreateAccountResponse(BaseModel):
    success: bool = True
    email: str
    already_member: bool = False


class ResendInviteResponse(BaseModel):
    success: bool = True
    skipped: bool = False
    reason: str | None = None


class CancelInviteResponse(BaseModel):
    success: bool = True
    already_cancelled: bool = False
