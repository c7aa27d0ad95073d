from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.amuta.models import RoleName


class RegisterOrganizationRequest(BaseModel):
    """Self-service registration of a new organization and its admin."""

    organization_name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class RegisterOrganizationResponse(BaseModel):
    success: bool = True
    organization_id: UUID
    user_id: UUID


class AddMemberRequest(BaseModel):
    email: EmailStr
    role_name: RoleName = RoleName.MEMBER
    password: str | None = Field(default=None, min_length=6, max_length=100)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class MemberRead(BaseModel):
    user_id: UUID
    organization_id: UUID
    role_name: str
    suspended: bool

    model_config = {"from_attributes": True}


class OrganizationRead(BaseModel):
    id: UUID
    name: str
    subscription_status: str

    model_config = {"from_attributes": True}
