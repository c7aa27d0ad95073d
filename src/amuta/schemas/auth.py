from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=100)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RoleRead(BaseModel):
    organization_id: UUID
    role_name: str
    suspended: bool

    model_config = {"from_attributes": True}


class PrincipalRead(BaseModel):
    id: UUID
    email: str
    first_name: str | None
    last_name: str | None
    is_active: bool

    model_config = {"from_attributes": True}


class SelectionRead(BaseModel):
    """Active organization: an id, or "all" for the super-admin wildcard."""

    organization_id: str | None


class MeResponse(BaseModel):
    user: PrincipalRead
    roles: list[RoleRead]
    is_super_admin: bool
    selection: SelectionRead
    permissions: list[str]


class SetActiveOrganizationRequest(BaseModel):
    organization_id: str = Field(min_length=1, max_length=64)
