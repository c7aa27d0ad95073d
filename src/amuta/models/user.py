"""Principal and role (membership) models."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.amuta.models.base import utc_now
from src.amuta.models.enums import RoleName


class User(SQLModel, table=True):
    """Authenticated principal."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    # Null until the principal sets a password (administrative add, invite provisioning)
    hashed_password: str | None = Field(default=None, max_length=255)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    is_active: bool = Field(default=True)
    # Persisted organization selection: an organization id or "all"
    active_organization: str | None = Field(default=None, max_length=64)
    last_login_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def has_signed_in(self) -> bool:
        return self.last_login_at is not None


class Role(SQLModel, table=True):
    """A principal's role within exactly one organization.

    The composite primary key allows at most one role per (user, organization).
    """

    __tablename__ = "roles"

    user_id: UUID = Field(foreign_key="users.id", primary_key=True)
    organization_id: UUID = Field(foreign_key="organizations.id", primary_key=True, index=True)
    role_name: str = Field(default=RoleName.MEMBER.value, max_length=50)
    suspended: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
