"""Invite model - a pending, token-authenticated offer of membership."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from src.amuta.models.base import utc_now
from src.amuta.models.enums import InviteStatus, RoleName


class Invite(SQLModel, table=True):
    """Invite row. Tokens are never stored; they are signed over the row id.

    ``accepted_at`` and ``cancelled_at`` are mutually exclusive and each is set
    at most once.
    """

    __tablename__ = "invites"
    __table_args__ = (
        CheckConstraint(
            "accepted_at IS NULL OR cancelled_at IS NULL", name="ck_invites_single_outcome"
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, index=True)
    organization_id: UUID = Field(foreign_key="organizations.id", index=True)
    role_name: str = Field(default=RoleName.MEMBER.value, max_length=50)
    invited_by: UUID | None = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime
    accepted_at: datetime | None = Field(default=None)
    cancelled_at: datetime | None = Field(default=None)

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or utc_now())

    @property
    def status(self) -> InviteStatus:
        if self.accepted_at is not None:
            return InviteStatus.ACCEPTED
        if self.cancelled_at is not None:
            return InviteStatus.CANCELLED
        if self.is_expired():
            return InviteStatus.EXPIRED
        return InviteStatus.PENDING
