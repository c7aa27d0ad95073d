"""Organization model - the tenant boundary for roles and invites."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.amuta.models.base import utc_now
from src.amuta.models.enums import SubscriptionStatus


class Organization(SQLModel, table=True):
    """Organization registry."""

    __tablename__ = "organizations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=200, index=True)
    subscription_status: str = Field(default=SubscriptionStatus.INACTIVE.value, max_length=20)
    created_by_user_id: UUID | None = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def is_active(self) -> bool:
        return self.subscription_status == SubscriptionStatus.ACTIVE.value
