"""Model exports.

Import from here: `from src.amuta.models import User, Organization`
"""

from src.amuta.models.enums import (
    ALL_ORGANIZATIONS,
    InviteStatus,
    RoleName,
    SubscriptionStatus,
)
from src.amuta.models.invite import Invite
from src.amuta.models.organization import Organization
from src.amuta.models.user import Role, User

__all__ = [
    # Enums
    "ALL_ORGANIZATIONS",
    "InviteStatus",
    "RoleName",
    "SubscriptionStatus",
    # Models
    "Invite",
    "Organization",
    "Role",
    "User",
]
