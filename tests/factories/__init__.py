"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import UserFactory, OrganizationFactory, ...
"""

from tests.factories.base import BaseFactory, generate_uuid, utc_now
from tests.factories.invite import InviteFactory
from tests.factories.organization import OrganizationFactory
from tests.factories.user import DEFAULT_TEST_PASSWORD, RoleFactory, UserFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid",
    "utc_now",
    # Organization
    "OrganizationFactory",
    # User
    "UserFactory",
    "RoleFactory",
    "DEFAULT_TEST_PASSWORD",
    # Invite
    "InviteFactory",
]
