"""User and role factories for test data generation."""

from polyfactory import Use

from src.amuta.core.security import hash_password
from src.amuta.models import Role, RoleName, User
from tests.factories.base import BaseFactory, generate_uuid, utc_now

# Default test password - stored for convenience in tests
DEFAULT_TEST_PASSWORD = "secret1"


class UserFactory(BaseFactory):
    """Factory for generating User (principal) test data."""

    __model__ = User

    id = Use(generate_uuid)
    email = Use(lambda: f"user_{generate_uuid().hex[-8:]}@example.com")
    hashed_password = Use(lambda: hash_password(DEFAULT_TEST_PASSWORD))
    first_name = "Test"
    last_name = "User"
    is_active = True
    active_organization = None
    last_login_at = None
    created_at = Use(utc_now)
    updated_at = Use(utc_now)

    @classmethod
    def signed_in(cls, **kwargs):
        """Create a principal that has signed in before."""
        return cls.build(last_login_at=utc_now(), **kwargs)

    @classmethod
    def without_password(cls, **kwargs):
        """Create a principal that never set a password."""
        return cls.build(hashed_password=None, **kwargs)

    @classmethod
    def inactive(cls, **kwargs):
        return cls.build(is_active=False, **kwargs)


class RoleFactory(BaseFactory):
    """Factory for generating Role test data."""

    __model__ = Role

    # FK fields - must be set explicitly
    user_id = None
    organization_id = None
    role_name = RoleName.MEMBER.value
    suspended = False
    created_at = Use(utc_now)

    @classmethod
    def admin(cls, **kwargs):
        return cls.build(role_name=RoleName.ORGANIZATION_ADMIN.value, **kwargs)

    @classmethod
    def super_admin(cls, **kwargs):
        return cls.build(role_name=RoleName.SUPER_ADMIN.value, **kwargs)

    @classmethod
    def suspended_role(cls, **kwargs):
        return cls.build(suspended=True, **kwargs)
