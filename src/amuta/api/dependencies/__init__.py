"""FastAPI dependency injection definitions."""

from src.amuta.api.dependencies.auth import (
    Access,
    AccessContext,
    GuardedAccess,
    Identity,
    OptionalIdentity,
    OptionalPrincipal,
    get_access_context,
    get_identity,
    get_optional_identity,
    require_access,
    require_permission,
)
from src.amuta.api.dependencies.db import DBSession, get_db_session
from src.amuta.api.dependencies.repositories import (
    InviteRepo,
    OrganizationRepo,
    RoleRepo,
    UserRepo,
)
from src.amuta.api.dependencies.services import (
    AccessServiceDep,
    AuthServiceDep,
    IdentityServiceDep,
    InviteServiceDep,
    MembershipServiceDep,
    RegistrationServiceDep,
    SelectionServiceDep,
)

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Auth
    "Access",
    "AccessContext",
    "GuardedAccess",
    "Identity",
    "OptionalIdentity",
    "OptionalPrincipal",
    "get_access_context",
    "get_identity",
    "get_optional_identity",
    "require_access",
    "require_permission",
    # Repositories
    "InviteRepo",
    "OrganizationRepo",
    "RoleRepo",
    "UserRepo",
    # Services
    "AccessServiceDep",
    "AuthServiceDep",
    "IdentityServiceDep",
    "InviteServiceDep",
    "MembershipServiceDep",
    "RegistrationServiceDep",
    "SelectionServiceDep",
]
