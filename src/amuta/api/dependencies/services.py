"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.amuta.api.dependencies.db import DBSession
from src.amuta.api.dependencies.repositories import (
    InviteRepo,
    OrganizationRepo,
    RoleRepo,
    UserRepo,
)
from src.amuta.services import (
    AccessService,
    AuthService,
    IdentityService,
    InviteService,
    MembershipService,
    RegistrationService,
    SelectionService,
)


def get_identity_service(
    user_repo: UserRepo, role_repo: RoleRepo, session: DBSession
) -> IdentityService:
    return IdentityService(user_repo, role_repo, session)


def get_access_service(organization_repo: OrganizationRepo) -> AccessService:
    return AccessService(organization_repo)


def get_selection_service(session: DBSession) -> SelectionService:
    return SelectionService(session)


def get_auth_service(user_repo: UserRepo, session: DBSession) -> AuthService:
    return AuthService(user_repo, session)


IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
AccessServiceDep = Annotated[AccessService, Depends(get_access_service)]
SelectionServiceDep = Annotated[SelectionService, Depends(get_selection_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def get_invite_service(
    invite_repo: InviteRepo,
    user_repo: UserRepo,
    role_repo: RoleRepo,
    organization_repo: OrganizationRepo,
    identity_service: IdentityServiceDep,
    access_service: AccessServiceDep,
    session: DBSession,
) -> InviteService:
    return InviteService(
        invite_repo,
        user_repo,
        role_repo,
        organization_repo,
        identity_service,
        access_service,
        session,
    )


def get_registration_service(
    user_repo: UserRepo,
    organization_repo: OrganizationRepo,
    role_repo: RoleRepo,
    identity_service: IdentityServiceDep,
    session: DBSession,
) -> RegistrationService:
    return RegistrationService(user_repo, organization_repo, role_repo, identity_service, session)


def get_membership_service(
    user_repo: UserRepo,
    organization_repo: OrganizationRepo,
    role_repo: RoleRepo,
    identity_service: IdentityServiceDep,
    access_service: AccessServiceDep,
    session: DBSession,
) -> MembershipService:
    return MembershipService(
        user_repo, organization_repo, role_repo, identity_service, access_service, session
    )


InviteServiceDep = Annotated[InviteService, Depends(get_invite_service)]
RegistrationServiceDep = Annotated[RegistrationService, Depends(get_registration_service)]
MembershipServiceDep = Annotated[MembershipService, Depends(get_membership_service)]
