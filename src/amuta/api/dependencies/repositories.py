"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.amuta.api.dependencies.db import DBSession
from src.amuta.repositories import (
    InviteRepository,
    OrganizationRepository,
    RoleRepository,
    UserRepository,
)


def get_user_repository(session: DBSession) -> UserRepository:
    return UserRepository(session)


def get_role_repository(session: DBSession) -> RoleRepository:
    return RoleRepository(session)


def get_organization_repository(session: DBSession) -> OrganizationRepository:
    return OrganizationRepository(session)


def get_invite_repository(session: DBSession) -> InviteRepository:
    return InviteRepository(session)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
RoleRepo = Annotated[RoleRepository, Depends(get_role_repository)]
OrganizationRepo = Annotated[OrganizationRepository, Depends(get_organization_repository)]
InviteRepo = Annotated[InviteRepository, Depends(get_invite_repository)]
