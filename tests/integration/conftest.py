"""Integration test fixtures: organizations, principals and services.

Everything here runs against the per-test SQLite database from the root
conftest. Data is arranged through ``db_session``; services run in
``service_session``.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.amuta.models import Organization, RoleName, User
from src.amuta.services import InviteService, ResolvedIdentity
from tests.helpers import (
    build_invite_service,
    create_organization,
    create_user_with_role,
    load_identity,
)


@pytest.fixture
async def org1(db_session: AsyncSession) -> Organization:
    """Active organization."""
    return await create_organization(db_session, name="Org One")


@pytest.fixture
async def org2(db_session: AsyncSession) -> Organization:
    """Second active organization."""
    return await create_organization(db_session, name="Org Two")


@pytest.fixture
async def admin(db_session: AsyncSession, org1: Organization) -> User:
    """organization_admin of org1."""
    user, _ = await create_user_with_role(
        db_session, org1, RoleName.ORGANIZATION_ADMIN, email="admin@x.org"
    )
    return user


@pytest.fixture
async def admin_identity(db_session: AsyncSession, admin: User) -> ResolvedIdentity:
    return await load_identity(db_session, admin)


@pytest.fixture
async def member(db_session: AsyncSession, org1: Organization) -> User:
    """Plain member of org1 (no manage_users)."""
    user, _ = await create_user_with_role(
        db_session, org1, RoleName.MEMBER, email="member@x.org"
    )
    return user


@pytest.fixture
async def member_identity(db_session: AsyncSession, member: User) -> ResolvedIdentity:
    return await load_identity(db_session, member)


@pytest.fixture
async def super_admin(db_session: AsyncSession) -> User:
    """Super-admin whose role row lives in its own staff organization."""
    staff = await create_organization(db_session, name="Staff")
    user, _ = await create_user_with_role(
        db_session, staff, RoleName.SUPER_ADMIN, email="root@x.org"
    )
    return user


@pytest.fixture
async def super_identity(db_session: AsyncSession, super_admin: User) -> ResolvedIdentity:
    return await load_identity(db_session, super_admin)


@pytest.fixture
def invite_service(service_session: AsyncSession) -> InviteService:
    return build_invite_service(service_session)
