"""Test helper functions for common data creation patterns."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlmodel import select

from src.amuta.core.db import get_session
from src.amuta.core.security import create_access_token, create_invite_token
from src.amuta.models import Invite, Organization, Role, RoleName, User
from src.amuta.repositories import (
    InviteRepository,
    OrganizationRepository,
    RoleRepository,
    UserRepository,
)
from src.amuta.services import (
    AccessService,
    IdentityService,
    InviteService,
    MembershipService,
    RegistrationService,
    ResolvedIdentity,
)
from tests.factories import InviteFactory, OrganizationFactory, RoleFactory, UserFactory


async def create_organization(session: AsyncSession, **kwargs) -> Organization:
    """Create and commit an organization (active unless overridden)."""
    organization = OrganizationFactory.build(**kwargs)
    session.add(organization)
    await session.commit()
    return organization


async def create_user_with_role(
    session: AsyncSession,
    organization: Organization,
    role_name: RoleName = RoleName.ORGANIZATION_ADMIN,
    suspended: bool = False,
    **user_kwargs,
) -> tuple[User, Role]:
    """Create a principal holding ``role_name`` in ``organization``.

    Args:
        session: Database session
        organization: Organization to create the role in
        role_name: Role to assign (default: organization_admin)
        suspended: Whether the role row is suspended
        **user_kwargs: Additional args passed to UserFactory

    Returns:
        Tuple of (user, role)
    """
    user = UserFactory.build(**user_kwargs)
    session.add(user)
    await session.flush()

    role = RoleFactory.build(
        user_id=user.id,
        organization_id=organization.id,
        role_name=role_name.value,
        suspended=suspended,
    )
    session.add(role)
    await session.commit()
    return user, role


async def create_user(session: AsyncSession, **kwargs) -> User:
    """Create a principal without any role."""
    user = UserFactory.build(**kwargs)
    session.add(user)
    await session.commit()
    return user


async def add_role(
    session: AsyncSession,
    user: User,
    organization: Organization,
    role_name: RoleName = RoleName.MEMBER,
    suspended: bool = False,
) -> Role:
    role = RoleFactory.build(
        user_id=user.id,
        organization_id=organization.id,
        role_name=role_name.value,
        suspended=suspended,
    )
    session.add(role)
    await session.commit()
    return role


async def create_invite(
    session: AsyncSession,
    organization: Organization,
    email: str,
    role_name: RoleName = RoleName.MEMBER,
    factory_method: str = "build",
    **kwargs,
) -> tuple[Invite, str]:
    """Insert an invite row directly and mint a token for it.

    ``factory_method`` picks an InviteFactory constructor ("expired",
    "accepted", "cancelled").
    """
    build = getattr(InviteFactory, factory_method)
    invite = build(
        organization_id=organization.id,
        email=email,
        role_name=role_name.value,
        **kwargs,
    )
    session.add(invite)
    await session.commit()
    return invite, create_invite_token(invite.id, invite.expires_at)


def auth_headers(user: User, organization_id: UUID | str | None = None) -> dict[str, str]:
    """Bearer header for ``user``, optionally selecting an organization."""
    headers = {"Authorization": f"Bearer {create_access_token(user.id)}"}
    if organization_id is not None:
        headers["X-Organization-ID"] = str(organization_id)
    return headers


async def load_identity(session: AsyncSession, user: User) -> ResolvedIdentity:
    roles = await RoleRepository(session).list_for_user(user.id)
    return ResolvedIdentity.from_rows(user, roles)


# --- Service builders ---


def build_identity_service(session: AsyncSession) -> IdentityService:
    return IdentityService(UserRepository(session), RoleRepository(session), session)


def build_invite_service(session: AsyncSession) -> InviteService:
    return InviteService(
        invite_repo=InviteRepository(session),
        user_repo=UserRepository(session),
        role_repo=RoleRepository(session),
        organization_repo=OrganizationRepository(session),
        identity_service=build_identity_service(session),
        access_service=AccessService(OrganizationRepository(session)),
        session=session,
    )


def build_registration_service(session: AsyncSession) -> RegistrationService:
    return RegistrationService(
        user_repo=UserRepository(session),
        organization_repo=OrganizationRepository(session),
        role_repo=RoleRepository(session),
        identity_service=build_identity_service(session),
        session=session,
    )


def build_membership_service(session: AsyncSession) -> MembershipService:
    return MembershipService(
        user_repo=UserRepository(session),
        organization_repo=OrganizationRepository(session),
        role_repo=RoleRepository(session),
        identity_service=build_identity_service(session),
        access_service=AccessService(OrganizationRepository(session)),
        session=session,
    )


# --- Fresh reads ---


async def fetch_invite(engine: AsyncEngine, invite_id: UUID) -> Invite | None:
    """Read an invite through a new session (no stale identity map)."""
    async with get_session(engine) as session:
        return await session.get(Invite, invite_id)


async def fetch_roles(engine: AsyncEngine, user_id: UUID) -> list[Role]:
    async with get_session(engine) as session:
        result = await session.execute(select(Role).where(Role.user_id == user_id))
        return list(result.scalars().all())


async def fetch_user_by_email(engine: AsyncEngine, email: str) -> User | None:
    async with get_session(engine) as session:
        return await UserRepository(session).get_by_email(email)
