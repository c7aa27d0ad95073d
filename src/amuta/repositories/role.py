"""Repository for Role (membership) entity."""

from uuid import UUID

from sqlmodel import select

from src.amuta.models import Role
from src.amuta.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """Repository for role assignments.

    Roles are keyed by (user_id, organization_id), so ``get_by_id`` does not
    apply; use ``get_membership`` instead.
    """

    model = Role

    async def list_for_user(self, user_id: UUID) -> list[Role]:
        """All role rows for a principal, oldest first."""
        result = await self.session.execute(
            select(Role)
            .where(Role.user_id == user_id)
            .order_by(Role.created_at, Role.organization_id)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())

    async def get_membership(self, user_id: UUID, organization_id: UUID) -> Role | None:
        """Get the role a principal holds in an organization, if any."""
        result = await self.session.execute(
            select(Role).where(
                Role.user_id == user_id,
                Role.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        user_id: UUID,
        organization_id: UUID,
        role_name: str,
        suspended: bool = False,
    ) -> Role:
        """Insert a role row and flush.

        Raises IntegrityError when the principal already holds a role in the
        organization. The caller owns rollback.
        """
        role = Role(
            user_id=user_id,
            organization_id=organization_id,
            role_name=role_name,
            suspended=suspended,
        )
        self.session.add(role)
        await self.session.flush()
        return role

    async def list_for_organization(self, organization_id: UUID) -> list[Role]:
        """All role rows in an organization, oldest first."""
        result = await self.session.execute(
            select(Role)
            .where(Role.organization_id == organization_id)
            .order_by(Role.created_at)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())
