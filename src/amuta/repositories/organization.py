"""Repository for Organization entity."""

from collections.abc import Iterable
from uuid import UUID

from sqlmodel import select

from src.amuta.models import Organization
from src.amuta.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[Organization]):
    """Repository for organizations."""

    model = Organization

    async def get_by_ids(self, organization_ids: Iterable[UUID]) -> dict[UUID, Organization]:
        """Load organizations by id, keyed by id. Unknown ids are absent."""
        ids = list(set(organization_ids))
        if not ids:
            return {}
        result = await self.session.execute(
            select(Organization).where(Organization.id.in_(ids))  # type: ignore[attr-defined]
        )
        return {org.id: org for org in result.scalars().all()}
