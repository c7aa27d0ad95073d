"""Repository for Invite entity."""

from uuid import UUID

from sqlalchemy import func
from sqlmodel import select, update

from src.amuta.models import Invite
from src.amuta.models.base import utc_now
from src.amuta.repositories.base import BaseRepository


def _pending_filter() -> tuple:
    now = utc_now()
    return (
        Invite.accepted_at.is_(None),  # type: ignore[union-attr]
        Invite.cancelled_at.is_(None),  # type: ignore[union-attr]
        Invite.expires_at > now,  # type: ignore[operator]
    )


class InviteRepository(BaseRepository[Invite]):
    """Repository for invites.

    State transitions (accept, cancel) are compare-and-swap updates that only
    touch rows still open; the returned row count tells the caller whether it
    won.
    """

    model = Invite

    async def get_active_duplicate(
        self, email: str, organization_id: UUID, role_name: str
    ) -> Invite | None:
        """Get a valid invite for the same (email, organization, role)."""
        result = await self.session.execute(
            select(Invite)
            .where(
                Invite.email == email,
                Invite.organization_id == organization_id,
                Invite.role_name == role_name,
                *_pending_filter(),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def mark_accepted(self, invite_id: UUID) -> int:
        """Set accepted_at if the invite is still open. Returns rows updated."""
        result = await self.session.execute(
            update(Invite)
            .where(Invite.id == invite_id)  # type: ignore[arg-type]
            .where(Invite.accepted_at.is_(None))  # type: ignore[union-attr]
            .where(Invite.cancelled_at.is_(None))  # type: ignore[union-attr]
            .values(accepted_at=utc_now())
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def mark_cancelled(self, invite_id: UUID) -> int:
        """Set cancelled_at if the invite is still open. Returns rows updated."""
        result = await self.session.execute(
            update(Invite)
            .where(Invite.id == invite_id)  # type: ignore[arg-type]
            .where(Invite.accepted_at.is_(None))  # type: ignore[union-attr]
            .where(Invite.cancelled_at.is_(None))  # type: ignore[union-attr]
            .values(cancelled_at=utc_now())
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def refetch(self, invite_id: UUID) -> Invite | None:
        """Re-read an invite, overwriting any stale state held by the session."""
        result = await self.session.execute(
            select(Invite)
            .where(Invite.id == invite_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_pending(self, organization_id: UUID | None = None) -> list[Invite]:
        """List valid invites, newest first. ``None`` means every organization."""
        query = select(Invite).where(*_pending_filter())
        if organization_id is not None:
            query = query.where(Invite.organization_id == organization_id)
        query = query.order_by(Invite.created_at.desc())  # type: ignore[attr-defined]
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_pending_by_organization(
        self, organization_id: UUID | None = None
    ) -> dict[UUID, int]:
        """Count valid invites grouped by organization."""
        query = select(Invite.organization_id, func.count()).where(*_pending_filter())
        if organization_id is not None:
            query = query.where(Invite.organization_id == organization_id)
        query = query.group_by(Invite.organization_id)  # type: ignore[arg-type]
        result = await self.session.execute(query)
        return {org_id: count for org_id, count in result.all()}
