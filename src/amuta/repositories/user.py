"""Repository for User entity."""

from uuid import UUID

from sqlalchemy import delete
from sqlmodel import select

from src.amuta.models import User
from src.amuta.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for principals."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email address (case-insensitive)."""
        result = await self.session.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def delete_by_id(self, user_id: UUID) -> int:
        """Delete a user row. Returns the number of rows removed."""
        result = await self.session.execute(
            delete(User)
            .where(User.id == user_id)  # type: ignore[arg-type]
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
