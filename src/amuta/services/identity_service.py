"""Identity service - resolves the authenticated principal and its roles.

Also provides the identity-provider operations (create principal, set
password, delete principal) used by invite provisioning and registration.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.amuta.core.exceptions import AuthRequired
from src.amuta.core.logging import get_logger
from src.amuta.core.security import TokenType, decode_token, hash_password
from src.amuta.models import Role, RoleName, User
from src.amuta.models.base import utc_now
from src.amuta.repositories import RoleRepository, UserRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedIdentity:
    """Principal plus every role row it holds, loaded once per request."""

    principal: User
    roles: tuple[Role, ...]
    is_super_admin: bool

    @classmethod
    def from_rows(cls, principal: User, roles: list[Role]) -> "ResolvedIdentity":
        return cls(
            principal=principal,
            roles=tuple(roles),
            is_super_admin=any(r.role_name == RoleName.SUPER_ADMIN.value for r in roles),
        )

    @property
    def organization_ids(self) -> list[UUID]:
        """Organizations the principal holds a role in, in role order."""
        return [r.organization_id for r in self.roles]

    def role_for(self, organization_id: UUID) -> Role | None:
        for role in self.roles:
            if role.organization_id == organization_id:
                return role
        return None


def parse_bearer(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[7:].strip()
    return token or None


class IdentityService:
    """Principal lookup and identity-provider operations."""

    def __init__(
        self,
        user_repo: UserRepository,
        role_repo: RoleRepository,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.role_repo = role_repo
        self.session = session

    async def verify_bearer_token(self, token: str) -> User | None:
        """Return the active principal an access token belongs to, or None."""
        payload = decode_token(token)
        if payload is None or payload.get("type") != TokenType.ACCESS:
            return None

        try:
            user_id = UUID(str(payload.get("sub")))
        except ValueError:
            return None

        user = await self.user_repo.get_by_id(user_id)
        if user is None or not user.is_active:
            return None
        return user

    async def get_session(self, authorization: str | None) -> User | None:
        """Return the principal behind an Authorization header, or None."""
        token = parse_bearer(authorization)
        if token is None:
            return None
        return await self.verify_bearer_token(token)

    async def load_identity(self, user: User) -> ResolvedIdentity:
        roles = await self.role_repo.list_for_user(user.id)
        return ResolvedIdentity.from_rows(user, roles)

    async def resolve(self, authorization: str | None) -> ResolvedIdentity:
        """Load the current principal and all of its role rows.

        Raises:
            AuthRequired: No valid session.
        """
        user = await self.get_session(authorization)
        if user is None:
            raise AuthRequired()
        return await self.load_identity(user)

    async def create_principal(
        self,
        email: str,
        password: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Create and commit a principal.

        Raises IntegrityError (after rolling back) if the email is taken.
        """
        user = User(
            email=email.strip().lower(),
            hashed_password=hash_password(password) if password else None,
            first_name=first_name,
            last_name=last_name,
        )
        self.user_repo.add(user)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise

        logger.info("Principal created", user_id=str(user.id))
        return user

    async def set_password(
        self,
        user: User,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        user.hashed_password = hash_password(password)
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        user.updated_at = utc_now()
        self.session.add(user)
        await self.session.commit()

        logger.info("Principal password set", user_id=str(user.id))
        return user

    async def delete_principal(self, user_id: UUID) -> None:
        """Remove a principal. Used to undo provisioning that did not complete."""
        try:
            await self.user_repo.delete_by_id(user_id)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to delete principal", user_id=str(user_id), error=str(e))
            raise

        logger.info("Principal deleted", user_id=str(user_id))
