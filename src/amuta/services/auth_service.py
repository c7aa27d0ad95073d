"""Authentication service - password login and access tokens."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.amuta.core.exceptions import InvalidCredentials
from src.amuta.core.logging import get_logger
from src.amuta.core.security import DUMMY_PASSWORD_HASH, create_access_token, verify_password
from src.amuta.models.base import utc_now
from src.amuta.repositories import UserRepository

logger = get_logger(__name__)


class AuthService:
    """Authenticates principals by email and password."""

    def __init__(self, user_repo: UserRepository, session: AsyncSession):
        self.user_repo = user_repo
        self.session = session

    async def login(self, email: str, password: str) -> str:
        """Verify credentials, record the sign-in and return an access token.

        Raises:
            InvalidCredentials: Unknown email, wrong password, no password set,
                or inactive principal.
        """
        try:
            user = await self.user_repo.get_by_email(email)

            # Always verify so response time does not reveal whether the email exists
            password_hash = user.hashed_password if user and user.hashed_password else None
            password_valid = verify_password(password, password_hash or DUMMY_PASSWORD_HASH)

            if user is None or password_hash is None or not password_valid:
                raise InvalidCredentials()
            if not user.is_active:
                raise InvalidCredentials()

            user.last_login_at = utc_now()
            self.session.add(user)
            await self.session.commit()
        except InvalidCredentials:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Login failed", error=str(e))
            raise

        logger.info("Principal signed in", user_id=str(user.id))
        return create_access_token(user.id)
