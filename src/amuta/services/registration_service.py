"""Organization registration - creates an organization and its first admin.

The organization starts inactive and the admin role starts suspended; both are
switched on by a super-admin outside this flow.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.amuta.core.exceptions import ProvisioningFailed
from src.amuta.core.logging import get_logger
from src.amuta.models import Organization, RoleName, SubscriptionStatus
from src.amuta.repositories import OrganizationRepository, RoleRepository, UserRepository
from src.amuta.services.identity_service import IdentityService

logger = get_logger(__name__)


@dataclass(frozen=True)
class RegistrationResult:
    organization_id: UUID
    user_id: UUID
    user_created: bool


class RegistrationService:
    """Service for self-service organization registration."""

    def __init__(
        self,
        user_repo: UserRepository,
        organization_repo: OrganizationRepository,
        role_repo: RoleRepository,
        identity_service: IdentityService,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.organization_repo = organization_repo
        self.role_repo = role_repo
        self.identity_service = identity_service
        self.session = session

    async def register(
        self,
        organization_name: str,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> RegistrationResult:
        """Register an organization with ``email`` as its admin.

        1. Get or create the admin principal (an existing one keeps its password)
        2. Create the organization, inactive
        3. Assign ``organization_admin``, suspended, unless a role already exists

        A principal created here is deleted again if the later steps fail.
        """
        user = await self.user_repo.get_by_email(email)
        created = False
        if user is None:
            try:
                user = await self.identity_service.create_principal(
                    email, password, first_name, last_name
                )
                created = True
            except IntegrityError:
                user = await self.user_repo.get_by_email(email)
                if user is None:
                    raise ProvisioningFailed() from None
        user_id = user.id

        try:
            organization = Organization(
                name=organization_name.strip(),
                subscription_status=SubscriptionStatus.INACTIVE.value,
                created_by_user_id=user_id,
            )
            self.organization_repo.add(organization)
            await self.session.flush()
            organization_id = organization.id

            existing = await self.role_repo.get_membership(user_id, organization_id)
            if existing is None:
                await self.role_repo.create(
                    user_id=user_id,
                    organization_id=organization_id,
                    role_name=RoleName.ORGANIZATION_ADMIN.value,
                    suspended=True,
                )
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Organization registration failed", user_id=str(user_id), error=str(e))
            if created:
                await self.identity_service.delete_principal(user_id)
            raise ProvisioningFailed("Failed to register organization") from e

        logger.info(
            "Organization registered",
            organization_id=str(organization_id),
            user_id=str(user_id),
            user_created=created,
        )
        return RegistrationResult(
            organization_id=organization_id,
            user_id=user_id,
            user_created=created,
        )
