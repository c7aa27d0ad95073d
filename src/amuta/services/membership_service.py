"""Direct administrative add of a principal to an organization."""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.amuta.core.exceptions import (
    AlreadyMember,
    OrganizationNotFound,
    PermissionDenied,
    ProvisioningFailed,
    RoleAssignFailed,
    Unauthorized,
)
from src.amuta.core.logging import get_logger
from src.amuta.core.permissions import parse_role_name
from src.amuta.models import Role, RoleName
from src.amuta.repositories import OrganizationRepository, RoleRepository, UserRepository
from src.amuta.services.access_guard import AccessService
from src.amuta.services.identity_service import IdentityService, ResolvedIdentity

logger = get_logger(__name__)


class MembershipService:
    """Adds principals to organizations without an invite."""

    def __init__(
        self,
        user_repo: UserRepository,
        organization_repo: OrganizationRepository,
        role_repo: RoleRepository,
        identity_service: IdentityService,
        access_service: AccessService,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.organization_repo = organization_repo
        self.role_repo = role_repo
        self.identity_service = identity_service
        self.access_service = access_service
        self.session = session

    async def add_member(
        self,
        organization_id: UUID,
        email: str,
        role_name: RoleName | str,
        actor: ResolvedIdentity | None,
        password: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Role:
        """Create (or reuse) a principal and give it a role in the organization.

        A principal created without a password sets one through an invite or
        password flow on first sign-in.
        """
        role = parse_role_name(role_name) if isinstance(role_name, str) else role_name

        if actor is None:
            raise Unauthorized()
        await self.access_service.authorize(actor, organization_id)
        if role is RoleName.SUPER_ADMIN and not actor.is_super_admin:
            raise PermissionDenied("Only a super admin can grant super admin")

        if await self.organization_repo.get_by_id(organization_id) is None:
            raise OrganizationNotFound()

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
            except Exception as e:
                logger.error("Failed to create principal", error=str(e))
                raise ProvisioningFailed() from e
        user_id = user.id

        if await self.role_repo.get_membership(user_id, organization_id) is not None:
            raise AlreadyMember()

        try:
            membership = await self.role_repo.create(
                user_id=user_id,
                organization_id=organization_id,
                role_name=role.value,
                suspended=False,
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise AlreadyMember() from e
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to add member", user_id=str(user_id), error=str(e))
            if created:
                await self.identity_service.delete_principal(user_id)
            raise RoleAssignFailed() from e

        logger.info(
            "Member added",
            user_id=str(user_id),
            organization_id=str(organization_id),
            role_name=role.value,
            added_by=str(actor.principal.id),
        )
        return membership
