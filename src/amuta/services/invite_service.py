"""Invite lifecycle service: issue, validate, accept, resend, cancel, list.

Invite tokens are HS256 JWTs over the invite id and are never stored. The
invite row is authoritative: its own expiry is checked independently of the
token's ``exp``.
"""

import asyncio
from dataclasses import dataclass, replace
from datetime import timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.amuta.core.config import get_settings
from src.amuta.core.exceptions import (
    AccountAlreadyActive,
    AppError,
    AuthRequired,
    DuplicateActiveInvite,
    EmailMismatch,
    InvalidToken,
    InviteAlreadyAccepted,
    InviteCancelled,
    InviteExpired,
    InviteNotFound,
    MailSendFailed,
    OrganizationNotFound,
    PermissionDenied,
    ProvisioningFailed,
    RoleAssignFailed,
    Unauthorized,
)
from src.amuta.core.logging import get_logger
from src.amuta.core.notifications import send_invite_email
from src.amuta.core.permissions import parse_role_name
from src.amuta.core.security import create_invite_token, decode_invite_token
from src.amuta.models import ALL_ORGANIZATIONS, Invite, RoleName, User
from src.amuta.models.base import utc_now
from src.amuta.repositories import (
    InviteRepository,
    OrganizationRepository,
    RoleRepository,
    UserRepository,
)
from src.amuta.services.access_guard import AccessService
from src.amuta.services.identity_service import IdentityService, ResolvedIdentity

logger = get_logger(__name__)


@dataclass(frozen=True)
class InviteInfo:
    email: str
    role_name: str
    organization_id: UUID
    organization_name: str
    user_exists: bool
    already_member: bool


@dataclass(frozen=True)
class AcceptResult:
    user_id: UUID
    email: str
    organization_id: UUID
    role_name: str
    already_member: bool = False


@dataclass(frozen=True)
class ResendResult:
    success: bool = True
    skipped: bool = False
    reason: str | None = None


@dataclass(frozen=True)
class CancelResult:
    success: bool = True
    already_cancelled: bool = False


def normalize_email(email: str) -> str:
    return email.strip().lower()


class InviteService:
    """Service for the invite lifecycle."""

    def __init__(
        self,
        invite_repo: InviteRepository,
        user_repo: UserRepository,
        role_repo: RoleRepository,
        organization_repo: OrganizationRepository,
        identity_service: IdentityService,
        access_service: AccessService,
        session: AsyncSession,
    ):
        self.invite_repo = invite_repo
        self.user_repo = user_repo
        self.role_repo = role_repo
        self.organization_repo = organization_repo
        self.identity_service = identity_service
        self.access_service = access_service
        self.session = session

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    async def create_invite(
        self,
        email: str,
        role_name: RoleName | str,
        organization_id: UUID,
        actor: ResolvedIdentity | None,
    ) -> tuple[Invite, str]:
        """Create an invite, mint its token and email it.

        Returns (invite, token). The row is committed before the email is sent,
        so a send failure leaves it in place for a later resend.
        """
        role = parse_role_name(role_name) if isinstance(role_name, str) else role_name

        if actor is None:
            raise Unauthorized()
        await self.access_service.authorize(actor, organization_id)
        if role is RoleName.SUPER_ADMIN and not actor.is_super_admin:
            raise PermissionDenied("Only a super admin can invite a super admin")

        organization = await self.organization_repo.get_by_id(organization_id)
        if organization is None:
            raise OrganizationNotFound()
        organization_name = organization.name

        email = normalize_email(email)
        settings = get_settings()

        try:
            duplicate = await self.invite_repo.get_active_duplicate(
                email, organization_id, role.value
            )
            if duplicate is not None:
                raise DuplicateActiveInvite()

            invite = Invite(
                email=email,
                organization_id=organization_id,
                role_name=role.value,
                invited_by=actor.principal.id,
                expires_at=utc_now() + timedelta(days=settings.invite_expire_days),
            )
            self.invite_repo.add(invite)
            await self.session.commit()
        except AppError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to create invite", error=str(e))
            raise

        token = create_invite_token(invite.id, invite.expires_at)
        logger.info(
            "Invite created",
            invite_id=str(invite.id),
            organization_id=str(organization_id),
            role_name=role.value,
            invited_by=str(actor.principal.id),
        )

        sent = await asyncio.to_thread(
            send_invite_email,
            to=email,
            token=token,
            organization_name=organization_name,
            role_name=role.value,
            expires_at=invite.expires_at,
        )
        if not sent:
            logger.error("Invite email failed", invite_id=str(invite.id))
            raise MailSendFailed(invite_id=str(invite.id))

        return invite, token

    # ------------------------------------------------------------------
    # Validate
    # ------------------------------------------------------------------

    async def _load_invite(self, token: str) -> Invite:
        invite_id = decode_invite_token(token)
        if invite_id is None:
            raise InvalidToken()

        invite = await self.invite_repo.get_by_id(invite_id)
        if invite is None:
            raise InviteNotFound()
        return invite

    @staticmethod
    def _ensure_open(invite: Invite) -> None:
        if invite.cancelled_at is not None:
            raise InviteCancelled()
        if invite.accepted_at is not None:
            raise InviteAlreadyAccepted()
        if invite.is_expired():
            raise InviteExpired()

    async def validate(self, token: str) -> InviteInfo:
        """Verify a token and report the invite's status. No side effects.

        Raises:
            InvalidToken, InviteNotFound, InviteCancelled, InviteAlreadyAccepted,
            InviteExpired
        """
        invite = await self._load_invite(token)
        self._ensure_open(invite)

        organization = await self.organization_repo.get_by_id(invite.organization_id)
        user = await self.user_repo.get_by_email(invite.email)
        already_member = False
        if user is not None:
            membership = await self.role_repo.get_membership(user.id, invite.organization_id)
            already_member = membership is not None

        return InviteInfo(
            email=invite.email,
            role_name=invite.role_name,
            organization_id=invite.organization_id,
            organization_name=organization.name if organization else "",
            user_exists=user is not None,
            already_member=already_member,
        )

    # ------------------------------------------------------------------
    # Accept
    # ------------------------------------------------------------------

    async def accept(self, token: str, principal: User | None) -> AcceptResult:
        """Turn a valid invite into a role for ``principal``, exactly once.

        Accepting again (or racing another accept) reports success with
        ``already_member=True``. A principal that already holds a role in the
        organization keeps it; the invite is still marked accepted.
        """
        if principal is None:
            raise AuthRequired()

        invite = await self._load_invite(token)
        if invite.cancelled_at is not None:
            raise InviteCancelled()
        if normalize_email(principal.email) != normalize_email(invite.email):
            raise EmailMismatch()

        user_id = principal.id
        result = AcceptResult(
            user_id=user_id,
            email=principal.email,
            organization_id=invite.organization_id,
            role_name=invite.role_name,
        )

        if invite.accepted_at is not None:
            existing = await self.role_repo.get_membership(user_id, invite.organization_id)
            if existing is None:
                raise InviteAlreadyAccepted()
            return replace(result, role_name=existing.role_name, already_member=True)
        if invite.is_expired():
            raise InviteExpired()

        existing = await self.role_repo.get_membership(user_id, invite.organization_id)
        if existing is not None:
            logger.info(
                "Principal already a member, marking invite accepted",
                invite_id=str(invite.id),
                user_id=str(user_id),
            )
            return await self._mark_accepted(
                invite.id, replace(result, role_name=existing.role_name, already_member=True)
            )

        return await self._assign_role_and_accept(invite.id, result)

    async def _assign_role_and_accept(self, invite_id: UUID, result: AcceptResult) -> AcceptResult:
        """Insert the role, then flip accepted_at in the same transaction.

        A duplicate role means another call got there first, which is
        reported as success.
        """
        try:
            await self.role_repo.create(
                user_id=result.user_id,
                organization_id=result.organization_id,
                role_name=result.role_name,
                suspended=False,
            )
        except IntegrityError:
            await self.session.rollback()
            logger.info(
                "Role already exists, invite treated as accepted",
                invite_id=str(invite_id),
                user_id=str(result.user_id),
            )
            return await self._mark_accepted(invite_id, replace(result, already_member=True))
        except Exception as e:
            await self.session.rollback()
            logger.error(
                "Failed to assign role",
                invite_id=str(invite_id),
                user_id=str(result.user_id),
                error=str(e),
            )
            raise RoleAssignFailed() from e

        return await self._mark_accepted(invite_id, result)

    async def _mark_accepted(self, invite_id: UUID, result: AcceptResult) -> AcceptResult:
        """Compare-and-swap accepted_at, then commit.

        Zero rows updated means the invite was accepted elsewhere (success) or
        cancelled in the meantime (``InviteCancelled``).
        """
        try:
            updated = await self.invite_repo.mark_accepted(invite_id)
            if updated == 0:
                await self.session.rollback()
                current = await self.invite_repo.refetch(invite_id)
                if current is not None and current.cancelled_at is not None:
                    raise InviteCancelled()
                logger.info("Invite accepted concurrently", invite_id=str(invite_id))
                return replace(result, already_member=True)

            await self.session.commit()
        except AppError:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to accept invite", invite_id=str(invite_id), error=str(e))
            raise

        logger.info(
            "Invite accepted",
            invite_id=str(invite_id),
            user_id=str(result.user_id),
            organization_id=str(result.organization_id),
        )
        return result

    async def create_account_from_invite(
        self,
        token: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> AcceptResult:
        """Provision (or activate) the invited principal, then accept the invite.

        A principal that exists but never signed in gets its password set. One
        that has signed in before must sign in and accept instead.
        """
        invite = await self._load_invite(token)
        self._ensure_open(invite)

        invite_id = invite.id
        email = invite.email
        organization_id = invite.organization_id
        role_name = invite.role_name

        user, created = await self._provision_principal(email, password, first_name, last_name)
        user_id = user.id

        existing = await self.role_repo.get_membership(user_id, organization_id)
        if existing is not None:
            return await self._mark_accepted(
                invite_id,
                AcceptResult(
                    user_id=user_id,
                    email=email,
                    organization_id=organization_id,
                    role_name=existing.role_name,
                    already_member=True,
                ),
            )

        try:
            return await self._assign_role_and_accept(
                invite_id,
                AcceptResult(
                    user_id=user_id,
                    email=email,
                    organization_id=organization_id,
                    role_name=role_name,
                ),
            )
        except RoleAssignFailed:
            if created:
                logger.warning(
                    "Removing principal after failed role assignment", user_id=str(user_id)
                )
                await self.identity_service.delete_principal(user_id)
            raise

    async def _provision_principal(
        self,
        email: str,
        password: str,
        first_name: str | None,
        last_name: str | None,
    ) -> tuple[User, bool]:
        """Return (principal, created_by_this_call)."""
        user = await self.user_repo.get_by_email(email)
        if user is not None:
            if user.has_signed_in:
                raise AccountAlreadyActive()
            try:
                user = await self.identity_service.set_password(
                    user, password, first_name, last_name
                )
            except Exception as e:
                logger.error("Failed to set password", user_id=str(user.id), error=str(e))
                raise ProvisioningFailed() from e
            return user, False

        try:
            user = await self.identity_service.create_principal(
                email, password, first_name, last_name
            )
        except IntegrityError as e:
            # Another request created this principal with its own password
            logger.warning("Principal created concurrently", error=str(e))
            raise ProvisioningFailed(
                "Account was created by another request; sign in and accept the invite"
            ) from e
        except Exception as e:
            logger.error("Failed to create principal", error=str(e))
            raise ProvisioningFailed() from e
        return user, True

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    async def _load_for_admin(self, invite_id: UUID, actor: ResolvedIdentity | None) -> Invite:
        if actor is None:
            raise Unauthorized()
        invite = await self.invite_repo.get_by_id(invite_id)
        if invite is None:
            raise InviteNotFound()
        await self.access_service.authorize(actor, invite.organization_id)
        return invite

    async def resend(self, invite_id: UUID, actor: ResolvedIdentity | None) -> ResendResult:
        """Re-send an open invite with a fresh token.

        The new token expires with the row; the row is never extended. Closed
        invites are skipped rather than failing.
        """
        invite = await self._load_for_admin(invite_id, actor)

        if invite.accepted_at is not None:
            return ResendResult(skipped=True, reason="accepted")
        if invite.cancelled_at is not None:
            return ResendResult(skipped=True, reason="cancelled")
        if invite.is_expired():
            return ResendResult(skipped=True, reason="expired")

        organization = await self.organization_repo.get_by_id(invite.organization_id)
        token = create_invite_token(invite.id, invite.expires_at)
        sent = await asyncio.to_thread(
            send_invite_email,
            to=invite.email,
            token=token,
            organization_name=organization.name if organization else "",
            role_name=invite.role_name,
            expires_at=invite.expires_at,
            reminder=True,
        )
        if not sent:
            logger.error("Invite reminder email failed", invite_id=str(invite_id))
            raise MailSendFailed(invite_id=str(invite_id))

        logger.info("Invite resent", invite_id=str(invite_id))
        return ResendResult()

    async def cancel(self, invite_id: UUID, actor: ResolvedIdentity | None) -> CancelResult:
        """Cancel an open invite. Accepted invites cannot be cancelled."""
        await self._load_for_admin(invite_id, actor)

        try:
            updated = await self.invite_repo.mark_cancelled(invite_id)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to cancel invite", invite_id=str(invite_id), error=str(e))
            raise

        if updated == 0:
            current = await self.invite_repo.refetch(invite_id)
            if current is None:
                raise InviteNotFound()
            if current.accepted_at is not None:
                raise InviteAlreadyAccepted("Invite was already accepted and cannot be cancelled")
            return CancelResult(already_cancelled=True)

        logger.info("Invite cancelled", invite_id=str(invite_id))
        return CancelResult()

    async def list_invites(
        self,
        organization_id: UUID | str,
        actor: ResolvedIdentity | None,
        summary: bool = False,
    ) -> list[Invite] | dict[UUID, int]:
        """List pending invites newest first, or counts by organization.

        ``organization_id`` may be the "all" wildcard (super-admins only).
        """
        if actor is None:
            raise Unauthorized()

        scope: UUID | None
        if organization_id == ALL_ORGANIZATIONS:
            if not actor.is_super_admin:
                raise PermissionDenied("Only a super admin can list invites for all organizations")
            scope = None
        else:
            scope = organization_id if isinstance(organization_id, UUID) else UUID(organization_id)
            await self.access_service.authorize(actor, scope)

        if summary:
            return await self.invite_repo.count_pending_by_organization(scope)
        return await self.invite_repo.list_pending(scope)
