"""Active organization selection.

``OrganizationSelector`` is a pure, per-request object. ``SelectionService``
owns the persisted choice on ``users.active_organization``.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.amuta.core.logging import get_logger
from src.amuta.models import ALL_ORGANIZATIONS
from src.amuta.models.base import utc_now
from src.amuta.services.identity_service import ResolvedIdentity

logger = get_logger(__name__)


@dataclass(frozen=True)
class OrganizationSelection:
    """The organization a principal acts within.

    ``is_all`` is the super-admin wildcard; ``organization_id`` is then None.
    """

    organization_id: UUID | None = None
    is_all: bool = False

    @classmethod
    def none(cls) -> "OrganizationSelection":
        return cls()

    @classmethod
    def all(cls) -> "OrganizationSelection":
        return cls(is_all=True)

    @classmethod
    def of(cls, organization_id: UUID) -> "OrganizationSelection":
        return cls(organization_id=organization_id)

    @classmethod
    def parse(cls, value: str | UUID | None) -> "OrganizationSelection | None":
        """Parse a stored or requested value. Returns None if malformed."""
        if value is None:
            return None
        if isinstance(value, UUID):
            return cls.of(value)
        value = value.strip()
        if value == ALL_ORGANIZATIONS:
            return cls.all()
        try:
            return cls.of(UUID(value))
        except ValueError:
            return None

    @property
    def is_selected(self) -> bool:
        return self.is_all or self.organization_id is not None

    def as_stored(self) -> str | None:
        if self.is_all:
            return ALL_ORGANIZATIONS
        if self.organization_id is not None:
            return str(self.organization_id)
        return None


class OrganizationSelector:
    """Picks the active organization among a principal's role assignments."""

    def __init__(self, identity: ResolvedIdentity, persisted: str | None = None):
        self.identity = identity
        self.persisted = persisted
        self.current = OrganizationSelection.none()

    def is_allowed(self, selection: OrganizationSelection) -> bool:
        if self.identity.is_super_admin:
            return selection.is_selected
        if selection.is_all or selection.organization_id is None:
            return False
        return selection.organization_id in self.identity.organization_ids

    def select(self, preferred: str | UUID | None = None) -> OrganizationSelection:
        """Derive the selection.

        Order: valid preferred id, then the persisted choice if still valid,
        then the default (wildcard for super-admins, first role otherwise).
        """
        for candidate in (preferred, self.persisted):
            selection = OrganizationSelection.parse(candidate)
            if selection is not None and self.is_allowed(selection):
                self.current = selection
                return selection

        if self.identity.is_super_admin:
            self.current = OrganizationSelection.all()
        elif self.identity.roles:
            self.current = OrganizationSelection.of(self.identity.roles[0].organization_id)
        else:
            self.current = OrganizationSelection.none()
        return self.current

    def set_active(self, value: str | UUID) -> OrganizationSelection:
        """Switch to ``value`` if allowed; otherwise keep the current selection."""
        selection = OrganizationSelection.parse(value)
        if selection is not None and self.is_allowed(selection):
            self.current = selection
        return self.current


class SelectionService:
    """Persists the active organization on the principal row."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def select(
        self,
        identity: ResolvedIdentity,
        preferred: str | UUID | None = None,
    ) -> OrganizationSelection:
        """Derive the selection for this request.

        A request-scoped ``preferred`` value is not persisted. Without one, a
        stale persisted choice is replaced by the re-derived default.
        """
        selector = OrganizationSelector(identity, identity.principal.active_organization)
        selection = selector.select(preferred)
        if preferred is None:
            await self._persist(identity, selection)
        return selection

    async def set_active(
        self, identity: ResolvedIdentity, value: str | UUID
    ) -> OrganizationSelection:
        selector = OrganizationSelector(identity, identity.principal.active_organization)
        selector.select()
        selection = selector.set_active(value)
        await self._persist(identity, selection)
        return selection

    async def _persist(self, identity: ResolvedIdentity, selection: OrganizationSelection) -> None:
        user = identity.principal
        stored = selection.as_stored()
        if user.active_organization == stored:
            return

        try:
            user.active_organization = stored
            user.updated_at = utc_now()
            self.session.add(user)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to persist organization selection", error=str(e))
            raise

        logger.info(
            "Active organization changed",
            user_id=str(user.id),
            organization=stored,
        )
