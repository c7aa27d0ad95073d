"""Integration tests for registration, direct member adds, login and selection."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.amuta.core.exceptions import (
    AlreadyMember,
    InvalidCredentials,
    OrganizationNotFound,
    PermissionDenied,
    ProvisioningFailed,
    RoleAssignFailed,
    Unauthorized,
)
from src.amuta.core.security import decode_token, verify_password
from src.amuta.models import ALL_ORGANIZATIONS, Organization, RoleName, SubscriptionStatus
from src.amuta.repositories import UserRepository
from src.amuta.services import AuthService, SelectionService
from tests.factories import DEFAULT_TEST_PASSWORD, UserFactory, generate_uuid
from tests.helpers import (
    add_role,
    build_membership_service,
    build_registration_service,
    create_user,
    fetch_roles,
    fetch_user_by_email,
    load_identity,
)

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


class TestRegistration:
    """Tests for RegistrationService.register."""

    async def test_creates_inactive_organization_and_suspended_admin(
        self, service_session, engine
    ):
        service = build_registration_service(service_session)

        result = await service.register("Chesed Fund", "founder@x.org", "secret1", "Sara")

        assert result.user_created is True
        organization = await service_session.get(Organization, result.organization_id)
        assert organization.subscription_status == SubscriptionStatus.INACTIVE.value
        assert organization.created_by_user_id == result.user_id
        roles = await fetch_roles(engine, result.user_id)
        assert [(r.role_name, r.suspended) for r in roles] == [("organization_admin", True)]
        user = await fetch_user_by_email(engine, "founder@x.org")
        assert verify_password("secret1", user.hashed_password)

    async def test_reuses_existing_principal(self, service_session, db_session, engine):
        existing = await create_user(db_session, email="founder@x.org")
        service = build_registration_service(service_session)

        result = await service.register("Second Fund", "Founder@X.org", "other-password")

        assert result.user_created is False
        assert result.user_id == existing.id
        user = await fetch_user_by_email(engine, "founder@x.org")
        assert verify_password(DEFAULT_TEST_PASSWORD, user.hashed_password)

    async def test_failure_removes_new_principal(self, service_session, engine, monkeypatch):
        service = build_registration_service(service_session)

        async def failing_create(**kwargs):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(service.role_repo, "create", failing_create)

        with pytest.raises(ProvisioningFailed):
            await service.register("Broken Fund", "founder@x.org", "secret1")

        assert await fetch_user_by_email(engine, "founder@x.org") is None


class TestAddMember:
    """Tests for MembershipService.add_member."""

    async def test_admin_adds_new_principal(self, service_session, engine, org1, admin_identity):
        service = build_membership_service(service_session)

        role = await service.add_member(org1.id, "new@x.org", RoleName.DONOR, admin_identity)

        assert role.role_name == "donor"
        assert role.suspended is False
        user = await fetch_user_by_email(engine, "new@x.org")
        assert user.hashed_password is None
        assert [r.organization_id for r in await fetch_roles(engine, user.id)] == [org1.id]

    async def test_existing_member_conflicts(
        self, service_session, org1, admin_identity, member
    ):
        service = build_membership_service(service_session)

        with pytest.raises(AlreadyMember):
            await service.add_member(org1.id, member.email, RoleName.MANAGER, admin_identity)

    async def test_member_cannot_add(self, service_session, org1, member_identity):
        service = build_membership_service(service_session)

        with pytest.raises(PermissionDenied):
            await service.add_member(org1.id, "new@x.org", RoleName.MEMBER, member_identity)

    async def test_requires_actor(self, service_session, org1):
        service = build_membership_service(service_session)

        with pytest.raises(Unauthorized):
            await service.add_member(org1.id, "new@x.org", RoleName.MEMBER, None)

    async def test_only_super_admin_grants_super_admin(
        self, service_session, org1, admin_identity
    ):
        service = build_membership_service(service_session)

        with pytest.raises(PermissionDenied):
            await service.add_member(org1.id, "new@x.org", "super_admin", admin_identity)

    async def test_unknown_organization(self, service_session, super_identity):
        service = build_membership_service(service_session)

        with pytest.raises(OrganizationNotFound):
            await service.add_member(generate_uuid(), "new@x.org", "member", super_identity)

    async def test_failure_removes_new_principal(
        self, service_session, engine, org1, admin_identity, monkeypatch
    ):
        service = build_membership_service(service_session)

        async def failing_create(**kwargs):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(service.role_repo, "create", failing_create)

        with pytest.raises(RoleAssignFailed):
            await service.add_member(org1.id, "new@x.org", RoleName.MEMBER, admin_identity)

        assert await fetch_user_by_email(engine, "new@x.org") is None


class TestLogin:
    async def test_login_returns_token_and_records_sign_in(
        self, service_session, db_session, engine
    ):
        user = await create_user(db_session, email="tom@x.org")
        service = AuthService(UserRepository(service_session), service_session)

        token = await service.login("Tom@x.org", DEFAULT_TEST_PASSWORD)

        assert decode_token(token)["sub"] == str(user.id)
        stored = await fetch_user_by_email(engine, "tom@x.org")
        assert stored.has_signed_in

    @pytest.mark.parametrize(
        ("email", "password"),
        [("tom@x.org", "wrong-password"), ("nobody@x.org", DEFAULT_TEST_PASSWORD)],
    )
    async def test_invalid_credentials(self, service_session, db_session, email, password):
        await create_user(db_session, email="tom@x.org")
        service = AuthService(UserRepository(service_session), service_session)

        with pytest.raises(InvalidCredentials):
            await service.login(email, password)

    async def test_principal_without_password_cannot_sign_in(self, service_session, db_session):
        db_session.add(UserFactory.without_password(email="tom@x.org"))
        await db_session.commit()
        service = AuthService(UserRepository(service_session), service_session)

        with pytest.raises(InvalidCredentials):
            await service.login("tom@x.org", DEFAULT_TEST_PASSWORD)

    async def test_inactive_principal_cannot_sign_in(self, service_session, db_session):
        db_session.add(UserFactory.inactive(email="tom@x.org"))
        await db_session.commit()
        service = AuthService(UserRepository(service_session), service_session)

        with pytest.raises(InvalidCredentials):
            await service.login("tom@x.org", DEFAULT_TEST_PASSWORD)


class TestSelectionService:
    """Persisted organization selection (runs in one session with the principal)."""

    async def test_default_selection_is_persisted(
        self, db_session: AsyncSession, engine, org1, admin
    ):
        identity = await load_identity(db_session, admin)

        selection = await SelectionService(db_session).select(identity)

        assert selection.organization_id == org1.id
        stored = await fetch_user_by_email(engine, admin.email)
        assert stored.active_organization == str(org1.id)

    async def test_request_scoped_preference_is_not_persisted(
        self, db_session: AsyncSession, engine, org1, org2, admin
    ):
        await add_role(db_session, admin, org2, RoleName.MANAGER)
        identity = await load_identity(db_session, admin)
        service = SelectionService(db_session)
        await service.select(identity)

        selection = await service.select(identity, str(org2.id))

        assert selection.organization_id == org2.id
        stored = await fetch_user_by_email(engine, admin.email)
        assert stored.active_organization == str(org1.id)

    async def test_set_active_persists_allowed_choice(
        self, db_session: AsyncSession, engine, org1, org2, admin
    ):
        await add_role(db_session, admin, org2, RoleName.MANAGER)
        identity = await load_identity(db_session, admin)

        selection = await SelectionService(db_session).set_active(identity, str(org2.id))

        assert selection.organization_id == org2.id
        stored = await fetch_user_by_email(engine, admin.email)
        assert stored.active_organization == str(org2.id)

    async def test_set_active_ignores_foreign_organization(
        self, db_session: AsyncSession, org1, org2, admin
    ):
        identity = await load_identity(db_session, admin)

        selection = await SelectionService(db_session).set_active(identity, str(org2.id))

        assert selection.organization_id == org1.id

    async def test_stale_persisted_choice_is_replaced(
        self, db_session: AsyncSession, engine, org1, admin
    ):
        admin.active_organization = str(generate_uuid())
        db_session.add(admin)
        await db_session.commit()
        identity = await load_identity(db_session, admin)

        selection = await SelectionService(db_session).select(identity)

        assert selection.organization_id == org1.id
        stored = await fetch_user_by_email(engine, admin.email)
        assert stored.active_organization == str(org1.id)

    async def test_super_admin_defaults_to_wildcard(
        self, db_session: AsyncSession, engine, super_admin
    ):
        identity = await load_identity(db_session, super_admin)

        selection = await SelectionService(db_session).select(identity)

        assert selection.is_all
        stored = await fetch_user_by_email(engine, super_admin.email)
        assert stored.active_organization == ALL_ORGANIZATIONS
