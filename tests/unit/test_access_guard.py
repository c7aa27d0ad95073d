"""Unit tests for the access guard state machine and permission policy."""

from uuid import uuid4

import pytest
from hypothesis import given
from hypothesis import settings as hypothesis_settings
from hypothesis import strategies as st

from src.amuta.core.config import get_settings
from src.amuta.core.exceptions import (
    AuthRequired,
    NoRoleForOrganization,
    OrganizationInactive,
    OrganizationNotSelected,
    OrganizationUnavailable,
    RoleSuspended,
)
from src.amuta.core.permissions import ALL_PERMISSIONS, Permission
from src.amuta.models import Organization, Role, RoleName, SubscriptionStatus, User
from src.amuta.services import (
    AccessDecision,
    AccessState,
    OrganizationSelection,
    ResolvedIdentity,
    check_permission,
    evaluate,
    permissions_for,
    raise_for_decision,
)

pytestmark = pytest.mark.unit


def _organization(active: bool = True) -> Organization:
    status = SubscriptionStatus.ACTIVE if active else SubscriptionStatus.INACTIVE
    return Organization(id=uuid4(), name="Beit Midrash", subscription_status=status.value)


def _identity(*roles: Role) -> ResolvedIdentity:
    return ResolvedIdentity.from_rows(User(email="someone@example.com"), list(roles))


def _role(organization_id, role_name=RoleName.ORGANIZATION_ADMIN, suspended=False) -> Role:
    return Role(
        user_id=uuid4(),
        organization_id=organization_id,
        role_name=role_name.value,
        suspended=suspended,
    )


class TestEvaluate:
    """Each guard rule, in order."""

    def test_loading(self):
        decision = evaluate(None, OrganizationSelection.none(), {}, loading=True)

        assert decision.state is AccessState.LOADING
        assert not decision.allowed
        assert decision.recovery_action is None

    def test_no_session(self):
        decision = evaluate(None, OrganizationSelection.none(), {})

        assert decision.state is AccessState.NO_SESSION
        assert decision.recovery_action == "sign_out"

    def test_super_admin_bypasses_everything(self):
        """Super-admin passes even with an inactive org and a suspended role elsewhere."""
        org = _organization(active=False)
        identity = _identity(
            _role(uuid4(), RoleName.SUPER_ADMIN),
            _role(org.id, suspended=True),
        )

        decision = evaluate(identity, OrganizationSelection.of(org.id), {org.id: org})

        assert decision.state is AccessState.SUPER_ADMIN_OK
        assert decision.allowed

    def test_no_organization_selected(self):
        decision = evaluate(_identity(), OrganizationSelection.none(), {})

        assert decision.state is AccessState.NO_ORG_SELECTED
        assert decision.reason

    def test_organization_not_found(self):
        org_id = uuid4()
        identity = _identity(_role(org_id))

        decision = evaluate(identity, OrganizationSelection.of(org_id), {})

        assert decision.state is AccessState.ORG_NOT_FOUND

    def test_inactive_organization(self):
        org = _organization(active=False)
        identity = _identity(_role(org.id))

        decision = evaluate(identity, OrganizationSelection.of(org.id), {org.id: org})

        assert decision.state is AccessState.ORG_INACTIVE
        assert decision.recovery_action == "sign_out"

    def test_no_role_for_organization(self):
        org = _organization()

        decision = evaluate(_identity(), OrganizationSelection.of(org.id), {org.id: org})

        assert decision.state is AccessState.NO_ROLE_FOR_ORG

    def test_suspended_role(self):
        org = _organization()
        identity = _identity(_role(org.id, suspended=True))

        decision = evaluate(identity, OrganizationSelection.of(org.id), {org.id: org})

        assert decision.state is AccessState.ROLE_SUSPENDED

    def test_ok(self):
        org = _organization()
        identity = _identity(_role(org.id))

        decision = evaluate(identity, OrganizationSelection.of(org.id), {org.id: org})

        assert decision.state is AccessState.OK
        assert decision.allowed
        assert decision.reason is None

    def test_inactive_organization_checked_before_suspension(self):
        """Newly registered org: inactive org and suspended admin role report ORG_INACTIVE."""
        org = _organization(active=False)
        identity = _identity(_role(org.id, suspended=True))

        decision = evaluate(identity, OrganizationSelection.of(org.id), {org.id: org})

        assert decision.state is AccessState.ORG_INACTIVE

    @given(
        active=st.booleans(),
        suspended=st.booleans(),
        has_org=st.booleans(),
        selected=st.booleans(),
    )
    @hypothesis_settings(max_examples=50)
    def test_super_admin_always_allowed(self, active, suspended, has_org, selected):
        org = _organization(active=active)
        identity = _identity(
            _role(uuid4(), RoleName.SUPER_ADMIN),
            _role(org.id, suspended=suspended),
        )
        selection = OrganizationSelection.of(org.id) if selected else OrganizationSelection.none()
        organizations = {org.id: org} if has_org else {}

        assert evaluate(identity, selection, organizations).allowed


class TestAccessDecision:
    def test_to_dict(self):
        data = AccessDecision.of(AccessState.ROLE_SUSPENDED).to_dict()

        assert data["state"] == "ROLE_SUSPENDED"
        assert data["allowed"] is False
        assert data["recovery_action"] == "sign_out"

    @pytest.mark.parametrize(
        ("state", "error"),
        [
            (AccessState.NO_SESSION, AuthRequired),
            (AccessState.NO_ORG_SELECTED, OrganizationNotSelected),
            (AccessState.ORG_NOT_FOUND, OrganizationUnavailable),
            (AccessState.ORG_INACTIVE, OrganizationInactive),
            (AccessState.NO_ROLE_FOR_ORG, NoRoleForOrganization),
            (AccessState.ROLE_SUSPENDED, RoleSuspended),
        ],
    )
    def test_raise_for_decision(self, state, error):
        with pytest.raises(error) as exc_info:
            raise_for_decision(AccessDecision.of(state))

        assert exc_info.value.extra["state"] == state.value
        assert exc_info.value.extra["recovery_action"] == "sign_out"

    def test_raise_for_allowed_decision_is_noop(self):
        raise_for_decision(AccessDecision.of(AccessState.OK))


class TestCheckPermission:
    """Tests for the permission policy (deny or redirect)."""

    @pytest.fixture
    def redirect_policy(self, monkeypatch: pytest.MonkeyPatch):
        settings = get_settings().model_copy(update={"permission_denied_policy": "redirect"})
        monkeypatch.setattr("src.amuta.services.access_guard.get_settings", lambda: settings)
        return settings

    def test_member_denied_manage_users(self):
        """A member with an OK decision still lacks manage_users."""
        org = _organization()
        identity = _identity(_role(org.id, RoleName.MEMBER))
        selection = OrganizationSelection.of(org.id)
        decision = evaluate(identity, selection, {org.id: org})

        outcome = check_permission(
            decision, permissions_for(identity, selection), Permission.MANAGE_USERS
        )

        assert decision.allowed
        assert not outcome.allowed
        assert outcome.policy == "deny"
        assert "manage_users" in outcome.reason
        assert outcome.redirect_to is None

    def test_admin_allowed(self):
        org = _organization()
        identity = _identity(_role(org.id))
        selection = OrganizationSelection.of(org.id)
        decision = evaluate(identity, selection, {org.id: org})

        outcome = check_permission(
            decision, permissions_for(identity, selection), Permission.MANAGE_USERS
        )

        assert outcome.allowed

    def test_super_admin_allowed_with_empty_permissions(self):
        decision = AccessDecision.of(AccessState.SUPER_ADMIN_OK)

        assert check_permission(decision, frozenset(), Permission.MANAGE_ORGANIZATIONS).allowed

    def test_blocked_decision_denies_even_with_permission(self):
        decision = AccessDecision.of(AccessState.ROLE_SUSPENDED)

        outcome = check_permission(decision, ALL_PERMISSIONS, Permission.VIEW_HOME_PAGE)

        assert not outcome.allowed
        assert outcome.reason == decision.reason

    def test_redirect_policy(self, redirect_policy):
        decision = AccessDecision.of(AccessState.OK)

        outcome = check_permission(decision, frozenset(), Permission.MANAGE_USERS)

        assert not outcome.allowed
        assert outcome.policy == "redirect"
        assert outcome.redirect_to == redirect_policy.permission_redirect_path
