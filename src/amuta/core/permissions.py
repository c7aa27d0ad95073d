"""Role to permission table.

The table is keyed by the closed ``RoleName`` enum and checked for
exhaustiveness at import time, so adding a role without permissions fails at
startup instead of silently granting nothing.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Final

from src.amuta.models.enums import RoleName


class Permission(str, Enum):
    """Atomic capability identifiers gating protected actions."""

    MANAGE_HOME_PAGE = "manage_home_page"
    VIEW_HOME_PAGE = "view_home_page"
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_DONORS = "view_donors"
    VIEW_DONATIONS = "view_donations"
    VIEW_PLEDGES = "view_pledges"
    VIEW_PAYMENTS = "view_payments"
    VIEW_CAMPAIGNS = "view_campaigns"
    MANAGE_USERS = "manage_users"
    MANAGE_ORGANIZATIONS = "manage_organizations"
    VIEW_YAHRZEITS = "view_yahrzeits"
    VIEW_TORAH_SCHOLAR = "view_torah_scholar"
    VIEW_COMCOM = "view_comcom"
    VIEW_SETTINGS = "view_settings"


_STAFF_PERMISSIONS: Final[frozenset[Permission]] = frozenset(
    {
        Permission.MANAGE_HOME_PAGE,
        Permission.VIEW_DASHBOARD,
        Permission.VIEW_DONORS,
        Permission.VIEW_DONATIONS,
        Permission.VIEW_PLEDGES,
        Permission.VIEW_PAYMENTS,
        Permission.VIEW_CAMPAIGNS,
        Permission.MANAGE_USERS,
        Permission.VIEW_YAHRZEITS,
        Permission.VIEW_TORAH_SCHOLAR,
        Permission.VIEW_COMCOM,
        Permission.VIEW_SETTINGS,
    }
)

ROLE_PERMISSIONS: Final[Mapping[RoleName, frozenset[Permission]]] = {
    RoleName.SUPER_ADMIN: _STAFF_PERMISSIONS | {Permission.MANAGE_ORGANIZATIONS},
    RoleName.ORGANIZATION_ADMIN: _STAFF_PERMISSIONS,
    RoleName.MANAGER: _STAFF_PERMISSIONS,
    RoleName.ACCOUNTANT: frozenset(
        {
            Permission.VIEW_HOME_PAGE,
            Permission.VIEW_DONORS,
            Permission.VIEW_DONATIONS,
            Permission.VIEW_PLEDGES,
            Permission.VIEW_PAYMENTS,
            Permission.VIEW_CAMPAIGNS,
            Permission.VIEW_YAHRZEITS,
            Permission.VIEW_TORAH_SCHOLAR,
            Permission.VIEW_SETTINGS,
        }
    ),
    RoleName.MEMBER: frozenset({Permission.VIEW_HOME_PAGE}),
    RoleName.DONOR: frozenset({Permission.VIEW_HOME_PAGE, Permission.VIEW_CAMPAIGNS}),
}

ALL_PERMISSIONS: Final[frozenset[Permission]] = frozenset(Permission)


def validate_role_permissions(table: Mapping[RoleName, Iterable[Permission]]) -> None:
    """Raise if any role is missing from the table or maps to a foreign value."""
    missing = set(RoleName) - set(table)
    if missing:
        names = ", ".join(sorted(role.value for role in missing))
        raise RuntimeError(f"ROLE_PERMISSIONS is missing roles: {names}")

    for role, permissions in table.items():
        for permission in permissions:
            if not isinstance(permission, Permission):
                raise RuntimeError(f"Role {role.value} maps to unknown permission {permission!r}")


def parse_role_name(value: str) -> RoleName:
    """Parse a stored role name, failing loudly on unknown values."""
    try:
        return RoleName(value)
    except ValueError as e:
        raise ValueError(f"Unknown role name: {value!r}") from e


def permissions_for_role(role: RoleName | str) -> frozenset[Permission]:
    if not isinstance(role, RoleName):
        role = parse_role_name(role)
    return ROLE_PERMISSIONS[role]


validate_role_permissions(ROLE_PERMISSIONS)
