"""Effective permissions for a principal in the selected organization."""

from src.amuta.core.permissions import ALL_PERMISSIONS, Permission, permissions_for_role
from src.amuta.services.identity_service import ResolvedIdentity
from src.amuta.services.organization_selector import OrganizationSelection


def permissions_for(
    identity: ResolvedIdentity,
    selection: OrganizationSelection,
) -> frozenset[Permission]:
    """Union of permissions over non-suspended roles in the selected organization.

    Super-admins get every permission regardless of selection. A suspended
    role contributes nothing even though its row exists.
    """
    if identity.is_super_admin:
        return ALL_PERMISSIONS

    if selection.organization_id is None:
        return frozenset()

    granted: set[Permission] = set()
    for role in identity.roles:
        if role.organization_id != selection.organization_id or role.suspended:
            continue
        granted |= permissions_for_role(role.role_name)
    return frozenset(granted)


def has_permission(
    identity: ResolvedIdentity,
    selection: OrganizationSelection,
    permission: Permission,
) -> bool:
    return permission in permissions_for(identity, selection)
