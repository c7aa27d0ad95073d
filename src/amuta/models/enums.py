"""Shared enums for models."""

from enum import Enum


class SubscriptionStatus(str, Enum):
    """Organization subscription status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class RoleName(str, Enum):
    """Role a principal holds within one organization."""

    SUPER_ADMIN = "super_admin"
    ORGANIZATION_ADMIN = "organization_admin"
    MANAGER = "manager"
    ACCOUNTANT = "accountant"
    MEMBER = "member"
    DONOR = "donor"


class InviteStatus(str, Enum):
    """Derived invite status (not stored; computed from the row timestamps)."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


ALL_ORGANIZATIONS = "all"
