"""Repository layer - data access abstraction."""

from src.amuta.repositories.base import BaseRepository
from src.amuta.repositories.invite import InviteRepository
from src.amuta.repositories.organization import OrganizationRepository
from src.amuta.repositories.role import RoleRepository
from src.amuta.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "InviteRepository",
    "OrganizationRepository",
    "RoleRepository",
    "UserRepository",
]
