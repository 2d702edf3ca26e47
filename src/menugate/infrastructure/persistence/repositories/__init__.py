"""Persistence repositories for database operations."""

from menugate.infrastructure.persistence.repositories.menu_permission_repository import (
    MenuPermissionRepository,
)
from menugate.infrastructure.persistence.repositories.menu_repository import (
    MenuRepository,
)
from menugate.infrastructure.persistence.repositories.role_repository import (
    RoleRepository,
)
from menugate.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = [
    "MenuPermissionRepository",
    "MenuRepository",
    "RoleRepository",
    "UserRepository",
]
