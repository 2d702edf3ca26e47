"""SQLAlchemy models for MenuGate.

All models inherit from the Base class defined in database.py and are
created on application startup in development mode.
"""

from menugate.infrastructure.persistence.models.menu import MenuModel
from menugate.infrastructure.persistence.models.menu_permission import (
    MenuRolePermissionModel,
    MenuUserPermissionModel,
)
from menugate.infrastructure.persistence.models.role import RoleModel
from menugate.infrastructure.persistence.models.user import UserModel

__all__ = [
    "MenuModel",
    "MenuRolePermissionModel",
    "MenuUserPermissionModel",
    "RoleModel",
    "UserModel",
]
