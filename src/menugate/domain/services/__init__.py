"""Domain services for MenuGate.

The tree builder, flattener and permission resolver are pure. The
``*Service`` classes wrap them with persistence and transactions.
"""

from menugate.domain.services.identity_service import IdentityService
from menugate.domain.services.menu_access_cache import MenuAccessCache
from menugate.domain.services.menu_access_service import MenuAccessService
from menugate.domain.services.menu_service import MenuService
from menugate.domain.services.permission_resolver import (
    PermissionResolver,
    PermissionSnapshot,
    ResolvedMenu,
)
from menugate.domain.services.permission_service import PermissionService
from menugate.domain.services.tree_builder import BuildReport, MenuTree, build_tree
from menugate.domain.services.tree_flattener import flatten, flatten_with

__all__ = [
    "BuildReport",
    "IdentityService",
    "MenuAccessCache",
    "MenuAccessService",
    "MenuService",
    "MenuTree",
    "PermissionResolver",
    "PermissionService",
    "PermissionSnapshot",
    "ResolvedMenu",
    "build_tree",
    "flatten",
    "flatten_with",
]
