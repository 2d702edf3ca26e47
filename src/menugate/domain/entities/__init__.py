"""Domain entities for MenuGate.

Entities are plain dataclasses with no dependency on infrastructure or
frameworks. They validate themselves on construction.
"""

from menugate.domain.entities.identity import Identity
from menugate.domain.entities.menu_node import MenuNode
from menugate.domain.entities.permission import (
    Capabilities,
    Capability,
    RolePermission,
    UserPermission,
)
from menugate.domain.entities.role import (
    PERSISTABLE_ROLE_LEVELS,
    CompanyAccess,
    MenuRole,
    RoleLevel,
    default_company_access,
    parse_company_access,
    parse_role_level,
)

__all__ = [
    "PERSISTABLE_ROLE_LEVELS",
    "Capabilities",
    "Capability",
    "CompanyAccess",
    "Identity",
    "MenuNode",
    "MenuRole",
    "RoleLevel",
    "RolePermission",
    "UserPermission",
    "default_company_access",
    "parse_company_access",
    "parse_role_level",
]
