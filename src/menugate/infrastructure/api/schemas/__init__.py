"""API Schemas for request/response validation."""

from menugate.infrastructure.api.schemas.menu_schemas import (
    CapabilitiesSchema,
    CreateMenuRequest,
    DeleteMenuResponse,
    FullTreeResponse,
    MenuAccessResponse,
    MenuFlatItemResponse,
    MenuFlatResponse,
    MenuResponse,
    MenuSiblingsResponse,
    MenuTreeNodeResponse,
    MenuTreeResponse,
    TreeAnomaliesResponse,
    UpdateMenuRequest,
)
from menugate.infrastructure.api.schemas.permission_schemas import (
    AssignPermissionRequest,
    DelegatableItem,
    DelegatableResponse,
    PermissionEntry,
    PermissionListResponse,
    PermissionResponse,
    ReplaceUserPermissionsRequest,
    RevokePermissionRequest,
)
from menugate.infrastructure.api.schemas.role_schemas import (
    CreateRoleRequest,
    RoleListResponse,
    RoleResponse,
)

__all__ = [
    "AssignPermissionRequest",
    "CapabilitiesSchema",
    "CreateMenuRequest",
    "CreateRoleRequest",
    "DelegatableItem",
    "DelegatableResponse",
    "DeleteMenuResponse",
    "FullTreeResponse",
    "MenuAccessResponse",
    "MenuFlatItemResponse",
    "MenuFlatResponse",
    "MenuResponse",
    "MenuSiblingsResponse",
    "MenuTreeNodeResponse",
    "MenuTreeResponse",
    "PermissionEntry",
    "PermissionListResponse",
    "PermissionResponse",
    "ReplaceUserPermissionsRequest",
    "RevokePermissionRequest",
    "RoleListResponse",
    "RoleResponse",
    "TreeAnomaliesResponse",
    "UpdateMenuRequest",
]
