"""Permissions API routes.

Provides endpoints for delegating menu permissions to users and roles.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from menugate.core.logging import get_logger
from menugate.domain.entities import Capabilities, RolePermission, UserPermission
from menugate.domain.services import MenuAccessService, PermissionService
from menugate.infrastructure.api.dependencies import CurrentIdentity, get_menu_cache
from menugate.infrastructure.api.schemas import (
    AssignPermissionRequest,
    CapabilitiesSchema,
    DelegatableItem,
    DelegatableResponse,
    PermissionListResponse,
    PermissionResponse,
    ReplaceUserPermissionsRequest,
    RevokePermissionRequest,
)
from menugate.infrastructure.persistence.database import get_db_session

logger = get_logger(__name__)

router = APIRouter()


def _to_capabilities(schema: CapabilitiesSchema) -> Capabilities:
    return Capabilities(
        read=schema.read,
        create=schema.create,
        update=schema.update,
        delete=schema.delete,
    )


def _permission_to_response(permission: RolePermission | UserPermission) -> PermissionResponse:
    """Convert a stored permission row to PermissionResponse."""
    caps = permission.capabilities
    return PermissionResponse(
        menu_id=permission.menu_id,
        user_id=getattr(permission, "user_id", None),
        role=permission.role.value if isinstance(permission, RolePermission) else None,
        capabilities=CapabilitiesSchema(
            read=caps.read, create=caps.create, update=caps.update, delete=caps.delete
        ),
    )


@router.get("/delegatable", response_model=DelegatableResponse)
async def get_delegatable(
    identity: CurrentIdentity,
    session: AsyncSession = Depends(get_db_session),
) -> DelegatableResponse:
    """List the ``(menu_id, capability)`` pairs the caller may grant to others."""
    pairs = await MenuAccessService(session).delegatable(identity)
    items = [DelegatableItem(menu_id=menu_id, capability=cap.value) for menu_id, cap in pairs]
    return DelegatableResponse(items=items, total=len(items))


@router.post(
    "/assign",
    response_model=PermissionResponse,
    responses={
        403: {"description": "Delegation denied or target in another company"},
        404: {"description": "Menu or user not found"},
        422: {"description": "Validation error"},
    },
)
async def assign_permission(
    assign_request: AssignPermissionRequest,
    identity: CurrentIdentity,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> PermissionResponse:
    """Create or replace the permission row for a user or a role on a menu.

    The caller must hold every capability it sets to true on that menu.
    """
    service = PermissionService(session, cache=get_menu_cache(request))
    capabilities = _to_capabilities(assign_request.capabilities)
    if assign_request.user_id is not None:
        permission = await service.assign_user_permission(
            identity, assign_request.user_id, assign_request.menu_id, capabilities
        )
    else:
        permission = await service.assign_role_permission(
            identity, assign_request.role, assign_request.menu_id, capabilities
        )
    return _permission_to_response(permission)


@router.post(
    "/revoke",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        403: {"description": "Delegation denied or target in another company"},
        404: {"description": "Permission row not found"},
    },
)
async def revoke_permission(
    revoke_request: RevokePermissionRequest,
    identity: CurrentIdentity,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> None:
    """Delete the permission row for a user or a role on a menu."""
    service = PermissionService(session, cache=get_menu_cache(request))
    if revoke_request.user_id is not None:
        await service.revoke_user_permission(
            identity, revoke_request.user_id, revoke_request.menu_id
        )
    else:
        await service.revoke_role_permission(
            identity, revoke_request.role, revoke_request.menu_id
        )


@router.get("/users/{user_id}", response_model=PermissionListResponse)
async def list_user_permissions(
    user_id: str,
    identity: CurrentIdentity,
    session: AsyncSession = Depends(get_db_session),
) -> PermissionListResponse:
    """List a user's permission rows on menus in the caller's scope."""
    permissions = await PermissionService(session).list_user_permissions(identity, user_id)
    items = [_permission_to_response(p) for p in permissions]
    return PermissionListResponse(items=items, total=len(items))


@router.put(
    "/users/{user_id}",
    response_model=PermissionListResponse,
    responses={
        403: {"description": "Delegation denied or target in another company"},
        404: {"description": "Menu or user not found"},
        422: {"description": "Duplicate menu IDs"},
    },
)
async def replace_user_permissions(
    user_id: str,
    replace_request: ReplaceUserPermissionsRequest,
    identity: CurrentIdentity,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> PermissionListResponse:
    """Replace all of a user's rows in the caller's scope in one transaction."""
    service = PermissionService(session, cache=get_menu_cache(request))
    entries = [(item.menu_id, _to_capabilities(item.capabilities)) for item in replace_request.items]
    permissions = await service.replace_user_permissions(identity, user_id, entries)
    items = [_permission_to_response(p) for p in permissions]
    return PermissionListResponse(items=items, total=len(items))


@router.get("/roles/{role}", response_model=PermissionListResponse)
async def list_role_permissions(
    role: str,
    identity: CurrentIdentity,
    session: AsyncSession = Depends(get_db_session),
) -> PermissionListResponse:
    permissions = await PermissionService(session).list_role_permissions(identity, role)
    items = [_permission_to_response(p) for p in permissions]
    return PermissionListResponse(items=items, total=len(items))
