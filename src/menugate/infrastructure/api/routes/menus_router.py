"""Menu API routes.

Read endpoints resolve the caller's visible menu. Structural endpoints are
restricted to root-level callers.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from menugate.core.logging import get_logger
from menugate.domain.entities import Capabilities, MenuNode
from menugate.domain.services import MenuAccessService, MenuService, flatten_with
from menugate.infrastructure.api.dependencies import (
    AdminIdentity,
    CurrentIdentity,
    RootIdentity,
    get_menu_cache,
)
from menugate.infrastructure.api.schemas import (
    CapabilitiesSchema,
    CreateMenuRequest,
    DeleteMenuResponse,
    FullTreeResponse,
    MenuAccessResponse,
    MenuFlatResponse,
    MenuResponse,
    MenuSiblingsResponse,
    MenuTreeResponse,
    TreeAnomaliesResponse,
    UpdateMenuRequest,
)
from menugate.infrastructure.persistence.database import get_db_session

logger = get_logger(__name__)

router = APIRouter()


def _capabilities_schema(capabilities: Capabilities) -> CapabilitiesSchema:
    return CapabilitiesSchema(
        read=capabilities.read,
        create=capabilities.create,
        update=capabilities.update,
        delete=capabilities.delete,
    )


def _menu_to_response(node: MenuNode) -> MenuResponse:
    return MenuResponse(
        id=node.id,
        name=node.name,
        name_localized=node.name_localized,
        icon=node.icon,
        url=node.url,
        order=node.order,
        parent_id=node.parent_id,
        company_id=node.company_id,
        is_open=node.is_open,
    )


@router.get("/tree", response_model=MenuTreeResponse)
async def get_menu_tree(
    identity: CurrentIdentity,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> MenuTreeResponse:
    """Get the caller's visible menu tree.

    Contains every readable node plus the folders needed to reach it, each
    with the caller's effective permissions.
    """
    resolved = await MenuAccessService(session, cache=get_menu_cache(request)).resolve(identity)
    items = resolved.tree.to_forest(
        lambda node: {"permissions": _capabilities_schema(resolved.permissions[node.id])}
    )
    return MenuTreeResponse(items=items, total=len(resolved.tree))


@router.get("/flat", response_model=MenuFlatResponse)
async def get_menu_flat(
    identity: CurrentIdentity,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> MenuFlatResponse:
    """Get the caller's visible menu as a pre-order list."""
    resolved = await MenuAccessService(session, cache=get_menu_cache(request)).resolve(identity)
    items = flatten_with(
        resolved.tree,
        lambda node: {"permissions": _capabilities_schema(resolved.permissions[node.id])},
    )
    return MenuFlatResponse(items=items, total=len(items))


@router.get(
    "/full-tree",
    response_model=FullTreeResponse,
    responses={403: {"description": "Administrator access required"}},
)
async def get_full_tree(
    identity: AdminIdentity,
    session: AsyncSession = Depends(get_db_session),
) -> FullTreeResponse:
    """Get every menu in the caller's scope, unpruned, with build anomalies."""
    tree = await MenuAccessService(session).load_tree(identity)
    report = tree.report
    return FullTreeResponse(
        items=tree.to_forest(),
        total=len(tree),
        anomalies=TreeAnomaliesResponse(
            orphan_ids=report.orphan_ids,
            cyclic_ids=report.cyclic_ids,
            detached_ids=report.detached_ids,
        ),
    )


@router.get(
    "/{menu_id}/access",
    response_model=MenuAccessResponse,
    responses={
        403: {"description": "Menu belongs to another company"},
        404: {"description": "Menu not found"},
    },
)
async def check_menu_access(
    menu_id: int,
    identity: CurrentIdentity,
    session: AsyncSession = Depends(get_db_session),
) -> MenuAccessResponse:
    """Check the caller's capabilities on a single menu."""
    capabilities, visible = await MenuAccessService(session).check_access(identity, menu_id)
    return MenuAccessResponse(
        menu_id=menu_id,
        visible=visible,
        permissions=_capabilities_schema(capabilities),
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=MenuResponse,
    responses={
        403: {"description": "Root access required"},
        404: {"description": "Parent menu not found"},
    },
)
async def create_menu(
    menu_request: CreateMenuRequest,
    identity: RootIdentity,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> MenuResponse:
    """Create a menu node."""
    service = MenuService(session, cache=get_menu_cache(request))
    node = await service.create_menu(identity, **menu_request.model_dump())
    return _menu_to_response(node)


@router.put(
    "/{menu_id}",
    response_model=MenuResponse,
    responses={
        403: {"description": "Root access required"},
        404: {"description": "Menu or parent not found"},
        409: {"description": "New parent would create a cycle"},
    },
)
async def update_menu(
    menu_id: int,
    menu_request: UpdateMenuRequest,
    identity: RootIdentity,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> MenuResponse:
    """Update a menu node. Only the fields present in the body change."""
    service = MenuService(session, cache=get_menu_cache(request))
    node = await service.update_menu(identity, menu_id, menu_request.model_dump(exclude_unset=True))
    return _menu_to_response(node)


@router.delete(
    "/{menu_id}",
    response_model=DeleteMenuResponse,
    responses={
        403: {"description": "Root access required"},
        404: {"description": "Menu not found"},
    },
)
async def delete_menu(
    menu_id: int,
    identity: RootIdentity,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> DeleteMenuResponse:
    """Delete a menu node together with its subtree and their permissions."""
    service = MenuService(session, cache=get_menu_cache(request))
    deleted_ids = await service.delete_menu(identity, menu_id)
    return DeleteMenuResponse(deleted_ids=deleted_ids, total=len(deleted_ids))


@router.post("/{menu_id}/move-up", response_model=MenuSiblingsResponse)
async def move_menu_up(
    menu_id: int,
    identity: RootIdentity,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> MenuSiblingsResponse:
    """Swap a menu with its previous sibling."""
    siblings = await MenuService(session, cache=get_menu_cache(request)).move_menu(
        identity, menu_id, upward=True
    )
    return MenuSiblingsResponse(items=[_menu_to_response(s) for s in siblings], total=len(siblings))


@router.post("/{menu_id}/move-down", response_model=MenuSiblingsResponse)
async def move_menu_down(
    menu_id: int,
    identity: RootIdentity,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> MenuSiblingsResponse:
    """Swap a menu with its next sibling."""
    siblings = await MenuService(session, cache=get_menu_cache(request)).move_menu(
        identity, menu_id, upward=False
    )
    return MenuSiblingsResponse(items=[_menu_to_response(s) for s in siblings], total=len(siblings))
