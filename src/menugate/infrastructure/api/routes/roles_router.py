"""Roles API routes.

Named roles map a role name carried by tokens onto a canonical level and a
company access scope.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from menugate.core.logging import get_logger
from menugate.domain.entities import MenuRole
from menugate.infrastructure.api.dependencies import CurrentIdentity, RootIdentity
from menugate.infrastructure.api.schemas import (
    CreateRoleRequest,
    RoleListResponse,
    RoleResponse,
)
from menugate.infrastructure.persistence.database import get_db_session
from menugate.infrastructure.persistence.repositories import RoleRepository

logger = get_logger(__name__)

router = APIRouter()


def _role_to_response(role: MenuRole) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        name=role.name,
        level=role.level.value,
        company_access=role.company_access.value,
        description=role.description,
    )


@router.get("", response_model=RoleListResponse)
async def list_roles(
    identity: CurrentIdentity,
    session: AsyncSession = Depends(get_db_session),
) -> RoleListResponse:
    """List all named roles."""
    roles = await RoleRepository(session).list_all()
    return RoleListResponse(items=[_role_to_response(r) for r in roles], total=len(roles))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=RoleResponse,
    responses={
        403: {"description": "Root access required"},
        409: {"description": "Role name already exists"},
    },
)
async def create_role(
    role_request: CreateRoleRequest,
    identity: RootIdentity,
    session: AsyncSession = Depends(get_db_session),
) -> RoleResponse:
    """Create a named role.

    Tokens carrying the new name resolve to its level and company access
    from the next request on.
    """
    role_repo = RoleRepository(session)

    existing_role = await role_repo.get_by_name(role_request.name)
    if existing_role:
        logger.info(
            "Role creation failed: name already exists",
            role_name=role_request.name,
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Role with name '{role_request.name}' already exists",
        )

    role = await role_repo.create(
        MenuRole(
            id=None,
            name=role_request.name,
            level=role_request.level,
            company_access=role_request.company_access,
            description=role_request.description,
        )
    )
    await session.commit()

    logger.info(
        "Role created successfully",
        role_id=role.id,
        role_name=role.name,
        level=role.level.value,
        created_by=identity.user_id,
    )
    return _role_to_response(role)
