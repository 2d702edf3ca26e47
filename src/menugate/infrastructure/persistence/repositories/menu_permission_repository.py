"""Menu permission repository for database operations.

Covers both row shapes: role-level rows keyed by ``(menu_id, role)`` and
user-level rows keyed by ``(menu_id, user_id)``. Writes are upserts on
those keys.
"""

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from menugate.domain.entities import Capabilities, RoleLevel, RolePermission, UserPermission
from menugate.infrastructure.persistence.models import (
    MenuRolePermissionModel,
    MenuUserPermissionModel,
)


def _capabilities(model: MenuRolePermissionModel | MenuUserPermissionModel) -> Capabilities:
    return Capabilities(
        read=bool(model.can_read),
        create=bool(model.can_create),
        update=bool(model.can_update),
        delete=bool(model.can_delete),
    )


def _apply_capabilities(
    model: MenuRolePermissionModel | MenuUserPermissionModel, capabilities: Capabilities
) -> None:
    model.can_read = capabilities.read
    model.can_create = capabilities.create
    model.can_update = capabilities.update
    model.can_delete = capabilities.delete


class MenuPermissionRepository:
    """Repository for menu permission rows."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def list_role_permissions(
        self, menu_ids: Iterable[int] | None = None, role: RoleLevel | None = None
    ) -> list[RolePermission]:
        """List role-level rows.

        Args:
            menu_ids: Restrict to these menus. None lists rows for every menu.
            role: Restrict to one role level.

        Returns:
            Role permissions ordered by menu ID.
        """
        query = select(MenuRolePermissionModel)
        if menu_ids is not None:
            query = query.where(MenuRolePermissionModel.menu_id.in_(list(menu_ids)))
        if role is not None:
            query = query.where(MenuRolePermissionModel.role == role.value)
        query = query.order_by(MenuRolePermissionModel.menu_id, MenuRolePermissionModel.role)

        result = await self.session.execute(query)
        return [
            RolePermission(menu_id=row.menu_id, role=RoleLevel(row.role), capabilities=_capabilities(row))
            for row in result.scalars().all()
        ]

    async def list_user_permissions(
        self, user_id: str | None = None, menu_ids: Iterable[int] | None = None
    ) -> list[UserPermission]:
        """List user-level rows.

        Args:
            user_id: Restrict to one user.
            menu_ids: Restrict to these menus.

        Returns:
            User permissions ordered by menu ID.
        """
        query = select(MenuUserPermissionModel)
        if user_id is not None:
            query = query.where(MenuUserPermissionModel.user_id == user_id)
        if menu_ids is not None:
            query = query.where(MenuUserPermissionModel.menu_id.in_(list(menu_ids)))
        query = query.order_by(MenuUserPermissionModel.menu_id, MenuUserPermissionModel.user_id)

        result = await self.session.execute(query)
        return [
            UserPermission(menu_id=row.menu_id, user_id=row.user_id, capabilities=_capabilities(row))
            for row in result.scalars().all()
        ]

    async def upsert_role_permission(self, permission: RolePermission) -> MenuRolePermissionModel:
        """Insert or overwrite the row for ``(menu_id, role)``."""
        result = await self.session.execute(
            select(MenuRolePermissionModel).where(
                MenuRolePermissionModel.menu_id == permission.menu_id,
                MenuRolePermissionModel.role == permission.role.value,
            )
        )
        model = result.scalar_one_or_none()
        if model is None:
            model = MenuRolePermissionModel(menu_id=permission.menu_id, role=permission.role.value)
            self.session.add(model)
        _apply_capabilities(model, permission.capabilities)
        await self.session.flush()
        return model

    async def upsert_user_permission(self, permission: UserPermission) -> MenuUserPermissionModel:
        """Insert or overwrite the row for ``(menu_id, user_id)``."""
        result = await self.session.execute(
            select(MenuUserPermissionModel).where(
                MenuUserPermissionModel.menu_id == permission.menu_id,
                MenuUserPermissionModel.user_id == permission.user_id,
            )
        )
        model = result.scalar_one_or_none()
        if model is None:
            model = MenuUserPermissionModel(menu_id=permission.menu_id, user_id=permission.user_id)
            self.session.add(model)
        _apply_capabilities(model, permission.capabilities)
        await self.session.flush()
        return model

    async def delete_role_permission(self, menu_id: int, role: RoleLevel) -> bool:
        """Delete the row for ``(menu_id, role)``.

        Returns:
            True if a row was deleted.
        """
        result = await self.session.execute(
            delete(MenuRolePermissionModel).where(
                MenuRolePermissionModel.menu_id == menu_id,
                MenuRolePermissionModel.role == role.value,
            )
        )
        return result.rowcount > 0

    async def delete_user_permission(self, menu_id: int, user_id: str) -> bool:
        """Delete the row for ``(menu_id, user_id)``.

        Returns:
            True if a row was deleted.
        """
        result = await self.session.execute(
            delete(MenuUserPermissionModel).where(
                MenuUserPermissionModel.menu_id == menu_id,
                MenuUserPermissionModel.user_id == user_id,
            )
        )
        return result.rowcount > 0

    async def delete_user_permissions(self, user_id: str, menu_ids: Iterable[int]) -> int:
        """Delete a user's rows for the given menus.

        Returns:
            Number of rows deleted.
        """
        ids = list(menu_ids)
        if not ids:
            return 0
        result = await self.session.execute(
            delete(MenuUserPermissionModel).where(
                MenuUserPermissionModel.user_id == user_id,
                MenuUserPermissionModel.menu_id.in_(ids),
            )
        )
        return result.rowcount

    async def delete_for_menus(self, menu_ids: Iterable[int]) -> int:
        """Delete every role- and user-level row keyed to the given menus.

        Returns:
            Number of rows deleted across both tables.
        """
        ids = list(menu_ids)
        if not ids:
            return 0
        role_result = await self.session.execute(
            delete(MenuRolePermissionModel).where(MenuRolePermissionModel.menu_id.in_(ids))
        )
        user_result = await self.session.execute(
            delete(MenuUserPermissionModel).where(MenuUserPermissionModel.menu_id.in_(ids))
        )
        return role_result.rowcount + user_result.rowcount
