"""Permission assignment with delegation checks.

An actor may only hand out capabilities it holds itself on the same node,
within its own company, and never to someone who outranks it. These rules
are enforced here, before anything is written.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from menugate.core.logging import get_logger
from menugate.domain.entities import (
    PERSISTABLE_ROLE_LEVELS,
    Capabilities,
    Identity,
    RoleLevel,
    RolePermission,
    UserPermission,
    parse_role_level,
)
from menugate.domain.exceptions import (
    DelegationDeniedError,
    NotFoundError,
    ScopeViolationError,
    ValidationError,
)
from menugate.domain.services.menu_access_cache import MenuAccessCache
from menugate.domain.services.menu_access_service import MenuAccessService
from menugate.domain.services.permission_resolver import PermissionResolver
from menugate.infrastructure.persistence.repositories import MenuPermissionRepository

logger = get_logger(__name__)


class PermissionService:
    """Assign, revoke and replace menu permission rows."""

    def __init__(self, session: AsyncSession, cache: MenuAccessCache | None = None) -> None:
        self.session = session
        self.cache = cache
        self.access = MenuAccessService(session)
        self.permission_repo = MenuPermissionRepository(session)

    async def _actor_resolver(self, actor: Identity) -> PermissionResolver:
        if not await self.access.identities.user_exists(actor.user_id):
            logger.warning("Permission change by unknown actor", actor_id=actor.user_id)
            raise DelegationDeniedError(f"Unknown user '{actor.user_id}' holds no permissions")
        return await self.access.load_resolver(actor)

    async def _target_user(self, actor: Identity, user_id: str) -> Identity:
        target = await self.access.identities.identity_of_user(user_id)
        if target is None:
            raise NotFoundError(f"User '{user_id}' not found")
        if not actor.in_scope(target.company_id):
            logger.info(
                "Cross-company permission change rejected",
                actor_id=actor.user_id,
                target_user_id=user_id,
                target_company_id=target.company_id,
            )
            raise ScopeViolationError(f"User '{user_id}' belongs to another company")
        if target.role.outranks(actor.role):
            raise DelegationDeniedError(
                f"Cannot change permissions of user '{user_id}' with higher role '{target.role.value}'"
            )
        return target

    def _target_role(self, actor: Identity, role: str | RoleLevel) -> RoleLevel:
        level = role if isinstance(role, RoleLevel) else parse_role_level(role)
        if level not in PERSISTABLE_ROLE_LEVELS:
            raise ValidationError(f"Permissions cannot be stored for role '{level.value}'")
        if level.outranks(actor.role):
            raise DelegationDeniedError(
                f"Cannot change permissions of higher role '{level.value}'"
            )
        return level

    async def _commit(self, user_id: str | None = None) -> None:
        await self.session.commit()
        if self.cache is None:
            return
        if user_id is None:
            self.cache.invalidate_all()
        else:
            self.cache.invalidate_user(user_id)

    async def assign_user_permission(
        self, actor: Identity, user_id: str, menu_id: int, capabilities: Capabilities
    ) -> UserPermission:
        """Upsert the user-level row for ``(menu_id, user_id)``.

        Raises:
            NotFoundError: If the user or menu does not exist.
            ScopeViolationError: If either lies outside the actor's company.
            DelegationDeniedError: If the actor lacks a capability it sets.
        """
        try:
            resolver = await self._actor_resolver(actor)
            await self._target_user(actor, user_id)
            await self.access.require_menu(actor, menu_id)
            resolver.ensure_can_grant(actor, menu_id, capabilities)

            permission = UserPermission(menu_id=menu_id, user_id=user_id, capabilities=capabilities)
            await self.permission_repo.upsert_user_permission(permission)
            await self._commit(user_id)
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "User menu permission assigned",
            menu_id=menu_id,
            user_id=user_id,
            granted=[c.value for c in capabilities.granted()],
            assigned_by=actor.user_id,
        )
        return permission

    async def assign_role_permission(
        self, actor: Identity, role: str | RoleLevel, menu_id: int, capabilities: Capabilities
    ) -> RolePermission:
        """Upsert the role-level row for ``(menu_id, role)``.

        Raises:
            ValidationError: If the role cannot carry rows.
            DelegationDeniedError: If the role outranks the actor or the actor lacks a capability.
        """
        try:
            resolver = await self._actor_resolver(actor)
            level = self._target_role(actor, role)
            await self.access.require_menu(actor, menu_id)
            resolver.ensure_can_grant(actor, menu_id, capabilities)

            permission = RolePermission(menu_id=menu_id, role=level, capabilities=capabilities)
            await self.permission_repo.upsert_role_permission(permission)
            await self._commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Role menu permission assigned",
            menu_id=menu_id,
            role=level.value,
            granted=[c.value for c in capabilities.granted()],
            assigned_by=actor.user_id,
        )
        return permission

    async def revoke_user_permission(self, actor: Identity, user_id: str, menu_id: int) -> None:
        """Delete the user-level row for ``(menu_id, user_id)``.

        Raises:
            NotFoundError: If the user, menu or row does not exist.
        """
        try:
            resolver = await self._actor_resolver(actor)
            await self._target_user(actor, user_id)
            await self.access.require_menu(actor, menu_id)
            resolver.ensure_can_revoke(actor, menu_id)
            if not await self.permission_repo.delete_user_permission(menu_id, user_id):
                raise NotFoundError(f"No permission for user '{user_id}' on menu {menu_id}")
            await self._commit(user_id)
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "User menu permission revoked",
            menu_id=menu_id,
            user_id=user_id,
            revoked_by=actor.user_id,
        )

    async def revoke_role_permission(
        self, actor: Identity, role: str | RoleLevel, menu_id: int
    ) -> None:
        """Delete the role-level row for ``(menu_id, role)``.

        Raises:
            NotFoundError: If the menu or row does not exist.
        """
        try:
            resolver = await self._actor_resolver(actor)
            level = self._target_role(actor, role)
            await self.access.require_menu(actor, menu_id)
            resolver.ensure_can_revoke(actor, menu_id)
            if not await self.permission_repo.delete_role_permission(menu_id, level):
                raise NotFoundError(f"No permission for role '{level.value}' on menu {menu_id}")
            await self._commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Role menu permission revoked",
            menu_id=menu_id,
            role=level.value,
            revoked_by=actor.user_id,
        )

    async def replace_user_permissions(
        self, actor: Identity, user_id: str, entries: list[tuple[int, Capabilities]]
    ) -> list[UserPermission]:
        """Replace all of a user's rows within the actor's scope.

        Rows on menus outside the actor's scope are left alone. If any entry
        is rejected, nothing is written.

        Raises:
            ValidationError: If a menu appears twice in ``entries``.
        """
        menu_ids = [menu_id for menu_id, _ in entries]
        duplicates = sorted({m for m in menu_ids if menu_ids.count(m) > 1})
        if duplicates:
            raise ValidationError(f"Duplicate menu IDs: {duplicates}")

        try:
            resolver = await self._actor_resolver(actor)
            await self._target_user(actor, user_id)
            for menu_id, capabilities in entries:
                await self.access.require_menu(actor, menu_id)
                resolver.ensure_can_grant(actor, menu_id, capabilities)

            scope_ids = [node.id for node in resolver.tree.nodes()]
            removed = await self.permission_repo.delete_user_permissions(user_id, scope_ids)
            permissions = [
                UserPermission(menu_id=menu_id, user_id=user_id, capabilities=capabilities)
                for menu_id, capabilities in entries
            ]
            for permission in permissions:
                await self.permission_repo.upsert_user_permission(permission)
            await self._commit(user_id)
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "User menu permissions replaced",
            user_id=user_id,
            removed=removed,
            written=len(permissions),
            replaced_by=actor.user_id,
        )
        return permissions

    async def list_user_permissions(self, actor: Identity, user_id: str) -> list[UserPermission]:
        """User-level rows of ``user_id`` on menus in the actor's scope."""
        target = await self.access.identities.identity_of_user(user_id)
        if target is None:
            raise NotFoundError(f"User '{user_id}' not found")
        if not actor.in_scope(target.company_id):
            raise ScopeViolationError(f"User '{user_id}' belongs to another company")
        tree = await self.access.load_tree(actor)
        return await self.permission_repo.list_user_permissions(
            user_id, [node.id for node in tree.nodes()]
        )

    async def list_role_permissions(self, actor: Identity, role: str) -> list[RolePermission]:
        """Role-level rows of ``role`` on menus in the actor's scope."""
        level = parse_role_level(role)
        if level not in PERSISTABLE_ROLE_LEVELS:
            raise ValidationError(f"Permissions are not stored for role '{level.value}'")
        tree = await self.access.load_tree(actor)
        return await self.permission_repo.list_role_permissions(
            [node.id for node in tree.nodes()], role=level
        )
