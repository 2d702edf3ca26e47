"""Read-side menu operations: visible tree, flat list, delegatable set, access checks.

Each call takes one snapshot of the menu and permission stores at its start
and resolves against that snapshot only.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from menugate.core.logging import get_logger
from menugate.domain.entities import Capabilities, Capability, Identity, MenuNode
from menugate.domain.exceptions import NotFoundError, ScopeViolationError
from menugate.domain.services.identity_service import IdentityService
from menugate.domain.services.menu_access_cache import MenuAccessCache
from menugate.domain.services.permission_resolver import (
    PermissionResolver,
    PermissionSnapshot,
    ResolvedMenu,
)
from menugate.domain.services.tree_builder import MenuTree, build_tree
from menugate.infrastructure.persistence.repositories import (
    MenuPermissionRepository,
    MenuRepository,
)

logger = get_logger(__name__)


class MenuAccessService:
    """Resolves what an identity may see and grant."""

    def __init__(self, session: AsyncSession, cache: MenuAccessCache | None = None) -> None:
        self.session = session
        self.cache = cache
        self.menu_repo = MenuRepository(session)
        self.permission_repo = MenuPermissionRepository(session)
        self.identities = IdentityService(session)

    async def load_tree(self, identity: Identity | None = None) -> MenuTree:
        """Build the tree of every menu in ``identity``'s scope (all menus if None)."""
        return build_tree(await self.menu_repo.list_nodes(identity))

    async def load_resolver(self, identity: Identity) -> PermissionResolver:
        """Snapshot the scoped tree and the rows that can apply to ``identity``."""
        tree = await self.load_tree(identity)
        menu_ids = [node.id for node in tree.nodes()]
        role_rows = await self.permission_repo.list_role_permissions(menu_ids, role=identity.role)
        user_rows = await self.permission_repo.list_user_permissions(identity.user_id, menu_ids)
        return PermissionResolver(tree, PermissionSnapshot.from_rows(role_rows, user_rows))

    async def resolve(self, identity: Identity) -> ResolvedMenu:
        """Visible tree, per-node permissions and delegatable set for ``identity``.

        An unknown or inactive user resolves to an empty result.
        """
        if self.cache is not None:
            cached = self.cache.get(identity)
            if cached is not None:
                return cached

        if not await self.identities.user_exists(identity.user_id):
            logger.warning("Resolving menus for unknown user", user_id=identity.user_id)
            resolved = ResolvedMenu.empty()
        else:
            resolver = await self.load_resolver(identity)
            resolved = resolver.resolve(identity)

        if self.cache is not None:
            self.cache.set(identity, resolved)
        return resolved

    async def delegatable(self, identity: Identity) -> list[tuple[int, Capability]]:
        return (await self.resolve(identity)).delegatable

    async def require_menu(self, identity: Identity, menu_id: int) -> MenuNode:
        """Load a menu and confirm it lies in ``identity``'s scope.

        Raises:
            NotFoundError: If the menu does not exist.
            ScopeViolationError: If the menu belongs to another company.
        """
        menu = await self.menu_repo.get_by_id(menu_id)
        if menu is None:
            raise NotFoundError(f"Menu {menu_id} not found")
        if not identity.in_scope(menu.company_id):
            logger.info(
                "Cross-company menu access rejected",
                user_id=identity.user_id,
                menu_id=menu_id,
                menu_company_id=menu.company_id,
            )
            raise ScopeViolationError(f"Menu {menu_id} belongs to another company")
        return MenuRepository.to_entity(menu)

    async def check_access(self, identity: Identity, menu_id: int) -> tuple[Capabilities, bool]:
        """Direct access check for one node.

        Returns:
            The node's effective capabilities and whether it is visible.

        Raises:
            NotFoundError: If the node does not exist or was excluded from the tree.
            ScopeViolationError: If the node belongs to another company.
        """
        await self.require_menu(identity, menu_id)
        resolver = await self.load_resolver(identity)
        if menu_id not in resolver.tree:
            raise NotFoundError(f"Menu {menu_id} is not part of the menu tree")

        if not await self.identities.user_exists(identity.user_id):
            logger.warning("Access check for unknown user", user_id=identity.user_id, menu_id=menu_id)
            return Capabilities.none(), False
        return resolver.check(identity, menu_id), resolver.is_visible(identity, menu_id)
