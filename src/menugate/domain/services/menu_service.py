"""Structural menu mutations.

Every public method is one unit of work: it commits once on success and
rolls back everything on failure, so a half-applied change is never
visible to later reads. Whether the actor may mutate structure at all is
decided by the caller; this service only checks company scope.
"""

from collections import defaultdict
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from menugate.core.logging import get_logger
from menugate.domain.entities import Identity, MenuNode
from menugate.domain.exceptions import (
    CycleDetectedError,
    NotFoundError,
    ScopeViolationError,
    ValidationError,
)
from menugate.domain.services.menu_access_cache import MenuAccessCache
from menugate.domain.services.tree_builder import build_tree
from menugate.infrastructure.persistence.models import MenuModel
from menugate.infrastructure.persistence.repositories import (
    MenuPermissionRepository,
    MenuRepository,
)

logger = get_logger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"name", "name_localized", "icon", "url", "order", "parent_id", "company_id", "is_open"}
)


class MenuService:
    """Create, update, reorder and delete menu nodes."""

    def __init__(self, session: AsyncSession, cache: MenuAccessCache | None = None) -> None:
        self.session = session
        self.cache = cache
        self.menu_repo = MenuRepository(session)
        self.permission_repo = MenuPermissionRepository(session)

    async def _commit(self) -> None:
        await self.session.commit()
        if self.cache is not None:
            self.cache.invalidate_all()

    async def _get_in_scope(self, actor: Identity, menu_id: int) -> MenuModel:
        menu = await self.menu_repo.get_by_id(menu_id)
        if menu is None:
            raise NotFoundError(f"Menu {menu_id} not found")
        if not actor.in_scope(menu.company_id):
            raise ScopeViolationError(f"Menu {menu_id} belongs to another company")
        return menu

    async def _check_parent(
        self, actor: Identity, parent_id: int | None, company_id: int | None
    ) -> None:
        """Validate that a node owned by ``company_id`` may sit under ``parent_id``."""
        if parent_id is None:
            return
        parent = await self.menu_repo.get_by_id(parent_id)
        if parent is None:
            raise NotFoundError(f"Parent menu {parent_id} not found")
        if not actor.in_scope(parent.company_id):
            raise ScopeViolationError(f"Parent menu {parent_id} belongs to another company")
        if parent.company_id is not None and parent.company_id != company_id:
            raise ScopeViolationError(
                f"Menu cannot be placed under menu {parent_id} of company {parent.company_id}"
            )

    async def create_menu(
        self,
        actor: Identity,
        name: str,
        parent_id: int | None = None,
        order: int | None = None,
        name_localized: str | None = None,
        icon: str | None = None,
        url: str | None = None,
        company_id: int | None = None,
        is_open: bool = False,
    ) -> MenuNode:
        """Create a menu node.

        ``order`` defaults to one past the highest sibling order.

        Raises:
            NotFoundError: If ``parent_id`` does not exist.
            ScopeViolationError: If the parent or company is outside the actor's scope.
            ValidationError: If a field is malformed.
        """
        if not actor.in_scope(company_id):
            raise ScopeViolationError(f"Cannot create menus for company {company_id}")
        if not name or not name.strip():
            raise ValidationError("Menu name is required")
        if order is not None and order < 0:
            raise ValidationError(f"Menu order must be >= 0, got {order}")

        try:
            await self._check_parent(actor, parent_id, company_id)
            if order is None:
                max_order = await self.menu_repo.max_sibling_order(parent_id)
                order = 0 if max_order is None else max_order + 1

            menu = MenuModel(
                name=name.strip(),
                name_localized=name_localized,
                icon=icon,
                url=url,
                order_num=order,
                parent_id=parent_id,
                company_id=company_id,
                is_open=is_open,
            )
            await self.menu_repo.create(menu)
            # Imported rows may already point at the ID just assigned
            if _parent_chain_reaches(await self.menu_repo.list_nodes(), parent_id, menu.id):
                logger.info(
                    "Menu create rejected: cycle",
                    menu_id=menu.id,
                    parent_id=parent_id,
                    actor_id=actor.user_id,
                )
                raise CycleDetectedError(
                    f"Menu {menu.id} would be its own ancestor through menu {parent_id}",
                    node_id=menu.id,
                    parent_id=parent_id,
                )
            await self._commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Menu created",
            menu_id=menu.id,
            parent_id=parent_id,
            order=order,
            created_by=actor.user_id,
        )
        return MenuRepository.to_entity(menu)

    async def update_menu(self, actor: Identity, menu_id: int, changes: dict[str, Any]) -> MenuNode:
        """Apply a partial update to a menu node.

        A parent change is checked for cycles against the tree as it is
        stored right now.

        Raises:
            NotFoundError: If the menu or new parent does not exist.
            CycleDetectedError: If the new parent is the node or one of its descendants.
            ScopeViolationError: If the change crosses a company boundary.
            ValidationError: If a field is unknown or malformed.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown menu fields: {', '.join(sorted(unknown))}")

        try:
            menu = await self._get_in_scope(actor, menu_id)
            current = MenuRepository.to_entity(menu)
            fields = {
                "id": current.id,
                "name": current.name,
                "order": current.order,
                "parent_id": current.parent_id,
                "name_localized": current.name_localized,
                "icon": current.icon,
                "url": current.url,
                "company_id": current.company_id,
                "is_open": current.is_open,
            }
            fields.update(changes)
            for required in ("name", "order", "is_open"):
                if fields[required] is None:
                    raise ValidationError(f"Menu {required} cannot be null")
            updated = MenuNode(**fields)

            if not actor.in_scope(updated.company_id):
                raise ScopeViolationError(f"Cannot move menu {menu_id} to company {updated.company_id}")

            if updated.parent_id != current.parent_id or updated.company_id != current.company_id:
                await self._check_parent(actor, updated.parent_id, updated.company_id)

            if updated.company_id != current.company_id and updated.company_id is not None:
                foreign_children = [
                    child.id
                    for child in await self.menu_repo.list_siblings(menu_id)
                    if child.company_id != updated.company_id
                ]
                if foreign_children:
                    raise ScopeViolationError(
                        f"Menu {menu_id} cannot move to company {updated.company_id}: "
                        f"children {foreign_children} belong elsewhere"
                    )

            if updated.parent_id != current.parent_id:
                tree = build_tree(await self.menu_repo.list_nodes())
                if tree.would_create_cycle(menu_id, updated.parent_id):
                    logger.info(
                        "Menu re-parent rejected: cycle",
                        menu_id=menu_id,
                        parent_id=updated.parent_id,
                        actor_id=actor.user_id,
                    )
                    raise CycleDetectedError(
                        f"Menu {updated.parent_id} is menu {menu_id} or one of its descendants",
                        node_id=menu_id,
                        parent_id=updated.parent_id,
                    )

            menu.name = updated.name.strip()
            menu.name_localized = updated.name_localized
            menu.icon = updated.icon
            menu.url = updated.url
            menu.order_num = updated.order
            menu.parent_id = updated.parent_id
            menu.company_id = updated.company_id
            menu.is_open = updated.is_open
            await self.session.flush()
            await self._commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Menu updated",
            menu_id=menu_id,
            fields=sorted(changes),
            updated_by=actor.user_id,
        )
        return MenuRepository.to_entity(menu)

    async def delete_menu(self, actor: Identity, menu_id: int) -> list[int]:
        """Delete a node, its whole subtree and every permission row keyed to them.

        Returns:
            IDs of all deleted menus, the requested node first.

        Raises:
            NotFoundError: If the menu does not exist.
            ScopeViolationError: If the menu belongs to another company.
        """
        try:
            await self._get_in_scope(actor, menu_id)
            nodes = await self.menu_repo.list_nodes()
            subtree_ids = _collect_subtree(nodes, menu_id)
            in_subtree = set(subtree_ids)
            foreign = [
                node.id
                for node in nodes
                if node.id in in_subtree and not actor.in_scope(node.company_id)
            ]
            if foreign:
                raise ScopeViolationError(
                    f"Subtree of menu {menu_id} contains menus of another company: {foreign}"
                )

            removed_permissions = await self.permission_repo.delete_for_menus(subtree_ids)
            await self.menu_repo.delete_many(subtree_ids)
            await self._commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Menu subtree deleted",
            menu_id=menu_id,
            deleted_menu_ids=subtree_ids,
            deleted_permission_rows=removed_permissions,
            deleted_by=actor.user_id,
        )
        return subtree_ids

    async def move_menu(self, actor: Identity, menu_id: int, upward: bool) -> list[MenuNode]:
        """Swap a node with its previous (``upward``) or next sibling.

        Sibling orders are renumbered 0..n-1 so they stay unique.

        Returns:
            The siblings in their new order.

        Raises:
            ValidationError: If the node is already first (or last).
        """
        try:
            menu = await self._get_in_scope(actor, menu_id)
            siblings = await self.menu_repo.list_siblings(menu.parent_id)
            index = next(i for i, sibling in enumerate(siblings) if sibling.id == menu_id)
            target = index - 1 if upward else index + 1
            if target < 0 or target >= len(siblings):
                raise ValidationError(
                    f"Menu {menu_id} cannot move further {'up' if upward else 'down'}"
                )

            siblings[index], siblings[target] = siblings[target], siblings[index]
            for position, sibling in enumerate(siblings):
                sibling.order_num = position
            await self.session.flush()
            await self._commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Menu moved",
            menu_id=menu_id,
            direction="up" if upward else "down",
            moved_by=actor.user_id,
        )
        return [MenuRepository.to_entity(sibling) for sibling in siblings]

    async def import_menus(self, records: list[MenuNode]) -> int:
        """Insert raw menu records verbatim, keeping their IDs.

        Dangling parents and cycles are stored as-is; the tree builder
        reports them when the menus are next read.

        Returns:
            Number of menus inserted.

        Raises:
            ValidationError: If an ID repeats or is already taken.
        """
        ids = [record.id for record in records]
        duplicates = sorted({menu_id for menu_id in ids if ids.count(menu_id) > 1})
        if duplicates:
            raise ValidationError(f"Duplicate menu IDs in import: {duplicates}")

        try:
            existing = {node.id for node in await self.menu_repo.list_nodes()}
            taken = sorted(existing.intersection(ids))
            if taken:
                raise ValidationError(f"Menu IDs already exist: {taken}")

            for record in records:
                await self.menu_repo.create(
                    MenuModel(
                        id=record.id,
                        name=record.name,
                        name_localized=record.name_localized,
                        icon=record.icon,
                        url=record.url,
                        order_num=record.order,
                        parent_id=record.parent_id,
                        company_id=record.company_id,
                        is_open=record.is_open,
                    )
                )
            await self._commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Menus imported", count=len(records))
        return len(records)


def _parent_chain_reaches(nodes: list[MenuNode], start_id: int | None, target_id: int) -> bool:
    """True if following stored parent links up from ``start_id`` hits ``target_id``.

    Stops at a root, a dangling parent or a loop that does not contain ``target_id``.
    """
    parents = {node.id: node.parent_id for node in nodes}
    seen: set[int] = set()
    current = start_id
    while current is not None and current not in seen:
        if current == target_id:
            return True
        seen.add(current)
        current = parents.get(current)
    return False


def _collect_subtree(nodes: list[MenuNode], root_id: int) -> list[int]:
    """IDs of ``root_id`` and everything below it, following raw parent links.

    Works on unbuilt records so nodes excluded from the tree (parent cycles)
    are still swept up with their ancestors.
    """
    children: dict[int | None, list[int]] = defaultdict(list)
    for node in sorted(nodes, key=lambda n: n.sort_key):
        children[node.parent_id].append(node.id)

    result: list[int] = []
    seen: set[int] = set()
    stack = [root_id]
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        result.append(current)
        stack.extend(reversed(children.get(current, [])))
    return result
