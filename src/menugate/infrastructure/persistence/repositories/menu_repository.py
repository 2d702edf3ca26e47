"""Menu repository for database operations."""

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from menugate.domain.entities import CompanyAccess, Identity, MenuNode
from menugate.infrastructure.persistence.models import MenuModel


class MenuRepository:
    """Repository for menu database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    @staticmethod
    def to_entity(model: MenuModel) -> MenuNode:
        """Convert a menu row to a domain node."""
        return MenuNode(
            id=model.id,
            name=model.name,
            order=model.order_num,
            parent_id=model.parent_id,
            name_localized=model.name_localized,
            icon=model.icon,
            url=model.url,
            company_id=model.company_id,
            is_open=model.is_open,
        )

    async def create(self, menu: MenuModel) -> MenuModel:
        """Add a new menu and flush to obtain its ID.

        Args:
            menu: Menu model to add.

        Returns:
            The added menu.
        """
        self.session.add(menu)
        await self.session.flush()
        return menu

    async def get_by_id(self, menu_id: int) -> MenuModel | None:
        """Get a menu by ID.

        Args:
            menu_id: Menu ID.

        Returns:
            Menu model if found, None otherwise.
        """
        result = await self.session.execute(select(MenuModel).where(MenuModel.id == menu_id))
        return result.scalar_one_or_none()

    async def list_nodes(self, identity: Identity | None = None) -> list[MenuNode]:
        """List menus visible to a scope as domain nodes.

        Args:
            identity: Identity whose company scope filters the rows.
                None lists every menu of the installation.

        Returns:
            Flat list of nodes ordered by parent, order and ID.
        """
        query = select(MenuModel)
        if identity is not None and identity.company_access is not CompanyAccess.ALL:
            agnostic = MenuModel.company_id.is_(None)
            if identity.company_access is CompanyAccess.OWN and identity.company_id is not None:
                query = query.where(or_(agnostic, MenuModel.company_id == identity.company_id))
            else:
                query = query.where(agnostic)
        query = query.order_by(MenuModel.parent_id, MenuModel.order_num, MenuModel.id)

        result = await self.session.execute(query)
        return [self.to_entity(model) for model in result.scalars().all()]

    async def max_sibling_order(self, parent_id: int | None) -> int | None:
        """Get the highest ``order_num`` among the children of ``parent_id``.

        Returns:
            The maximum order, or None if the parent has no children.
        """
        parent_clause = (
            MenuModel.parent_id.is_(None) if parent_id is None else MenuModel.parent_id == parent_id
        )
        result = await self.session.execute(select(func.max(MenuModel.order_num)).where(parent_clause))
        return result.scalar_one_or_none()

    async def list_siblings(self, parent_id: int | None) -> list[MenuModel]:
        """List the children of ``parent_id`` ordered by ``(order_num, id)``."""
        parent_clause = (
            MenuModel.parent_id.is_(None) if parent_id is None else MenuModel.parent_id == parent_id
        )
        result = await self.session.execute(
            select(MenuModel).where(parent_clause).order_by(MenuModel.order_num, MenuModel.id)
        )
        return list(result.scalars().all())

    async def delete_many(self, menu_ids: list[int]) -> int:
        """Delete menus by ID.

        Returns:
            Number of rows deleted.
        """
        if not menu_ids:
            return 0
        result = await self.session.execute(delete(MenuModel).where(MenuModel.id.in_(menu_ids)))
        return result.rowcount

    async def count(self) -> int:
        """Count all menus of the installation."""
        result = await self.session.execute(select(func.count(MenuModel.id)))
        return result.scalar_one()
