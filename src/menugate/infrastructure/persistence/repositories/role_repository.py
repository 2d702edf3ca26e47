"""Role repository for database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from menugate.domain.entities import MenuRole
from menugate.infrastructure.persistence.models import RoleModel


class RoleRepository:
    """Repository for named role database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    @staticmethod
    def to_entity(model: RoleModel) -> MenuRole:
        return MenuRole(
            id=model.id,
            name=model.name,
            level=model.level,
            company_access=model.company_access,
            description=model.description,
        )

    async def create(self, role: MenuRole) -> MenuRole:
        """Store a new named role.

        Args:
            role: Validated role entity.

        Returns:
            The stored role with its ID.
        """
        model = RoleModel(
            name=role.name,
            level=role.level.value,
            company_access=role.company_access.value,
            description=role.description,
        )
        self.session.add(model)
        await self.session.flush()
        return self.to_entity(model)

    async def get_by_name(self, name: str) -> MenuRole | None:
        """Get a role by name.

        Args:
            name: Role name (e.g., 'audit').

        Returns:
            Role entity if found, None otherwise.
        """
        result = await self.session.execute(select(RoleModel).where(RoleModel.name == name))
        model = result.scalar_one_or_none()
        return self.to_entity(model) if model else None

    async def list_all(self) -> list[MenuRole]:
        """List all named roles ordered by name."""
        result = await self.session.execute(select(RoleModel).order_by(RoleModel.name))
        return [self.to_entity(model) for model in result.scalars().all()]
