"""User repository for database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from menugate.infrastructure.persistence.models import UserModel


class UserRepository:
    """Repository for user directory lookups."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        """Add a new user.

        Args:
            user: User model to add.

        Returns:
            The added user.
        """
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: str) -> UserModel | None:
        """Get a user by ID.

        Args:
            user_id: User ID.

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(select(UserModel).where(UserModel.id == user_id))
        return result.scalar_one_or_none()

    async def list_by_company(self, company_id: int | None = None) -> list[UserModel]:
        """List users, optionally restricted to one company.

        Args:
            company_id: Company ID, or None for every user.

        Returns:
            Users ordered by username.
        """
        query = select(UserModel)
        if company_id is not None:
            query = query.where(UserModel.company_id == company_id)
        result = await self.session.execute(query.order_by(UserModel.username))
        return list(result.scalars().all())
