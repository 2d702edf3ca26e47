"""Map users and role names onto engine identities.

Role names arriving from tokens or user records are either canonical levels
or named roles stored in the roles table. Either way the engine only sees
the canonical level and a company access scope.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from menugate.core.logging import get_logger
from menugate.domain.entities import (
    CompanyAccess,
    Identity,
    RoleLevel,
    default_company_access,
)
from menugate.infrastructure.persistence.repositories import RoleRepository, UserRepository

logger = get_logger(__name__)


class IdentityService:
    """Resolves role names and user records to ``Identity`` values."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.role_repo = RoleRepository(session)
        self.user_repo = UserRepository(session)

    async def resolve_role(self, role_name: str) -> tuple[RoleLevel, CompanyAccess]:
        """Resolve a role name to its canonical level and company access.

        Unknown names resolve to level ``none``.
        """
        try:
            level = RoleLevel(role_name)
        except ValueError:
            named = await self.role_repo.get_by_name(role_name)
            if named is None:
                logger.warning("Unknown role name resolved to 'none'", role_name=role_name)
                return RoleLevel.NONE, CompanyAccess.NONE
            return named.level, named.company_access
        return level, default_company_access(level)

    async def identity_for(self, user_id: str, role_name: str, company_id: int | None) -> Identity:
        """Build the identity for an already-verified user."""
        level, company_access = await self.resolve_role(role_name)
        return Identity(
            user_id=user_id,
            role=level,
            company_id=company_id,
            company_access=company_access,
        )

    async def identity_of_user(self, user_id: str) -> Identity | None:
        """Build the identity of a stored user.

        Returns:
            The identity, or None if the user does not exist or is inactive.
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None or not user.is_active:
            return None
        return await self.identity_for(user.id, user.role, user.company_id)

    async def user_exists(self, user_id: str) -> bool:
        """Return True if ``user_id`` names an active user."""
        user = await self.user_repo.get_by_id(user_id)
        return user is not None and user.is_active
