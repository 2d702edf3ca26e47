"""Identity entity: who the engine is resolving for."""

from dataclasses import dataclass

from menugate.domain.entities.role import (
    CompanyAccess,
    RoleLevel,
    default_company_access,
    parse_company_access,
    parse_role_level,
)
from menugate.domain.exceptions import ValidationError


@dataclass(frozen=True)
class Identity:
    """An already-verified user, reduced to what resolution needs.

    Attributes:
        user_id: User identifier.
        role: Canonical role level.
        company_id: Company the user belongs to (None for installation-wide users).
        company_access: Which company-scoped nodes the user may resolve.
    """

    user_id: str
    role: RoleLevel
    company_id: int | None = None
    company_access: CompanyAccess | None = None

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValidationError("User ID is required")
        # frozen dataclass: normalise through object.__setattr__
        if not isinstance(self.role, RoleLevel):
            object.__setattr__(self, "role", parse_role_level(self.role))
        if self.company_access is None:
            object.__setattr__(self, "company_access", default_company_access(self.role))
        elif not isinstance(self.company_access, CompanyAccess):
            object.__setattr__(self, "company_access", parse_company_access(self.company_access))

    @property
    def is_root(self) -> bool:
        return self.role is RoleLevel.ROOT

    def in_scope(self, company_id: int | None) -> bool:
        """Return True if a record owned by ``company_id`` is within this identity's scope.

        Company-agnostic records (``company_id`` None) are in every scope.
        """
        if company_id is None:
            return True
        if self.company_access is CompanyAccess.ALL:
            return True
        if self.company_access is CompanyAccess.NONE:
            return False
        return self.company_id is not None and company_id == self.company_id
