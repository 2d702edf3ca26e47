"""Role levels, company access scopes and named roles.

The engine only ever reasons about the four canonical levels. Named roles
("audit", "Department Manager", ...) are stored separately and mapped onto a
level plus a company access scope before resolution starts.
"""

from dataclasses import dataclass
from enum import Enum

from menugate.domain.exceptions import ValidationError


class RoleLevel(str, Enum):
    """Canonical role levels, totally ordered by privilege."""

    ROOT = "root"
    ADMIN = "admin"
    USER = "user"
    NONE = "none"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def outranks(self, other: "RoleLevel") -> bool:
        """Return True if this level is strictly more privileged than ``other``."""
        return self.rank > other.rank

    @property
    def can_delegate(self) -> bool:
        return self.rank >= _RANKS[RoleLevel.ADMIN]


_RANKS = {
    RoleLevel.ROOT: 3,
    RoleLevel.ADMIN: 2,
    RoleLevel.USER: 1,
    RoleLevel.NONE: 0,
}

# Levels that may carry role-level permission rows. Root bypasses checks and
# "none" never matches a row.
PERSISTABLE_ROLE_LEVELS = frozenset({RoleLevel.ADMIN, RoleLevel.USER})


class CompanyAccess(str, Enum):
    """Which company-scoped nodes an identity may resolve."""

    ALL = "all"
    OWN = "own"
    NONE = "none"


def parse_role_level(value: str) -> RoleLevel:
    """Parse a canonical role level, rejecting anything else.

    Raises:
        ValidationError: If ``value`` is not a canonical level.
    """
    try:
        return RoleLevel(value)
    except ValueError:
        raise ValidationError(f"Unknown role '{value}'") from None


def parse_company_access(value: str) -> CompanyAccess:
    """Parse a company access scope.

    Raises:
        ValidationError: If ``value`` is not one of all, own or none.
    """
    try:
        return CompanyAccess(value)
    except ValueError:
        raise ValidationError(f"Unknown company access '{value}'") from None


def default_company_access(level: RoleLevel) -> CompanyAccess:
    """Company access granted to a canonical level when no named role says otherwise."""
    if level is RoleLevel.ROOT:
        return CompanyAccess.ALL
    return CompanyAccess.OWN


@dataclass
class MenuRole:
    """Named role mapped onto a canonical level.

    Attributes:
        id: Unique identifier.
        name: Role name as carried by user records and tokens.
        level: Canonical level the role resolves to.
        company_access: Company scope of the role.
        description: Optional description of the role's purpose.
    """

    id: int | None
    name: str
    level: RoleLevel
    company_access: CompanyAccess
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Role name is required")
        if self.name in {level.value for level in RoleLevel}:
            raise ValidationError(f"'{self.name}' is a canonical level, not a named role")
        if not isinstance(self.level, RoleLevel):
            self.level = parse_role_level(self.level)
        if not isinstance(self.company_access, CompanyAccess):
            self.company_access = parse_company_access(self.company_access)
