"""Permission entities.

A permission row grants up to four independent capabilities on one menu
node, either to every user of a role level or to a single user.
"""

from dataclasses import dataclass, field
from enum import Enum

from menugate.domain.entities.role import PERSISTABLE_ROLE_LEVELS, RoleLevel, parse_role_level
from menugate.domain.exceptions import ValidationError


class Capability(str, Enum):
    """A single operation that can be granted on a menu node."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Capabilities:
    """Set of capability flags held on one node.

    Attributes:
        read: Node may be opened.
        create: Records may be created through the node.
        update: Records may be edited through the node.
        delete: Records may be deleted through the node.
    """

    read: bool = False
    create: bool = False
    update: bool = False
    delete: bool = False

    def __post_init__(self) -> None:
        for capability in Capability:
            value = getattr(self, capability.value)
            if not isinstance(value, bool):
                raise ValidationError(
                    f"Capability '{capability.value}' must be a boolean, got {type(value).__name__}"
                )

    @classmethod
    def none(cls) -> "Capabilities":
        return cls()

    @classmethod
    def full(cls) -> "Capabilities":
        return cls(read=True, create=True, update=True, delete=True)

    @classmethod
    def read_only(cls) -> "Capabilities":
        return cls(read=True)

    @classmethod
    def from_granted(cls, granted: "set[Capability] | list[Capability]") -> "Capabilities":
        return cls(**{capability.value: True for capability in granted})

    def has(self, capability: Capability) -> bool:
        return getattr(self, capability.value)

    def granted(self) -> list[Capability]:
        """Capabilities set to true, in canonical order."""
        return [capability for capability in Capability if self.has(capability)]

    def missing_from(self, other: "Capabilities") -> list[Capability]:
        """Capabilities granted here that ``other`` does not grant."""
        return [capability for capability in self.granted() if not other.has(capability)]

    def is_subset_of(self, other: "Capabilities") -> bool:
        return not self.missing_from(other)

    @property
    def is_empty(self) -> bool:
        return not self.granted()


@dataclass
class RolePermission:
    """Capabilities granted on a node to every user of a role level."""

    menu_id: int
    role: RoleLevel
    capabilities: Capabilities = field(default_factory=Capabilities)

    def __post_init__(self) -> None:
        if not isinstance(self.role, RoleLevel):
            self.role = parse_role_level(self.role)
        if self.role not in PERSISTABLE_ROLE_LEVELS:
            raise ValidationError(
                f"Permissions cannot be stored for role '{self.role.value}'"
            )


@dataclass
class UserPermission:
    """Capabilities granted on a node to a single user; overrides role rows."""

    menu_id: int
    user_id: str
    capabilities: Capabilities = field(default_factory=Capabilities)

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValidationError("User ID is required")
