"""Menu node entity.

Menu nodes are persisted as flat records with a parent pointer. The nested
structure only exists once a ``MenuTree`` has been built from them.
"""

from dataclasses import dataclass

from menugate.domain.exceptions import ValidationError


@dataclass
class MenuNode:
    """A single entry of the navigable menu.

    Attributes:
        id: Installation-wide unique identifier.
        name: Display label.
        order: Position among siblings (ties broken by id).
        parent_id: Parent node ID, None for a root.
        name_localized: Optional second-language label.
        icon: Opaque icon reference for the UI.
        url: Route the UI navigates to.
        company_id: Owning company, None when the node is company-agnostic.
        is_open: Node declares no restriction; readable without a permission row.
    """

    id: int
    name: str
    order: int = 0
    parent_id: int | None = None
    name_localized: str | None = None
    icon: str | None = None
    url: str | None = None
    company_id: int | None = None
    is_open: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.id, int) or self.id <= 0:
            raise ValidationError(f"Menu ID must be a positive integer, got {self.id!r}")
        if not self.name or not self.name.strip():
            raise ValidationError("Menu name is required")
        if self.order < 0:
            raise ValidationError(f"Menu order must be >= 0, got {self.order}")

    @property
    def is_company_agnostic(self) -> bool:
        return self.company_id is None

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.order, self.id)
