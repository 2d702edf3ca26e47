"""Menu API schemas for request/response validation."""

from pydantic import BaseModel, Field, StrictBool, field_validator


class CapabilitiesSchema(BaseModel):
    """Capability flags. Only real booleans are accepted."""

    read: StrictBool = False
    create: StrictBool = False
    update: StrictBool = False
    delete: StrictBool = False


class MenuResponse(BaseModel):
    """A single menu node without children."""

    id: int
    name: str
    name_localized: str | None = None
    icon: str | None = None
    url: str | None = None
    order: int
    parent_id: int | None = None
    company_id: int | None = None
    is_open: bool = False


class MenuTreeNodeResponse(MenuResponse):
    """A node of a resolved tree with its effective permissions."""

    permissions: CapabilitiesSchema | None = None
    children: list["MenuTreeNodeResponse"] = Field(default_factory=list)


class MenuTreeResponse(BaseModel):
    """Response schema for a menu forest.

    Attributes:
        items: Root nodes, each with nested children.
        total: Number of nodes in the whole forest.
    """

    items: list[MenuTreeNodeResponse]
    total: int


class MenuFlatItemResponse(MenuResponse):
    """A node of a flattened tree, in pre-order."""

    depth: int
    permissions: CapabilitiesSchema


class MenuFlatResponse(BaseModel):
    items: list[MenuFlatItemResponse]
    total: int


class TreeAnomaliesResponse(BaseModel):
    """Structural problems found while building a tree."""

    orphan_ids: list[int]
    cyclic_ids: list[int]
    detached_ids: list[int]


class FullTreeResponse(BaseModel):
    items: list[MenuTreeNodeResponse]
    total: int
    anomalies: TreeAnomaliesResponse


class MenuAccessResponse(BaseModel):
    """Direct access check result for one node."""

    menu_id: int
    visible: bool
    permissions: CapabilitiesSchema


class CreateMenuRequest(BaseModel):
    """Request schema for creating a menu node.

    Attributes:
        name: Display label.
        parent_id: Parent node, None for a root.
        order: Sibling position; defaults to after the last sibling.
        company_id: Owning company, None for a company-agnostic node.
        is_open: Readable without a permission row.
    """

    name: str = Field(..., min_length=1, max_length=100)
    parent_id: int | None = None
    order: int | None = Field(default=None, ge=0)
    name_localized: str | None = Field(default=None, max_length=100)
    icon: str | None = Field(default=None, max_length=100)
    url: str | None = Field(default=None, max_length=255)
    company_id: int | None = None
    is_open: StrictBool = False

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        """Validate that name is not only whitespace."""
        if not v.strip():
            raise ValueError("Menu name cannot be empty")
        return v.strip()


class UpdateMenuRequest(BaseModel):
    """Partial update of a menu node; only fields sent are changed."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    parent_id: int | None = None
    order: int | None = Field(default=None, ge=0)
    name_localized: str | None = Field(default=None, max_length=100)
    icon: str | None = Field(default=None, max_length=100)
    url: str | None = Field(default=None, max_length=255)
    company_id: int | None = None
    is_open: StrictBool | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Menu name cannot be empty")
        return v.strip() if v is not None else v


class MenuSiblingsResponse(BaseModel):
    """Siblings of a moved node in their new order."""

    items: list[MenuResponse]
    total: int


class DeleteMenuResponse(BaseModel):
    deleted_ids: list[int]
    total: int
