"""Permission API schemas for request/response validation."""

from pydantic import BaseModel, field_validator, model_validator

from menugate.infrastructure.api.schemas.menu_schemas import CapabilitiesSchema

ROLE_NAMES = ("root", "admin", "user", "none")


def _validate_role(v: str | None) -> str | None:
    if v is not None and v not in ROLE_NAMES:
        raise ValueError(f"Unknown role '{v}'. Must be one of: {', '.join(ROLE_NAMES)}")
    return v


class DelegatableItem(BaseModel):
    menu_id: int
    capability: str


class DelegatableResponse(BaseModel):
    """Response schema for the delegatable set.

    Attributes:
        items: ``(menu_id, capability)`` pairs the caller may grant.
        total: Number of pairs.
    """

    items: list[DelegatableItem]
    total: int


class PermissionTargetRequest(BaseModel):
    """Identifies one permission row: a menu plus exactly one of user or role."""

    menu_id: int
    user_id: str | None = None
    role: str | None = None

    @field_validator("role")
    @classmethod
    def role_known(cls, v: str | None) -> str | None:
        """Validate that role is a canonical level."""
        return _validate_role(v)

    @model_validator(mode="after")
    def exactly_one_target(self) -> "PermissionTargetRequest":
        """Validate that exactly one of user_id and role is given."""
        if (self.user_id is None) == (self.role is None):
            raise ValueError("Exactly one of 'user_id' or 'role' must be provided")
        return self


class AssignPermissionRequest(PermissionTargetRequest):
    """Request schema for assigning (upserting) a permission row."""

    capabilities: CapabilitiesSchema


class RevokePermissionRequest(PermissionTargetRequest):
    """Request schema for revoking a permission row."""

    pass


class PermissionResponse(BaseModel):
    """A stored permission row, keyed by user or by role."""

    menu_id: int
    user_id: str | None = None
    role: str | None = None
    capabilities: CapabilitiesSchema


class PermissionListResponse(BaseModel):
    items: list[PermissionResponse]
    total: int


class PermissionEntry(BaseModel):
    menu_id: int
    capabilities: CapabilitiesSchema


class ReplaceUserPermissionsRequest(BaseModel):
    """Full set of a user's rows within the caller's scope."""

    items: list[PermissionEntry]
