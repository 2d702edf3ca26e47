"""Named role API schemas."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class CreateRoleRequest(BaseModel):
    """Request schema for creating a named role.

    Attributes:
        name: Role name carried by user records and tokens.
        level: Canonical level the role resolves to.
        company_access: Company scope of the role.
        description: Optional description.
    """

    name: str = Field(..., min_length=1, max_length=50)
    level: Literal["root", "admin", "user", "none"]
    company_access: Literal["all", "own", "none"] = "own"
    description: str | None = Field(default=None, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_canonical(cls, v: str) -> str:
        """Validate that name is not blank and not a canonical level."""
        v = v.strip()
        if not v:
            raise ValueError("Role name cannot be empty")
        if v in ("root", "admin", "user", "none"):
            raise ValueError(f"'{v}' is a canonical level, not a named role")
        return v


class RoleResponse(BaseModel):
    id: int
    name: str
    level: str
    company_access: str
    description: str | None = None


class RoleListResponse(BaseModel):
    items: list[RoleResponse]
    total: int
