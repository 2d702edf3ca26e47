"""SQLAlchemy model for the roles table.

Holds named roles only. Canonical levels (root, admin, user, none) are never
stored here.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from menugate.infrastructure.persistence.database import Base


class RoleModel(Base):
    """SQLAlchemy model for the roles table.

    Attributes:
        id: Auto-incrementing primary key.
        name: Unique role name.
        level: Canonical level the role resolves to.
        company_access: Company scope ('all', 'own' or 'none').
        description: Optional description of the role's purpose.
    """

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
        comment="Role name (e.g., 'audit')",
    )
    level: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Canonical level the role resolves to",
    )
    company_access: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="own",
        comment="Company scope: all, own or none",
    )
    description: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Description of the role's purpose",
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name}, level={self.level})>"
