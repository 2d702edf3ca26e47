"""SQLAlchemy model for the users table.

This is a directory mirror kept in sync by the identity provider. The engine
reads it to confirm that a user exists and to find their company and role.
No credentials are stored here.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from menugate.infrastructure.persistence.database import Base


class UserModel(Base):
    """SQLAlchemy model for the users table.

    Attributes:
        id: User identifier issued by the identity provider.
        username: Display name.
        company_id: Company the user belongs to (NULL for installation-wide users).
        role: Canonical level or named role.
        is_active: Inactive users resolve to nothing.
        created_at: Timestamp when the user was created.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="User ID from the identity provider",
    )
    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Display name",
    )
    company_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
        comment="Company the user belongs to",
    )
    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="user",
        comment="Canonical level or named role",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Whether the user resolves to any menus",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, company_id={self.company_id}, role={self.role})>"
