"""SQLAlchemy models for menu permission rows.

Two row shapes exist: role-level rows keyed by ``(menu_id, role)`` and
user-level rows keyed by ``(menu_id, user_id)``. Both carry the same four
capability columns.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from menugate.infrastructure.persistence.database import Base


class MenuRolePermissionModel(Base):
    """Capabilities on a menu for every user of a canonical role level.

    Attributes:
        id: Auto-incrementing primary key.
        menu_id: Foreign key to menus table.
        role: Canonical role level ('admin' or 'user').
        can_read, can_create, can_update, can_delete: Capability flags.
    """

    __tablename__ = "menu_role_permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    menu_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("menus.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to menus table",
    )
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Canonical role level",
    )
    can_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_create: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_update: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    menu: Mapped["MenuModel"] = relationship(  # noqa: F821
        "MenuModel",
        back_populates="role_permissions",
    )

    __table_args__ = (UniqueConstraint("menu_id", "role", name="uq_menu_role_permission"),)

    def __repr__(self) -> str:
        return f"<MenuRolePermission(menu_id={self.menu_id}, role={self.role})>"


class MenuUserPermissionModel(Base):
    """Capabilities on a menu for a single user; overrides role rows.

    Attributes:
        id: Auto-incrementing primary key.
        menu_id: Foreign key to menus table.
        user_id: Foreign key to users table.
        can_read, can_create, can_update, can_delete: Capability flags.
    """

    __tablename__ = "menu_user_permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    menu_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("menus.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to menus table",
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to users table",
    )
    can_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_create: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_update: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    menu: Mapped["MenuModel"] = relationship(  # noqa: F821
        "MenuModel",
        back_populates="user_permissions",
    )

    __table_args__ = (UniqueConstraint("menu_id", "user_id", name="uq_menu_user_permission"),)

    def __repr__(self) -> str:
        return f"<MenuUserPermission(menu_id={self.menu_id}, user_id={self.user_id})>"
