"""SQLAlchemy model for the menus table.

Menus are stored flat with a parent pointer. ``parent_id`` is a plain
column: imported rows may reference missing parents, which the tree builder
promotes to roots and reports.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from menugate.infrastructure.persistence.database import Base


class MenuModel(Base):
    """SQLAlchemy model for the menus table.

    Attributes:
        id: Auto-incrementing primary key, unique across the installation.
        name: Display label.
        name_localized: Optional second-language label.
        icon: Icon reference for the UI.
        url: Route the UI navigates to.
        order_num: Position among siblings.
        parent_id: Parent menu ID, NULL for roots.
        company_id: Owning company, NULL for company-agnostic menus.
        is_open: Readable without any permission row.
        created_at: Timestamp when the menu was created.
        updated_at: Timestamp when the menu was last updated.
    """

    __tablename__ = "menus"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Display label",
    )
    name_localized: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Second-language display label",
    )
    icon: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Icon reference, opaque to the engine",
    )
    url: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Route the UI navigates to",
    )
    order_num: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Position among siblings",
    )
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
        comment="Parent menu ID (NULL for roots)",
    )
    company_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
        comment="Owning company (NULL for company-agnostic menus)",
    )
    is_open: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Readable without a permission row",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    role_permissions: Mapped[list["MenuRolePermissionModel"]] = relationship(  # noqa: F821
        "MenuRolePermissionModel",
        back_populates="menu",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    user_permissions: Mapped[list["MenuUserPermissionModel"]] = relationship(  # noqa: F821
        "MenuUserPermissionModel",
        back_populates="menu",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("ix_menus_parent_order", "parent_id", "order_num"),)

    def __repr__(self) -> str:
        return f"<Menu(id={self.id}, name={self.name}, parent_id={self.parent_id})>"
