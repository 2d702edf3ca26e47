"""Fixtures for integration tests: a small multi-company menu."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from menugate.infrastructure.persistence.models import (
    MenuModel,
    MenuRolePermissionModel,
    MenuUserPermissionModel,
)

# id: (name, parent_id, order, company_id, is_open)
MENUS = {
    1: ("Dashboard", None, 0, None, True),
    2: ("Sales", None, 1, 1, False),
    3: ("Invoices", 2, 0, 1, False),
    4: ("Customers", 2, 1, 1, False),
    5: ("Payroll", None, 2, 2, False),
    6: ("Payslips", 5, 0, 2, False),
    7: ("Settings", None, 3, None, False),
    8: ("Users", 7, 0, None, False),
}


@pytest_asyncio.fixture
async def menus(db_session: AsyncSession, users) -> dict[int, MenuModel]:
    """Seed the menu table and a handful of permission rows.

    Role rows:
        admin: full on 3 and 4, read+update on 8, full on 6
        user:  read on 3 and 6
    User rows:
        user1: read+create on 4
    """
    created = {}
    for menu_id, (name, parent_id, order, company_id, is_open) in MENUS.items():
        menu = MenuModel(
            id=menu_id,
            name=name,
            parent_id=parent_id,
            order_num=order,
            company_id=company_id,
            is_open=is_open,
        )
        db_session.add(menu)
        created[menu_id] = menu
    await db_session.flush()

    full = dict(can_read=True, can_create=True, can_update=True, can_delete=True)
    db_session.add_all(
        [
            MenuRolePermissionModel(menu_id=3, role="admin", **full),
            MenuRolePermissionModel(menu_id=4, role="admin", **full),
            MenuRolePermissionModel(menu_id=6, role="admin", **full),
            MenuRolePermissionModel(menu_id=8, role="admin", can_read=True, can_update=True),
            MenuRolePermissionModel(menu_id=3, role="user", can_read=True),
            MenuRolePermissionModel(menu_id=6, role="user", can_read=True),
            MenuUserPermissionModel(menu_id=4, user_id="user1", can_read=True, can_create=True),
        ]
    )
    await db_session.commit()
    return created
