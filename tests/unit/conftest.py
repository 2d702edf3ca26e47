"""Pytest configuration for unit tests."""

import pytest

from menugate.domain.entities import (
    Capabilities,
    Identity,
    MenuNode,
    RoleLevel,
    RolePermission,
    UserPermission,
)
from menugate.domain.services import (
    PermissionResolver,
    PermissionSnapshot,
    build_tree,
)


@pytest.fixture
def sample_nodes() -> list[MenuNode]:
    """Two companies sharing an agnostic Dashboard and Settings folder.

    1 Dashboard (open, agnostic)
    2 Sales (company 1)
      3 Invoices
      4 Customers
    5 Payroll (company 2)
      6 Payslips
    7 Settings (agnostic)
      8 Users
      9 Audit trail
    """
    return [
        MenuNode(id=1, name="Dashboard", order=0, is_open=True),
        MenuNode(id=2, name="Sales", order=1, company_id=1),
        MenuNode(id=3, name="Invoices", order=0, parent_id=2, company_id=1),
        MenuNode(id=4, name="Customers", order=1, parent_id=2, company_id=1),
        MenuNode(id=5, name="Payroll", order=2, company_id=2),
        MenuNode(id=6, name="Payslips", order=0, parent_id=5, company_id=2),
        MenuNode(id=7, name="Settings", order=3),
        MenuNode(id=8, name="Users", order=0, parent_id=7),
        MenuNode(id=9, name="Audit trail", order=1, parent_id=7),
    ]


@pytest.fixture
def sample_snapshot() -> PermissionSnapshot:
    full = Capabilities.full()
    return PermissionSnapshot.from_rows(
        role_permissions=[
            RolePermission(menu_id=3, role=RoleLevel.ADMIN, capabilities=full),
            RolePermission(menu_id=4, role=RoleLevel.ADMIN, capabilities=full),
            RolePermission(menu_id=6, role=RoleLevel.ADMIN, capabilities=full),
            RolePermission(
                menu_id=8,
                role=RoleLevel.ADMIN,
                capabilities=Capabilities(read=True, update=True),
            ),
            RolePermission(menu_id=3, role=RoleLevel.USER, capabilities=Capabilities.read_only()),
            RolePermission(menu_id=6, role=RoleLevel.USER, capabilities=Capabilities.read_only()),
        ],
        user_permissions=[
            UserPermission(
                menu_id=4,
                user_id="user1",
                capabilities=Capabilities(read=True, create=True),
            ),
            UserPermission(menu_id=3, user_id="admin1", capabilities=Capabilities.read_only()),
        ],
    )


@pytest.fixture
def resolver(sample_nodes, sample_snapshot) -> PermissionResolver:
    return PermissionResolver(build_tree(sample_nodes), sample_snapshot)


@pytest.fixture
def identities() -> dict[str, Identity]:
    return {
        "root": Identity(user_id="root", role=RoleLevel.ROOT),
        "admin1": Identity(user_id="admin1", role=RoleLevel.ADMIN, company_id=1),
        "user1": Identity(user_id="user1", role=RoleLevel.USER, company_id=1),
        "user1b": Identity(user_id="user1b", role=RoleLevel.USER, company_id=1),
        "user2": Identity(user_id="user2", role=RoleLevel.USER, company_id=2),
        "guest": Identity(user_id="guest", role=RoleLevel.NONE, company_id=1),
        "auditor": Identity(user_id="auditor", role=RoleLevel.ADMIN, company_id=1, company_access="all"),
    }
