"""Integration tests for permission delegation."""

import pytest

from menugate.domain.entities import Capabilities, Identity, RoleLevel
from menugate.domain.exceptions import (
    DelegationDeniedError,
    NotFoundError,
    ScopeViolationError,
    ValidationError,
)
from menugate.domain.services import IdentityService, MenuAccessCache, PermissionService
from menugate.infrastructure.persistence.repositories import MenuPermissionRepository

ROOT = Identity(user_id="root", role=RoleLevel.ROOT)
ADMIN1 = Identity(user_id="admin1", role=RoleLevel.ADMIN, company_id=1)
USER1 = Identity(user_id="user1", role=RoleLevel.USER, company_id=1)


async def user_rows(session, user_id: str) -> dict[int, Capabilities]:
    rows = await MenuPermissionRepository(session).list_user_permissions(user_id)
    return {row.menu_id: row.capabilities for row in rows}


@pytest.mark.asyncio
class TestAssignUserPermission:
    async def test_grant_within_own_access(self, db_session, menus):
        caps = Capabilities(read=True, update=True)

        permission = await PermissionService(db_session).assign_user_permission(ADMIN1, "user1", 8, caps)

        assert permission.capabilities == caps
        assert (await user_rows(db_session, "user1"))[8] == caps

    async def test_upsert_overwrites_existing_row(self, db_session, menus):
        await PermissionService(db_session).assign_user_permission(
            ADMIN1, "user1", 4, Capabilities.read_only()
        )

        assert await user_rows(db_session, "user1") == {4: Capabilities.read_only()}

    async def test_grant_beyond_own_access_writes_nothing(self, db_session, menus):
        with pytest.raises(DelegationDeniedError):
            await PermissionService(db_session).assign_user_permission(
                ADMIN1, "user1", 8, Capabilities(read=True, delete=True)
            )

        assert 8 not in await user_rows(db_session, "user1")

    async def test_narrowing_grant_allowed(self, db_session, menus):
        await PermissionService(db_session).assign_user_permission(
            ADMIN1, "user1", 2, Capabilities.none()
        )

        assert (await user_rows(db_session, "user1"))[2].is_empty

    async def test_target_in_other_company(self, db_session, menus):
        with pytest.raises(ScopeViolationError):
            await PermissionService(db_session).assign_user_permission(
                ADMIN1, "user2", 1, Capabilities.read_only()
            )

    async def test_target_outranking_actor(self, db_session, menus):
        with pytest.raises(DelegationDeniedError):
            await PermissionService(db_session).assign_user_permission(
                ADMIN1, "root", 1, Capabilities.read_only()
            )

    async def test_missing_target(self, db_session, menus):
        with pytest.raises(NotFoundError):
            await PermissionService(db_session).assign_user_permission(
                ADMIN1, "nobody", 1, Capabilities.read_only()
            )

    async def test_menu_in_other_company(self, db_session, menus):
        with pytest.raises(ScopeViolationError):
            await PermissionService(db_session).assign_user_permission(
                ADMIN1, "user1", 6, Capabilities.read_only()
            )

    async def test_missing_menu(self, db_session, menus):
        with pytest.raises(NotFoundError):
            await PermissionService(db_session).assign_user_permission(
                ADMIN1, "user1", 404, Capabilities.read_only()
            )

    async def test_user_level_actor_cannot_delegate(self, db_session, menus):
        with pytest.raises(DelegationDeniedError):
            await PermissionService(db_session).assign_user_permission(
                USER1, "guest1", 3, Capabilities.read_only()
            )

        assert await user_rows(db_session, "guest1") == {}

    async def test_unknown_actor(self, db_session, menus):
        ghost = Identity(user_id="ghost", role=RoleLevel.ADMIN, company_id=1)

        with pytest.raises(DelegationDeniedError):
            await PermissionService(db_session).assign_user_permission(
                ghost, "user1", 3, Capabilities.read_only()
            )

    async def test_audit_role_crosses_companies(self, db_session, menus):
        auditor = await IdentityService(db_session).identity_for("auditor", "audit", 1)

        await PermissionService(db_session).assign_user_permission(
            auditor, "user2", 6, Capabilities(read=True, update=True)
        )

        assert (await user_rows(db_session, "user2"))[6].update is True

    async def test_only_target_user_cache_invalidated(self, db_session, menus):
        cache = MenuAccessCache(ttl_seconds=300)
        cache.set(USER1, "stale")
        cache.set(ADMIN1, "kept")

        await PermissionService(db_session, cache=cache).assign_user_permission(
            ADMIN1, "user1", 8, Capabilities.read_only()
        )

        assert cache.get(USER1) is None
        assert cache.get(ADMIN1) == "kept"


@pytest.mark.asyncio
class TestRolePermissions:
    async def test_assign_role_row(self, db_session, menus):
        await PermissionService(db_session).assign_role_permission(
            ADMIN1, "user", 4, Capabilities(read=True, create=True)
        )

        rows = await MenuPermissionRepository(db_session).list_role_permissions([4], role=RoleLevel.USER)
        assert rows[0].capabilities == Capabilities(read=True, create=True)

    async def test_role_row_change_clears_whole_cache(self, db_session, menus):
        cache = MenuAccessCache(ttl_seconds=300)
        cache.set(USER1, "stale")
        cache.set(ADMIN1, "stale")

        await PermissionService(db_session, cache=cache).assign_role_permission(
            ADMIN1, "user", 3, Capabilities.read_only()
        )

        assert cache.size() == 0

    @pytest.mark.parametrize("role", ["root", "none", "superuser"])
    async def test_unpersistable_role_rejected(self, db_session, menus, role):
        with pytest.raises(ValidationError):
            await PermissionService(db_session).assign_role_permission(
                ROOT, role, 1, Capabilities.read_only()
            )

    async def test_role_grant_beyond_own_access(self, db_session, menus):
        with pytest.raises(DelegationDeniedError):
            await PermissionService(db_session).assign_role_permission(
                ADMIN1, "user", 8, Capabilities(read=True, delete=True)
            )

    async def test_revoke_role_row(self, db_session, menus):
        service = PermissionService(db_session)

        await service.revoke_role_permission(ADMIN1, "user", 3)

        assert await service.list_role_permissions(ADMIN1, "user") == []

    async def test_list_role_rows_is_scoped(self, db_session, menus):
        rows = await PermissionService(db_session).list_role_permissions(ADMIN1, "user")

        assert [row.menu_id for row in rows] == [3]


@pytest.mark.asyncio
class TestRevokeUserPermission:
    async def test_revoke(self, db_session, menus):
        await PermissionService(db_session).revoke_user_permission(ADMIN1, "user1", 4)

        assert await user_rows(db_session, "user1") == {}

    async def test_revoke_missing_row(self, db_session, menus):
        with pytest.raises(NotFoundError):
            await PermissionService(db_session).revoke_user_permission(ADMIN1, "user1", 3)

    async def test_revoke_by_user_level_denied(self, db_session, menus):
        with pytest.raises(DelegationDeniedError):
            await PermissionService(db_session).revoke_user_permission(USER1, "user1", 4)


@pytest.mark.asyncio
class TestReplaceUserPermissions:
    async def test_replace(self, db_session, menus):
        service = PermissionService(db_session)

        written = await service.replace_user_permissions(
            ADMIN1,
            "user1",
            [(3, Capabilities.read_only()), (8, Capabilities(read=True, update=True))],
        )

        assert [p.menu_id for p in written] == [3, 8]
        assert set(await user_rows(db_session, "user1")) == {3, 8}

    async def test_rejected_entry_aborts_everything(self, db_session, menus):
        with pytest.raises(DelegationDeniedError):
            await PermissionService(db_session).replace_user_permissions(
                ADMIN1,
                "user1",
                [(3, Capabilities.read_only()), (8, Capabilities(read=True, delete=True))],
            )

        assert await user_rows(db_session, "user1") == {4: Capabilities(read=True, create=True)}

    async def test_rows_outside_actor_scope_survive(self, db_session, menus):
        service = PermissionService(db_session)
        await service.assign_user_permission(ROOT, "user1", 6, Capabilities.read_only())

        await service.replace_user_permissions(ADMIN1, "user1", [])

        assert set(await user_rows(db_session, "user1")) == {6}

    async def test_duplicate_menu_rejected(self, db_session, menus):
        with pytest.raises(ValidationError):
            await PermissionService(db_session).replace_user_permissions(
                ADMIN1, "user1", [(3, Capabilities.read_only()), (3, Capabilities.none())]
            )

    async def test_list_user_rows_is_scoped(self, db_session, menus):
        service = PermissionService(db_session)

        assert [p.menu_id for p in await service.list_user_permissions(ADMIN1, "user1")] == [4]
        with pytest.raises(ScopeViolationError):
            await service.list_user_permissions(ADMIN1, "user2")
