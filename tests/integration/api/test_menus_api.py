"""Integration tests for the menus API."""

import pytest

MENUS_URL = "/api/v1/menus"


def tree_ids(items: list[dict]) -> list[int]:
    ids = []
    for item in items:
        ids.append(item["id"])
        ids.extend(tree_ids(item["children"]))
    return ids


@pytest.mark.asyncio
class TestReadEndpoints:
    async def test_tree_requires_token(self, client, menus):
        response = await client.get(f"{MENUS_URL}/tree")

        assert response.status_code == 401

    async def test_tree_for_user(self, client, menus, auth_headers):
        response = await client.get(f"{MENUS_URL}/tree", headers=auth_headers("user1"))

        assert response.status_code == 200
        data = response.json()
        assert [item["id"] for item in data["items"]] == [1, 2]
        sales = data["items"][1]
        assert sales["permissions"] == {"read": False, "create": False, "update": False, "delete": False}
        assert [child["id"] for child in sales["children"]] == [3, 4]
        assert sales["children"][1]["permissions"]["create"] is True
        assert data["total"] == 4

    async def test_flat_matches_tree(self, client, menus, auth_headers):
        """The flat list and the tree always contain the same nodes in the same order."""
        for user_id in ["root", "admin1", "user1", "user2", "auditor", "guest1"]:
            headers = auth_headers(user_id)
            tree = (await client.get(f"{MENUS_URL}/tree", headers=headers)).json()
            flat = (await client.get(f"{MENUS_URL}/flat", headers=headers)).json()

            assert [item["id"] for item in flat["items"]] == tree_ids(tree["items"])

    async def test_flat_carries_depth(self, client, menus, auth_headers):
        response = await client.get(f"{MENUS_URL}/flat", headers=auth_headers("user2"))

        items = response.json()["items"]
        assert [(item["id"], item["depth"]) for item in items] == [(1, 0), (5, 0), (6, 1)]

    async def test_guest_sees_only_open_nodes(self, client, menus, auth_headers):
        response = await client.get(f"{MENUS_URL}/tree", headers=auth_headers("guest1"))

        assert tree_ids(response.json()["items"]) == [1]

    async def test_unknown_user_gets_empty_tree(self, client, menus, token_for):
        token = token_for("stranger", role="admin", company_id=1)

        response = await client.get(f"{MENUS_URL}/tree", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"items": [], "total": 0}

    async def test_full_tree_reports_anomalies(self, client, menus, auth_headers, db_session):
        from menugate.domain.entities import MenuNode
        from menugate.domain.services import MenuService

        await MenuService(db_session).import_menus(
            [MenuNode(id=50, name="Orphan", parent_id=99), MenuNode(id=51, name="Self", parent_id=51)]
        )

        response = await client.get(f"{MENUS_URL}/full-tree", headers=auth_headers("root"))

        assert response.status_code == 200
        data = response.json()
        assert data["anomalies"] == {"orphan_ids": [50], "cyclic_ids": [51], "detached_ids": []}
        assert 51 not in tree_ids(data["items"])
        assert data["total"] == 9

    async def test_full_tree_requires_admin(self, client, menus, auth_headers):
        response = await client.get(f"{MENUS_URL}/full-tree", headers=auth_headers("user1"))

        assert response.status_code == 403

    async def test_full_tree_is_scoped(self, client, menus, auth_headers):
        response = await client.get(f"{MENUS_URL}/full-tree", headers=auth_headers("admin2"))

        assert tree_ids(response.json()["items"]) == [1, 5, 6, 7, 8]

    async def test_access_check(self, client, menus, auth_headers):
        response = await client.get(f"{MENUS_URL}/2/access", headers=auth_headers("user1"))

        assert response.status_code == 200
        assert response.json() == {
            "menu_id": 2,
            "visible": True,
            "permissions": {"read": False, "create": False, "update": False, "delete": False},
        }

    async def test_access_check_errors(self, client, menus, auth_headers):
        missing = await client.get(f"{MENUS_URL}/404/access", headers=auth_headers("user1"))
        foreign = await client.get(f"{MENUS_URL}/6/access", headers=auth_headers("user1"))

        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"
        assert foreign.status_code == 403
        assert foreign.json()["error"] == "scope_violation"


@pytest.mark.asyncio
class TestStructuralEndpoints:
    async def test_create_requires_root(self, client, menus, auth_headers):
        response = await client.post(
            MENUS_URL, json={"name": "Reports"}, headers=auth_headers("admin1")
        )

        assert response.status_code == 403

    async def test_create(self, client, menus, auth_headers):
        response = await client.post(
            MENUS_URL,
            json={"name": "Reports", "parent_id": 7, "url": "/reports"},
            headers=auth_headers("root"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["parent_id"] == 7
        assert data["order"] == 1
        assert data["url"] == "/reports"

    async def test_create_validation(self, client, menus, auth_headers):
        response = await client.post(
            MENUS_URL, json={"name": "Bad", "order": -1}, headers=auth_headers("root")
        )

        assert response.status_code == 422

    async def test_update_cycle_rejected(self, client, menus, auth_headers):
        response = await client.put(
            f"{MENUS_URL}/7", json={"parent_id": 8}, headers=auth_headers("root")
        )

        assert response.status_code == 409
        assert response.json()["error"] == "cycle_detected"

    async def test_update_rename(self, client, menus, auth_headers):
        response = await client.put(
            f"{MENUS_URL}/8", json={"name": "People"}, headers=auth_headers("root")
        )

        assert response.status_code == 200
        assert response.json()["name"] == "People"
        assert response.json()["parent_id"] == 7

    async def test_delete_cascades(self, client, menus, auth_headers):
        response = await client.delete(f"{MENUS_URL}/7", headers=auth_headers("root"))

        assert response.status_code == 200
        assert sorted(response.json()["deleted_ids"]) == [7, 8]

        tree = await client.get(f"{MENUS_URL}/tree", headers=auth_headers("root"))
        assert 7 not in tree_ids(tree.json()["items"])

    async def test_move(self, client, menus, auth_headers):
        response = await client.post(f"{MENUS_URL}/4/move-up", headers=auth_headers("root"))

        assert response.status_code == 200
        assert [item["id"] for item in response.json()["items"]] == [4, 3]

        edge = await client.post(f"{MENUS_URL}/4/move-up", headers=auth_headers("root"))
        assert edge.status_code == 422
        assert edge.json()["error"] == "validation_error"

    async def test_mutation_is_visible_on_next_read(self, client, menus, auth_headers):
        """A cached tree does not outlive a structural change."""
        headers = auth_headers("user1")
        before = await client.get(f"{MENUS_URL}/tree", headers=headers)
        assert 3 in tree_ids(before.json()["items"])

        await client.delete(f"{MENUS_URL}/3", headers=auth_headers("root"))

        after = await client.get(f"{MENUS_URL}/tree", headers=headers)
        assert 3 not in tree_ids(after.json()["items"])
