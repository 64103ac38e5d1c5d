"""
Tests for the chart of accounts endpoints.

These check the HTTP layer: status codes, response shape and
error mapping. Business rules are covered in
tests/services/test_account_service.py.
"""

from decimal import Decimal


def create(client, **fields):
    body = {"code": "1110", "name": "Cash", "account_type": "asset"}
    body.update(fields)
    return client.post("/accounts", json=body)


class TestRegisterAccount:

    def test_returns_201_with_data(self, client):
        response = create(client, opening_balance="250.00")
        assert response.status_code == 201
        data = response.json()
        assert data["code"] == "1110"
        assert data["account_type"] == "asset"
        assert data["normal_side"] == "debit"
        assert Decimal(data["current_balance"]) == Decimal("250")

    def test_duplicate_code_returns_422(self, client):
        create(client)
        response = create(client, name="Cash again")
        assert response.status_code == 422
        assert "already exists" in response.json()["detail"]

    def test_non_numeric_code_rejected(self, client):
        response = create(client, code="CASH")
        assert response.status_code == 422

    def test_unknown_parent_returns_422(self, client):
        response = create(client, parent_id=999)
        assert response.status_code == 422


class TestReadAccounts:

    def test_get_unknown_returns_404(self, client):
        assert client.get("/accounts/999").status_code == 404

    def test_list_filters_by_type(self, client):
        create(client)
        create(client, code="4110", name="Sales", account_type="revenue")

        response = client.get("/accounts", params={"account_type": "revenue"})
        assert [a["code"] for a in response.json()] == ["4110"]

    def test_tree_nests_children(self, client):
        parent = create(client, code="1000", name="Assets").json()
        create(client, parent_id=parent["id"], opening_balance="40.00")

        tree = client.get("/accounts/tree").json()

        assert len(tree) == 1
        assert tree[0]["code"] == "1000"
        assert Decimal(tree[0]["balance"]) == Decimal("40")
        assert [c["code"] for c in tree[0]["children"]] == ["1110"]

    def test_seed_default_chart(self, client):
        response = client.post("/accounts/seed")
        assert response.status_code == 201
        assert len(response.json()) > 50
        # second run adds nothing
        assert client.post("/accounts/seed").json() == []

    def test_balance_with_and_without_children(self, client):
        parent = create(client, code="1000", name="Assets", opening_balance="5.00").json()
        create(client, parent_id=parent["id"], opening_balance="40.00")

        data = client.get(f"/accounts/{parent['id']}/balance").json()

        assert Decimal(data["balance"]) == Decimal("45")
        assert Decimal(data["own_balance"]) == Decimal("5")


class TestChangeAccounts:

    def test_patch_name(self, client):
        account = create(client).json()
        response = client.patch(f"/accounts/{account['id']}", json={"name": "Till"})
        assert response.status_code == 200
        assert response.json()["name"] == "Till"

    def test_delete_unused_returns_204(self, client):
        account = create(client).json()
        assert client.delete(f"/accounts/{account['id']}").status_code == 204
        assert client.get(f"/accounts/{account['id']}").status_code == 404

    def test_delete_parent_returns_409(self, client):
        parent = create(client, code="1000", name="Assets").json()
        create(client, parent_id=parent["id"])
        assert client.delete(f"/accounts/{parent['id']}").status_code == 409

    def test_reparent_into_own_subtree_returns_422(self, client):
        parent = create(client, code="1000", name="Assets").json()
        child = create(client, parent_id=parent["id"]).json()

        response = client.put(
            f"/accounts/{parent['id']}/parent", json={"parent_id": child["id"]}
        )
        assert response.status_code == 422

    def test_reparent_to_root(self, client):
        parent = create(client, code="1000", name="Assets").json()
        child = create(client, parent_id=parent["id"]).json()

        response = client.put(
            f"/accounts/{child['id']}/parent", json={"parent_id": None}
        )
        assert response.status_code == 200
        assert response.json()["parent_id"] is None
