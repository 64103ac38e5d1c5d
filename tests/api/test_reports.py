"""
Tests for the report, cost center and currency endpoints.
"""

from decimal import Decimal


def post_sale(client, cost_center_id=None):
    cash = client.post("/accounts", json={
        "code": "1110", "name": "Cash", "account_type": "asset",
        "subtype": "cash", "opening_balance": "300.00",
    }).json()
    sales = client.post("/accounts", json={
        "code": "4110", "name": "Sales", "name_local": "فروش",
        "account_type": "revenue",
    }).json()
    client.post("/transactions", json={
        "description": "Bracelet sale",
        "transaction_date": "2024-06-10",
        "cost_center_id": cost_center_id,
        "entries": [
            {"account_id": cash["id"], "debit_amount": "120.00"},
            {"account_id": sales["id"], "credit_amount": "120.00"},
        ],
    })
    return cash, sales


class TestReports:

    def test_trial_balance(self, client):
        post_sale(client)

        data = client.get(
            "/reports/trial-balance", params={"as_of": "2024-12-31"}
        ).json()

        assert data["balanced"] is True
        assert Decimal(data["total_debit"]) == Decimal("420")
        names = [r["name"] for r in data["rows"]]
        assert "Opening balance equity" in names

    def test_trial_balance_local_names(self, client):
        post_sale(client)

        data = client.get("/reports/trial-balance", params={
            "as_of": "2024-12-31", "locale": "fa",
        }).json()

        assert "فروش" in [r["name"] for r in data["rows"]]

    def test_balance_sheet(self, client):
        post_sale(client)

        data = client.get(
            "/reports/balance-sheet", params={"as_of": "2024-12-31"}
        ).json()

        assert data["balanced"] is True
        assert Decimal(data["total_assets"]) == Decimal("420")

    def test_income_statement(self, client):
        post_sale(client)

        data = client.get("/reports/income-statement", params={
            "start": "2024-06-01", "end": "2024-06-30",
        }).json()

        assert Decimal(data["net_profit"]) == Decimal("120")

    def test_inverted_range_returns_422(self, client):
        response = client.get("/reports/income-statement", params={
            "start": "2024-06-30", "end": "2024-06-01",
        })
        assert response.status_code == 422

    def test_cash_flow(self, client):
        post_sale(client)

        data = client.get("/reports/cash-flow", params={
            "start": "2024-01-01", "end": "2024-12-31",
        }).json()

        assert Decimal(data["opening_cash"]) == Decimal("300")
        assert Decimal(data["closing_cash"]) == Decimal("420")
        assert data["reconciled"] is True

    def test_aging_reports_answer(self, client):
        receivables = client.get("/reports/aged-receivables").json()
        payables = client.get("/reports/aged-payables").json()

        assert receivables["kind"] == "receivables"
        assert payables["kind"] == "payables"
        assert [b["label"] for b in payables["buckets"]] == [
            "current", "1_30", "31_60", "61_90", "over_90",
        ]

    def test_cost_center_summary(self, client):
        center = client.post("/cost-centers", json={
            "code": "BAZAAR", "name": "Bazaar branch",
        }).json()
        post_sale(client, cost_center_id=center["id"])

        data = client.get("/reports/cost-centers", params={
            "start": "2024-01-01", "end": "2024-12-31",
        }).json()

        assert data["rows"][0]["code"] == "BAZAAR"
        assert Decimal(data["rows"][0]["net"]) == Decimal("120")


class TestCostCenters:

    def test_register_and_deactivate(self, client):
        response = client.post("/cost-centers", json={
            "code": "WORKSHOP", "name": "Workshop",
        })
        assert response.status_code == 201
        center_id = response.json()["id"]

        first = client.post(f"/cost-centers/{center_id}/deactivate")
        second = client.post(f"/cost-centers/{center_id}/deactivate")

        assert first.json()["is_active"] is False
        assert second.status_code == 409

    def test_delete_in_use_returns_409(self, client):
        center = client.post("/cost-centers", json={
            "code": "BAZAAR", "name": "Bazaar branch",
        }).json()
        post_sale(client, cost_center_id=center["id"])

        assert client.delete(f"/cost-centers/{center['id']}").status_code == 409


class TestCurrencies:

    def test_first_currency_is_base(self, client):
        response = client.post("/currencies", json={
            "code": "usd", "name": "US Dollar",
        })
        assert response.status_code == 201
        assert response.json()["code"] == "USD"
        assert response.json()["is_base"] is True

    def test_switch_base(self, client):
        client.post("/currencies", json={"code": "USD", "name": "US Dollar"})
        client.post("/currencies", json={
            "code": "EUR", "name": "Euro", "exchange_rate": "0.5",
        })

        response = client.put("/currencies/EUR/base")
        assert response.status_code == 200
        assert response.json()["is_base"] is True

        rates = {c["code"]: Decimal(c["exchange_rate"]) for c in client.get("/currencies").json()}
        assert rates == {"USD": Decimal("2"), "EUR": Decimal("1")}

    def test_switch_to_current_base_returns_409(self, client):
        client.post("/currencies", json={"code": "USD", "name": "US Dollar"})
        assert client.put("/currencies/USD/base").status_code == 409
