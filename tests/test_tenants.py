import pytest
from tests.conftest import create_unit, onboard_tenant


def list_charges(client, headers, tenant_id):
    response = client.get(f"/api/charges?tenant_id={tenant_id}", headers=headers)
    assert response.status_code == 200
    return response.json()["charges"]


class TestTenantOnboarding:
    """Tests for creating tenants and their initial charges"""

    def test_onboard_creates_opening_balance_and_rent_charges(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(
            client, auth_headers, unit_id, as_of="2024-03-15", opening_balance=5000
        )

        charges = list_charges(client, auth_headers, tenant["id"])

        assert [(c["type"], c["charge_month"], c["amount"]) for c in charges] == [
            ("opening_balance", "2024-01", 5000),
            ("rent", "2024-01", 20000),
            ("rent", "2024-02", 20000),
            ("rent", "2024-03", 20000),
        ]
        assert charges[1]["note"] == "First month rent"
        assert charges[2]["note"] == "Monthly rent"

    def test_first_month_override_billed_once(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(
            client,
            auth_headers,
            unit_id,
            as_of="2024-02-05",
            is_prorated=True,
            first_month_override=8000,
        )

        amounts = [c["amount"] for c in list_charges(client, auth_headers, tenant["id"])]

        assert amounts == [8000, 20000]

    def test_prorated_requires_override(self, client, auth_headers, unit_id):
        data = {
            "unit_id": unit_id,
            "name": "No Override",
            "rent_amount": 30000,
            "lease_start": "2024-06-21",
            "is_prorated": True,
        }

        response = client.post("/api/tenants?as_of=2024-06-30", headers=auth_headers, json=data)

        assert response.status_code == 422

    def test_future_lease_has_no_rent_charges(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(
            client, auth_headers, unit_id, as_of="2023-12-20", opening_balance=1500
        )

        charges = list_charges(client, auth_headers, tenant["id"])

        assert [(c["type"], c["charge_month"]) for c in charges] == [("opening_balance", "2024-01")]

    def test_occupied_unit_rejected(self, client, auth_headers, unit_id):
        onboard_tenant(client, auth_headers, unit_id, as_of="2024-01-15")

        data = {"unit_id": unit_id, "name": "Second", "rent_amount": 1000}
        response = client.post("/api/tenants?as_of=2024-01-15", headers=auth_headers, json=data)

        assert response.status_code == 400
        assert "occupied" in response.json()["detail"]

    def test_other_users_unit_rejected(self, client, user_a_headers, user_b_headers):
        unit_id = create_unit(client, user_a_headers)

        data = {"unit_id": unit_id, "name": "Intruder", "rent_amount": 1000}
        response = client.post("/api/tenants?as_of=2024-01-15", headers=user_b_headers, json=data)

        assert response.status_code == 404


class TestTenantMaintenance:
    def test_list_and_get(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(client, auth_headers, unit_id, as_of="2024-01-15")

        assert client.get("/api/tenants", headers=auth_headers).json()["total"] == 1
        response = client.get(f"/api/tenants/{tenant['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Jane Wanjiku"

    def test_update_tenant(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(client, auth_headers, unit_id, as_of="2024-01-15")

        response = client.patch(
            f"/api/tenants/{tenant['id']}",
            headers=auth_headers,
            json={"phone": "+254711111111", "rent_amount": 22000},
        )

        assert response.status_code == 200
        assert response.json()["phone"] == "+254711111111"
        assert response.json()["rent_amount"] == 22000
        assert response.json()["name"] == "Jane Wanjiku"

    def test_move_to_occupied_unit_rejected(self, client, auth_headers):
        first = onboard_tenant(
            client, auth_headers, create_unit(client, auth_headers, "P1", "1"), as_of="2024-01-15"
        )
        second_unit = create_unit(client, auth_headers, "P2", "2")
        onboard_tenant(client, auth_headers, second_unit, as_of="2024-01-15", name="Other")

        response = client.patch(
            f"/api/tenants/{first['id']}", headers=auth_headers, json={"unit_id": second_unit}
        )

        assert response.status_code == 400

    def test_delete_frees_unit(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(client, auth_headers, unit_id, as_of="2024-01-15")

        response = client.delete(f"/api/tenants/{tenant['id']}", headers=auth_headers)

        assert response.status_code == 204
        onboard_tenant(client, auth_headers, unit_id, as_of="2024-01-15", name="Next Tenant")


class TestTenantBalance:
    """Balance endpoint across both balance sources"""

    @pytest.fixture
    def tenant(self, client, auth_headers, unit_id):
        return onboard_tenant(
            client,
            auth_headers,
            unit_id,
            as_of="2024-02-20",
            opening_balance=5000,
            is_prorated=True,
            first_month_override=8000,
        )

    def test_override_scenario_balance(self, client, auth_headers, tenant):
        response = client.get(
            f"/api/tenants/{tenant['id']}/balance?month=2024-02", headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["expected"] == 33000
        assert data["balance"] == 33000
        assert data["status"] == "unpaid"
        assert data["source"] == "formula"

    @pytest.mark.parametrize("month", ["2023-12", "2024-01", "2024-02"])
    def test_ledger_matches_formula(self, client, auth_headers, tenant, month):
        url = f"/api/tenants/{tenant['id']}/balance?month={month}"

        formula = client.get(f"{url}&source=formula", headers=auth_headers).json()
        ledger = client.get(f"{url}&source=ledger", headers=auth_headers).json()

        assert ledger["source"] == "ledger"
        assert ledger["expected"] == formula["expected"]
        assert ledger["balance"] == formula["balance"]
        assert ledger["status"] == formula["status"]

    def test_before_lease_is_not_yet_due(self, client, auth_headers, tenant):
        data = client.get(
            f"/api/tenants/{tenant['id']}/balance?month=2023-11", headers=auth_headers
        ).json()

        assert data["not_yet_due"] is True
        assert data["expected"] == 0
        assert data["status"] == "paid"

    def test_month_defaults_to_as_of(self, client, auth_headers, tenant):
        data = client.get(
            f"/api/tenants/{tenant['id']}/balance?as_of=2024-01-31", headers=auth_headers
        ).json()

        assert data["target_month"] == "2024-01"
        assert data["expected"] == 13000

    def test_unknown_source_rejected(self, client, auth_headers, tenant):
        response = client.get(
            f"/api/tenants/{tenant['id']}/balance?month=2024-02&source=abacus", headers=auth_headers
        )

        assert response.status_code == 400

    def test_invalid_month_rejected(self, client, auth_headers, tenant):
        response = client.get(
            f"/api/tenants/{tenant['id']}/balance?month=2024-13", headers=auth_headers
        )

        assert response.status_code == 422

    def test_statement(self, client, auth_headers, tenant):
        client.post(
            "/api/payments",
            headers=auth_headers,
            json={"tenant_id": tenant["id"], "amount": 10000, "payment_date": "2024-02-03"},
        )

        response = client.get(
            f"/api/tenants/{tenant['id']}/statement?month=2024-03", headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert [(r["month"], r["charged"], r["paid"], r["balance"]) for r in data["rows"]] == [
            ("2024-01", 13000, 0, 13000),
            ("2024-02", 20000, 10000, 23000),
            ("2024-03", 20000, 0, 43000),
        ]
        assert data["closing_balance"] == 43000
