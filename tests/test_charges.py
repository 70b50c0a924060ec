from tests.conftest import create_unit, onboard_tenant


class TestChargeCreation:
    """Tests for creating charges directly"""

    def test_create_other_charge(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(client, auth_headers, unit_id, as_of="2024-01-15")

        response = client.post(
            "/api/charges",
            headers=auth_headers,
            json={
                "tenant_id": tenant["id"],
                "amount": 1500,
                "charge_month": "2024-01",
                "note": "Water bill",
            },
        )

        assert response.status_code == 201
        assert response.json()["type"] == "other"
        assert response.json()["amount"] == 1500

    def test_other_charges_may_repeat(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(client, auth_headers, unit_id, as_of="2024-01-15")
        data = {"tenant_id": tenant["id"], "amount": 300, "charge_month": "2024-01"}

        assert client.post("/api/charges", headers=auth_headers, json=data).status_code == 201
        assert client.post("/api/charges", headers=auth_headers, json=data).status_code == 201

    def test_duplicate_rent_charge_conflicts(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(client, auth_headers, unit_id, as_of="2024-01-15")

        response = client.post(
            "/api/charges",
            headers=auth_headers,
            json={
                "tenant_id": tenant["id"],
                "amount": 20000,
                "charge_month": "2024-01",
                "type": "rent",
            },
        )

        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]

    def test_duplicate_opening_balance_conflicts(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(
            client, auth_headers, unit_id, as_of="2024-01-15", opening_balance=4000
        )

        response = client.post(
            "/api/charges/opening-balance",
            headers=auth_headers,
            json={"tenant_id": tenant["id"], "amount": 100, "effective_month": "2023-06"},
        )

        assert response.status_code == 409

    def test_opening_balance_created_once(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(client, auth_headers, unit_id, as_of="2024-01-15")
        data = {"tenant_id": tenant["id"], "amount": 2500, "effective_month": "2024-01"}

        first = client.post("/api/charges/opening-balance", headers=auth_headers, json=data)
        second = client.post("/api/charges/opening-balance", headers=auth_headers, json=data)

        assert first.status_code == 201
        assert first.json()["type"] == "opening_balance"
        assert second.status_code == 409

    def test_invalid_month_rejected(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(client, auth_headers, unit_id, as_of="2024-01-15")

        response = client.post(
            "/api/charges",
            headers=auth_headers,
            json={"tenant_id": tenant["id"], "amount": 10, "charge_month": "2024-1"},
        )

        assert response.status_code == 422

    def test_charge_for_other_users_tenant(self, client, user_a_headers, user_b_headers):
        tenant = onboard_tenant(
            client, user_a_headers, create_unit(client, user_a_headers), as_of="2024-01-15"
        )

        response = client.post(
            "/api/charges",
            headers=user_b_headers,
            json={"tenant_id": tenant["id"], "amount": 10, "charge_month": "2024-01"},
        )

        assert response.status_code == 404


class TestChargeListing:
    def test_list_through_month(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(client, auth_headers, unit_id, as_of="2024-04-02")

        response = client.get(
            f"/api/charges?tenant_id={tenant['id']}&through_month=2024-02", headers=auth_headers
        )

        data = response.json()
        assert data["total"] == 2
        assert data["total_amount"] == 40000
        assert [c["charge_month"] for c in data["charges"]] == ["2024-01", "2024-02"]


class TestMonthlyBilling:
    """Billing one month across the account"""

    def test_billing_is_idempotent(self, client, auth_headers):
        first_unit = create_unit(client, auth_headers, "North", "N1")
        second_unit = create_unit(client, auth_headers, "South", "S1")
        tenant = onboard_tenant(client, auth_headers, first_unit, as_of="2024-03-10")
        onboard_tenant(
            client, auth_headers, second_unit, as_of="2024-03-10", lease_start="2024-06-01"
        )

        first = client.post("/api/charges/billing?month=2024-04", headers=auth_headers).json()
        second = client.post("/api/charges/billing?month=2024-04", headers=auth_headers).json()

        assert first["charges_created"] == 1
        assert first["already_billed"] == 0
        assert second["charges_created"] == 0
        assert second["already_billed"] == 1
        rent_months = [
            c["charge_month"]
            for c in client.get(f"/api/charges?tenant_id={tenant['id']}", headers=auth_headers).json()[
                "charges"
            ]
        ]
        assert rent_months.count("2024-04") == 1

    def test_billing_uses_current_rent(self, client, auth_headers, unit_id):
        tenant = onboard_tenant(client, auth_headers, unit_id, as_of="2024-01-15")
        client.patch(f"/api/tenants/{tenant['id']}", headers=auth_headers, json={"rent_amount": 21000})

        client.post("/api/charges/billing?month=2024-02", headers=auth_headers)

        charges = client.get(
            f"/api/charges?tenant_id={tenant['id']}", headers=auth_headers
        ).json()["charges"]
        assert [c["amount"] for c in charges] == [20000, 21000]

    def test_billing_requires_month(self, client, auth_headers):
        assert client.post("/api/charges/billing", headers=auth_headers).status_code == 422
