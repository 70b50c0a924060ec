import pytest
from tests.conftest import create_unit, onboard_tenant


@pytest.fixture
def account(client, auth_headers):
    """One occupied unit (25000 rent from January) and one vacant unit"""
    prop = client.post("/api/properties", headers=auth_headers, json={"name": "Garden Court"}).json()
    units = [
        client.post(
            f"/api/properties/{prop['id']}/units", headers=auth_headers, json={"unit_number": n}
        ).json()
        for n in ["G1", "G2"]
    ]
    tenant = onboard_tenant(
        client,
        auth_headers,
        units[0]["id"],
        as_of="2024-01-20",
        rent_amount=25000,
        lease_start="2024-01-01",
        security_deposit=25000,
    )
    return {"tenant": tenant, "units": units}


def pay(client, headers, tenant_id, amount, payment_date):
    client.post(
        "/api/payments",
        headers=headers,
        json={"tenant_id": tenant_id, "amount": amount, "payment_date": payment_date},
    )


class TestDashboard:
    def test_unit_rows(self, client, auth_headers, account):
        pay(client, auth_headers, account["tenant"]["id"], 24995, "2024-01-25")

        response = client.get("/api/dashboard?month=2024-01", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["month"] == "2024-01"
        assert data["source"] == "formula"
        occupied, vacant = data["units"]
        assert occupied["unit_number"] == "G1"
        assert occupied["tenant_name"] == "Jane Wanjiku"
        assert occupied["property_name"] == "Garden Court"
        assert occupied["expected"] == 25000
        assert occupied["paid"] == 24995
        assert occupied["balance"] == 5
        assert occupied["payment_status"] == "paid"
        assert vacant["tenant_id"] is None
        assert vacant["payment_status"] == "unpaid"
        assert vacant["expected"] == 0
        assert vacant["balance"] == 0

    def test_stats(self, client, auth_headers, account):
        pay(client, auth_headers, account["tenant"]["id"], 20000, "2024-01-25")
        pay(client, auth_headers, account["tenant"]["id"], 10000, "2024-02-03")

        stats = client.get("/api/dashboard?month=2024-02", headers=auth_headers).json()["stats"]

        assert stats["total_units"] == 2
        assert stats["occupied_units"] == 1
        assert stats["vacant_units"] == 1
        assert stats["total_expected"] == 50000
        assert stats["total_paid"] == 30000
        assert stats["total_arrears"] == 20000
        assert stats["total_deposits"] == 25000
        assert stats["collected_this_period"] == 10000

    def test_credit_not_counted_as_arrears(self, client, auth_headers, account):
        pay(client, auth_headers, account["tenant"]["id"], 30000, "2024-01-05")

        data = client.get("/api/dashboard?month=2024-01", headers=auth_headers).json()

        assert data["units"][0]["payment_status"] == "overpaid"
        assert data["stats"]["total_arrears"] == 0

    def test_later_payments_do_not_leak_into_earlier_month(self, client, auth_headers, account):
        pay(client, auth_headers, account["tenant"]["id"], 25000, "2024-02-01")

        data = client.get("/api/dashboard?month=2024-01", headers=auth_headers).json()

        assert data["units"][0]["paid"] == 0
        assert data["units"][0]["payment_status"] == "unpaid"

    def test_ledger_source(self, client, auth_headers, account):
        pay(client, auth_headers, account["tenant"]["id"], 25000, "2024-01-05")

        data = client.get("/api/dashboard?month=2024-01&source=ledger", headers=auth_headers).json()

        assert data["source"] == "ledger"
        assert data["units"][0]["balance"] == 0
        assert data["units"][0]["payment_status"] == "paid"

    def test_other_users_units_hidden(self, client, user_b_headers, account):
        data = client.get("/api/dashboard?month=2024-01", headers=user_b_headers).json()

        assert data["units"] == []
        assert data["stats"]["total_units"] == 0
