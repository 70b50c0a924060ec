import pytest
from tests.conftest import onboard_tenant


def record(client, headers, tenant_id, amount, payment_date, **fields):
    data = {"tenant_id": tenant_id, "amount": amount, "payment_date": payment_date}
    data.update(fields)
    return client.post("/api/payments", headers=headers, json=data)


def allocations_of(payment):
    return [(a["applied_month"], a["amount"]) for a in payment["allocations"]]


@pytest.fixture
def tenant(client, auth_headers, unit_id):
    """10000 rent from January, billed through March"""
    return onboard_tenant(
        client,
        auth_headers,
        unit_id,
        as_of="2024-03-05",
        rent_amount=10000,
        lease_start="2024-01-01",
    )


class TestRecordPayment:
    def test_payment_month_defaults_from_date(self, client, auth_headers, tenant):
        response = record(client, auth_headers, tenant["id"], 5000, "2024-02-27", mpesa_code="SAB12CD34")

        assert response.status_code == 201
        payment = response.json()
        assert payment["payment_month"] == "2024-02"
        assert payment["mpesa_code"] == "SAB12CD34"

    def test_explicit_payment_month(self, client, auth_headers, tenant):
        response = record(client, auth_headers, tenant["id"], 5000, "2024-02-27", payment_month="2024-03")

        assert response.json()["payment_month"] == "2024-03"

    def test_amount_must_be_positive(self, client, auth_headers, tenant):
        response = record(client, auth_headers, tenant["id"], 0, "2024-02-27")

        assert response.status_code == 422

    def test_unknown_tenant(self, client, auth_headers):
        response = record(client, auth_headers, 99999, 100, "2024-02-27")

        assert response.status_code == 404


class TestSmartAllocation:
    """Payments cover the oldest outstanding months first"""

    def test_oldest_month_first(self, client, auth_headers, tenant):
        payment = record(client, auth_headers, tenant["id"], 25000, "2024-03-05").json()

        assert allocations_of(payment) == [("2024-01", 10000), ("2024-02", 10000), ("2024-03", 5000)]

    def test_remainder_becomes_credit_on_payment_month(self, client, auth_headers, tenant):
        record(client, auth_headers, tenant["id"], 25000, "2024-03-05")

        payment = record(client, auth_headers, tenant["id"], 8000, "2024-03-20").json()

        # 5000 clears March, 3000 is advance credit on the payment's month
        assert allocations_of(payment) == [("2024-03", 8000)]

    def test_overpayment_balance(self, client, auth_headers, tenant):
        record(client, auth_headers, tenant["id"], 33000, "2024-03-05")

        data = client.get(
            f"/api/tenants/{tenant['id']}/balance?month=2024-03&source=ledger", headers=auth_headers
        ).json()

        assert data["balance"] == -3000
        assert data["status"] == "overpaid"

    def test_allocations_sum_to_payment(self, client, auth_headers, tenant):
        payment = record(client, auth_headers, tenant["id"], 12345.5, "2024-01-05").json()

        assert sum(amount for _, amount in allocations_of(payment)) == pytest.approx(12345.5)


class TestExplicitAllocations:
    def test_explicit_allocations_stored(self, client, auth_headers, tenant):
        response = record(
            client,
            auth_headers,
            tenant["id"],
            10000,
            "2024-03-01",
            allocations=[
                {"applied_month": "2024-03", "amount": 6000},
                {"applied_month": "2024-02", "amount": 4000},
            ],
        )

        assert response.status_code == 201
        assert sorted(allocations_of(response.json())) == [("2024-02", 4000), ("2024-03", 6000)]

    def test_allocations_exceeding_amount_rejected(self, client, auth_headers, tenant):
        response = record(
            client,
            auth_headers,
            tenant["id"],
            1000,
            "2024-03-01",
            allocations=[{"applied_month": "2024-03", "amount": 1000.01}],
        )

        assert response.status_code == 400
        payments = client.get(f"/api/payments?tenant_id={tenant['id']}", headers=auth_headers).json()
        assert payments["total"] == 0


class TestPaymentRetrieval:
    def test_list_ordered_by_month(self, client, auth_headers, tenant):
        record(client, auth_headers, tenant["id"], 300, "2024-03-01")
        record(client, auth_headers, tenant["id"], 100, "2024-01-01")
        record(client, auth_headers, tenant["id"], 200, "2024-02-01")

        data = client.get(f"/api/payments?tenant_id={tenant['id']}", headers=auth_headers).json()

        assert [p["payment_month"] for p in data["payments"]] == ["2024-01", "2024-02", "2024-03"]
        assert data["total_amount"] == 600

    def test_list_through_month(self, client, auth_headers, tenant):
        record(client, auth_headers, tenant["id"], 100, "2024-01-01")
        record(client, auth_headers, tenant["id"], 200, "2024-02-01")

        data = client.get(
            f"/api/payments?tenant_id={tenant['id']}&through_month=2024-01", headers=auth_headers
        ).json()

        assert data["total"] == 1

    def test_get_payment_and_allocations(self, client, auth_headers, tenant):
        payment = record(client, auth_headers, tenant["id"], 15000, "2024-01-20").json()

        fetched = client.get(f"/api/payments/{payment['id']}", headers=auth_headers)
        allocations = client.get(f"/api/payments/{payment['id']}/allocations", headers=auth_headers)

        assert fetched.status_code == 200
        assert fetched.json()["amount"] == 15000
        assert allocations.json()["total"] == 2

    def test_other_user_cannot_see_payment(self, client, auth_headers, user_b_headers, tenant):
        payment = record(client, auth_headers, tenant["id"], 15000, "2024-01-20").json()

        response = client.get(f"/api/payments/{payment['id']}", headers=user_b_headers)

        assert response.status_code == 404


class TestAllocateEndpoint:
    def test_already_allocated_conflicts(self, client, auth_headers, tenant):
        payment = record(client, auth_headers, tenant["id"], 5000, "2024-01-20").json()

        response = client.post(f"/api/payments/{payment['id']}/allocate", headers=auth_headers)

        assert response.status_code == 409

    def test_allocates_legacy_payment(self, client, auth_headers, db_session, tenant):
        from datetime import date
        from rent_ledger.models.payment import Payment

        legacy = Payment(
            tenant_id=tenant["id"],
            amount=12000,
            payment_date=date(2024, 1, 31),
            payment_month="2024-01",
        )
        db_session.add(legacy)
        db_session.commit()

        response = client.post(f"/api/payments/{legacy.id}/allocate", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert [(a["applied_month"], a["amount"]) for a in data["allocations"]] == [
            ("2024-01", 10000),
            ("2024-02", 2000),
        ]
        assert data["remaining_credit"] == 0
