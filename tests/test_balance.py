"""Tests for balance resolution and status classification."""

import pytest
from datetime import date
from types import SimpleNamespace

from rent_ledger.services.accrual import calculate_accrual
from rent_ledger.services.balance import (
    PaymentStatus,
    classify_balance,
    resolve_balance,
    round_currency,
    sum_payments,
)


def payment(amount, month="2024-03"):
    return SimpleNamespace(amount=amount, payment_month=month)


@pytest.fixture
def march_accrual():
    """25000 rent, lease starting in the viewed month"""
    return calculate_accrual(25000, date(2024, 3, 1), 0, False, None, date(2024, 3, 1))


class TestStatusBoundaries:
    """Status boundaries at 25000 monthly rent"""

    @pytest.mark.parametrize(
        "paid, balance, status",
        [
            (25000, 0, PaymentStatus.PAID),
            (24995, 5, PaymentStatus.PAID),
            (24990, 10, PaymentStatus.PAID),
            (24989, 11, PaymentStatus.PARTIAL),
            (30000, -5000, PaymentStatus.OVERPAID),
            (0, 25000, PaymentStatus.UNPAID),
        ],
    )
    def test_boundaries(self, march_accrual, paid, balance, status):
        summary = resolve_balance(march_accrual, [payment(paid)], 25000)

        assert summary.expected == 25000
        assert summary.balance == balance
        assert summary.status == status

    def test_any_negative_balance_is_overpaid(self):
        assert classify_balance(-1, 25000) == PaymentStatus.OVERPAID

    def test_arrears_above_rent_is_unpaid(self):
        assert classify_balance(40000, 25000) == PaymentStatus.UNPAID

    def test_not_yet_due_is_paid(self):
        assert classify_balance(0, 25000, not_yet_due=True) == PaymentStatus.PAID


class TestResolveBalance:
    def test_not_yet_due_tenant_is_paid_with_zero_expected(self):
        accrual = calculate_accrual(25000, date(2024, 3, 15), 0, False, None, date(2024, 2, 1))

        summary = resolve_balance(accrual, [], 25000)

        assert summary.expected == 0
        assert summary.balance == 0
        assert summary.status == PaymentStatus.PAID
        assert summary.not_yet_due is True

    def test_payments_after_viewed_month_are_ignored(self, march_accrual):
        payments = [payment(10000, "2024-03"), payment(15000, "2024-04")]

        summary = resolve_balance(march_accrual, payments, 25000)

        assert summary.total_paid == 10000
        assert summary.balance == 15000
        assert summary.status == PaymentStatus.PARTIAL

    def test_paid_this_period_counts_viewed_month_only(self):
        accrual = calculate_accrual(10000, date(2024, 1, 1), 0, False, None, date(2024, 3, 1))
        payments = [payment(10000, "2024-01"), payment(10000, "2024-02"), payment(4000, "2024-03")]

        summary = resolve_balance(accrual, payments, 10000)

        assert summary.total_paid == 24000
        assert summary.paid_this_period == 4000
        assert summary.balance == 6000
        assert summary.source == "formula"

    def test_fractional_proration_rounds_once(self):
        """31000 rent from Jan 17 bills 15/31 of a month, 15000 exactly"""
        accrual = calculate_accrual(31000, date(2024, 1, 17), 0, True, None, date(2024, 1, 1))
        summary = resolve_balance(accrual, [payment(14999.6, "2024-01")], 31000)

        assert summary.balance == 0
        assert summary.total_paid == 15000


class TestHelpers:
    @pytest.mark.parametrize(
        "value, expected", [(2.5, 3), (2.49, 2), (-2.5, -2), (0.5, 1), (10000.0, 10000)]
    )
    def test_round_currency_half_up(self, value, expected):
        assert round_currency(value) == expected

    def test_sum_payments(self):
        total, this_period = sum_payments(
            [payment(100, "2024-01"), payment(50, "2024-02"), payment(25, "2024-03")], "2024-02"
        )
        assert total == 150
        assert this_period == 50
