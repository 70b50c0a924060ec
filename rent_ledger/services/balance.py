"""
Balance and status resolution.

Nets expected billing against payments for a viewed month and classifies
the result. This module is the only place amounts are rounded.
"""

import math
from dataclasses import dataclass
from enum import Enum as PyEnum
from typing import Iterable, Protocol

from rent_ledger.core.months import month_key
from rent_ledger.services.accrual import AccrualResult

PAID_TOLERANCE = 10


class PaymentStatus(str, PyEnum):
    """Payment status for a tenant in a viewed month"""

    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"
    OVERPAID = "overpaid"


class PaymentLike(Protocol):
    amount: float
    payment_month: str


@dataclass(frozen=True)
class BalanceSummary:
    """
    Resolved balance for one tenant and one viewed month.

    balance > 0 is arrears, balance < 0 is credit.
    paid_this_period counts only payments dated in the viewed month and is
    for display; it does not feed the balance.
    """

    target_month: str
    monthly_rent: float
    expected: int
    total_paid: int
    balance: int
    status: PaymentStatus
    paid_this_period: int
    not_yet_due: bool
    source: str


def round_currency(value: float) -> int:
    """Round half up to whole currency units"""
    return int(math.floor(float(value) + 0.5))


def classify_balance(
    balance: float,
    monthly_rent: float,
    not_yet_due: bool = False,
    tolerance: int = PAID_TOLERANCE,
) -> PaymentStatus:
    """
    Classify a rounded balance.

    Precedence: nothing due yet -> paid; any negative balance -> overpaid;
    within the tolerance band -> paid; less than a month's rent -> partial;
    otherwise unpaid.
    """
    if not_yet_due:
        return PaymentStatus.PAID
    if balance < 0:
        return PaymentStatus.OVERPAID
    if balance <= tolerance:
        return PaymentStatus.PAID
    if balance < float(monthly_rent or 0):
        return PaymentStatus.PARTIAL
    return PaymentStatus.UNPAID


def sum_payments(payments: Iterable[PaymentLike], through_month: str) -> tuple[float, float]:
    """
    Split payments into (cumulative through month, paid in exactly that month).

    Payments dated after through_month are ignored.
    """
    total = 0.0
    this_period = 0.0
    for payment in payments:
        if payment.payment_month > through_month:
            continue
        amount = float(payment.amount or 0)
        total += amount
        if payment.payment_month == through_month:
            this_period += amount
    return total, this_period


def resolve_balance(
    accrual: AccrualResult,
    payments: Iterable[PaymentLike],
    monthly_rent: float,
    tolerance: int = PAID_TOLERANCE,
) -> BalanceSummary:
    """
    Net an accrual against payments and classify the result.

    Deterministic: depends only on its arguments.
    """
    target = month_key(accrual.target_month)
    total_paid, paid_this_period = sum_payments(payments, target)

    return summarize(
        target_month=target,
        expected=accrual.cumulative_expected,
        paid=total_paid,
        paid_this_period=paid_this_period,
        monthly_rent=monthly_rent,
        not_yet_due=accrual.not_yet_due,
        source="formula",
        tolerance=tolerance,
    )


def summarize(
    target_month: str,
    expected: float,
    paid: float,
    paid_this_period: float,
    monthly_rent: float,
    not_yet_due: bool,
    source: str,
    tolerance: int = PAID_TOLERANCE,
) -> BalanceSummary:
    """Build a BalanceSummary from unrounded totals"""
    balance = round_currency(expected - paid)
    rent = float(monthly_rent or 0)
    return BalanceSummary(
        target_month=target_month,
        monthly_rent=rent,
        expected=round_currency(expected),
        total_paid=round_currency(paid),
        balance=balance,
        status=classify_balance(balance, rent, not_yet_due, tolerance),
        paid_this_period=round_currency(paid_this_period),
        not_yet_due=not_yet_due,
        source=source,
    )
