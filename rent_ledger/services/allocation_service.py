"""
Smart payment allocation.

Applies a payment to the tenant's outstanding charge months, oldest first.
Whatever is left after every outstanding month is covered becomes a credit
allocation on the payment's own month.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from sqlalchemy.orm import Session

from rent_ledger.models.payment import Payment, PaymentAllocation
from rent_ledger.repositories.charge_repository import ChargeRepository
from rent_ledger.repositories.payment_repository import PaymentRepository

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT)


@dataclass
class AllocationResult:
    """
    Outcome of allocating one payment.

    Attributes:
        payment_id: Allocated payment
        allocations: Rows created (empty if the payment was already allocated)
        remaining_credit: Portion applied as advance credit
        already_allocated: True if nothing was done
    """

    payment_id: int
    allocations: list[PaymentAllocation] = field(default_factory=list)
    remaining_credit: float = 0.0
    already_allocated: bool = False


def plan_allocations(
    amount: Decimal,
    outstanding_by_month: dict[str, Decimal],
    credit_month: str,
) -> tuple[dict[str, Decimal], Decimal]:
    """
    Split an amount across outstanding months, oldest first.

    Args:
        amount: Payment amount
        outstanding_by_month: Unpaid amount per YYYY-MM month
        credit_month: Month that receives any remainder

    Returns:
        (amount per applied month, remainder applied as credit)
    """
    plan: dict[str, Decimal] = {}
    remaining = amount
    for month in sorted(outstanding_by_month):
        if remaining <= 0:
            break
        outstanding = outstanding_by_month[month]
        if outstanding <= 0:
            continue
        applied = min(remaining, outstanding)
        plan[month] = applied
        remaining -= applied

    credit = remaining if remaining > 0 else Decimal("0")
    if credit > 0:
        plan[credit_month] = plan.get(credit_month, Decimal("0")) + credit
    return plan, credit


class AllocationService:
    """Service layer for payment allocation"""

    def __init__(self, db: Session):
        self.db = db
        self.payment_repo = PaymentRepository(db)
        self.charge_repo = ChargeRepository(db)

    def outstanding_by_month(self, tenant_id: int) -> dict[str, Decimal]:
        """Charged minus already allocated, per month, for one tenant"""
        balances: dict[str, Decimal] = defaultdict(Decimal)
        for charge in self.charge_repo.get_by_tenant(tenant_id):
            balances[charge.charge_month] += _money(charge.amount)
        for allocation in self.payment_repo.get_tenant_allocations(tenant_id):
            balances[allocation.applied_month] -= _money(allocation.amount)
        return dict(balances)

    def allocate_payment(self, payment: Payment) -> AllocationResult:
        """
        Allocate a payment that has no allocations yet.

        A payment that already has allocations is left untouched so the
        operation can be repeated safely.
        """
        if self.payment_repo.has_allocations(payment.id):
            return AllocationResult(payment_id=payment.id, already_allocated=True)

        plan, credit = plan_allocations(
            _money(payment.amount),
            self.outstanding_by_month(payment.tenant_id),
            payment.payment_month,
        )
        allocations = [
            PaymentAllocation(payment_id=payment.id, amount=amount, applied_month=month)
            for month, amount in plan.items()
        ]
        if allocations:
            self.payment_repo.create_allocations_no_commit(allocations)
            self.payment_repo.commit()

        logger.debug(
            "Allocated payment %s across %s month(s), credit=%s",
            payment.id,
            len(allocations),
            credit,
        )
        return AllocationResult(
            payment_id=payment.id,
            allocations=allocations,
            remaining_credit=float(credit),
        )
