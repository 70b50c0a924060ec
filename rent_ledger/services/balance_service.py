"""
Balance sources.

Balances can be computed two ways: from the tenant's billing parameters
(formula) or from the charge and allocation ledgers. Both produce the same
BalanceSummary so callers can switch without caring which is in use.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from rent_ledger.config import settings
from rent_ledger.core.exceptions import NotFoundException, ValidationException
from rent_ledger.core.months import iter_month_keys, month_key, month_start, parse_month_key
from rent_ledger.models.tenant import Tenant
from rent_ledger.models.user import User
from rent_ledger.repositories.charge_repository import ChargeRepository
from rent_ledger.repositories.payment_repository import PaymentRepository
from rent_ledger.repositories.tenant_repository import TenantRepository
from rent_ledger.services.accrual import calculate_tenant_accrual
from rent_ledger.services.balance import (
    BalanceSummary,
    resolve_balance,
    round_currency,
    sum_payments,
    summarize,
)

logger = logging.getLogger(__name__)


class BalanceSource(ABC):
    """Computes a tenant's balance for a viewed month"""

    name: str

    @abstractmethod
    def tenant_balance(
        self, tenant: Tenant, target_month: date, as_of: Optional[date] = None
    ) -> BalanceSummary:
        ...


class FormulaBalanceSource(BalanceSource):
    """Accrual formula over billing parameters, netted against payments"""

    name = "formula"

    def __init__(self, db: Session):
        self.payment_repo = PaymentRepository(db)

    def tenant_balance(
        self, tenant: Tenant, target_month: date, as_of: Optional[date] = None
    ) -> BalanceSummary:
        accrual = calculate_tenant_accrual(tenant, target_month, as_of)
        payments = self.payment_repo.get_by_tenant(tenant.id, month_key(target_month))
        return resolve_balance(
            accrual, payments, float(tenant.rent_amount or 0), settings.PAID_TOLERANCE
        )


class LedgerBalanceSource(BalanceSource):
    """Sum of charges minus sum of allocations, both through the viewed month"""

    name = "ledger"

    def __init__(self, db: Session):
        self.charge_repo = ChargeRepository(db)
        self.payment_repo = PaymentRepository(db)

    def tenant_balance(
        self, tenant: Tenant, target_month: date, as_of: Optional[date] = None
    ) -> BalanceSummary:
        target = month_key(target_month)
        charged = self.charge_repo.get_tenant_total(tenant.id, target)
        allocated = self.payment_repo.get_tenant_allocated_total(tenant.id, target)
        _, paid_this_period = sum_payments(
            self.payment_repo.get_by_tenant(tenant.id, target), target
        )
        not_yet_due = tenant.lease_start is not None and month_start(target_month) < month_start(
            tenant.lease_start
        )
        return summarize(
            target_month=target,
            expected=charged,
            paid=allocated,
            paid_this_period=paid_this_period,
            monthly_rent=float(tenant.rent_amount or 0),
            not_yet_due=not_yet_due,
            source=self.name,
            tolerance=settings.PAID_TOLERANCE,
        )


BALANCE_SOURCES: dict[str, type[BalanceSource]] = {
    FormulaBalanceSource.name: FormulaBalanceSource,
    LedgerBalanceSource.name: LedgerBalanceSource,
}


def get_balance_source(db: Session, name: Optional[str] = None) -> BalanceSource:
    """
    Build the configured balance source.

    Args:
        db: Database session
        name: "formula" or "ledger"; defaults to the BALANCE_SOURCE setting

    Raises:
        ValidationException: If the name is unknown
    """
    name = (name or settings.BALANCE_SOURCE).lower()
    source_class = BALANCE_SOURCES.get(name)
    if source_class is None:
        raise ValidationException(
            f"Unknown balance source '{name}', expected one of {sorted(BALANCE_SOURCES)}"
        )
    return source_class(db)


@dataclass(frozen=True)
class StatementRow:
    month: str
    charged: int
    paid: int
    balance: int


class BalanceService:
    """Service layer for tenant balances and statements"""

    def __init__(self, db: Session):
        self.db = db
        self.tenant_repo = TenantRepository(db)
        self.payment_repo = PaymentRepository(db)

    def _get_tenant(self, tenant_id: int, user: User) -> Tenant:
        tenant = self.tenant_repo.get_by_id_and_user(tenant_id, user.id)
        if not tenant:
            raise NotFoundException(f"Tenant {tenant_id} not found")
        return tenant

    def get_tenant_balance(
        self,
        tenant_id: int,
        user: User,
        target_month: date,
        source: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> BalanceSummary:
        tenant = self._get_tenant(tenant_id, user)
        return get_balance_source(self.db, source).tenant_balance(tenant, target_month, as_of)

    def monthly_statement(
        self,
        tenant_id: int,
        user: User,
        through_month: date,
        as_of: Optional[date] = None,
    ) -> list[StatementRow]:
        """
        Month-by-month charged / paid / running balance from the lease month.

        Charged per month is the increase in formula accrual, so the first
        row includes the opening balance. Payments dated before the lease
        month are counted in the first row.
        """
        tenant = self._get_tenant(tenant_id, user)
        lease_month = month_start(tenant.lease_start or as_of or through_month)
        if month_start(through_month) < lease_month:
            return []

        payments = self.payment_repo.get_by_tenant(tenant.id, month_key(through_month))
        first_key = month_key(lease_month)
        paid_by_month: dict[str, float] = {}
        for payment in payments:
            key = max(payment.payment_month, first_key)
            paid_by_month[key] = paid_by_month.get(key, 0.0) + float(payment.amount)

        rows = []
        previous_expected = 0.0
        cumulative_paid = 0.0
        for key in iter_month_keys(lease_month, through_month):
            accrual = calculate_tenant_accrual(tenant, parse_month_key(key), as_of)
            charged = accrual.cumulative_expected - previous_expected
            previous_expected = accrual.cumulative_expected
            paid = paid_by_month.get(key, 0.0)
            cumulative_paid += paid
            rows.append(
                StatementRow(
                    month=key,
                    charged=round_currency(charged),
                    paid=round_currency(paid),
                    balance=round_currency(accrual.cumulative_expected - cumulative_paid),
                )
            )
        return rows
