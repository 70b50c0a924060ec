from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from rent_ledger.models.payment import Payment, PaymentAllocation


class PaymentRepository:
    """Repository for Payment and PaymentAllocation data access"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, payment: Payment) -> Payment:
        """Create a new payment"""
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        return payment

    def create_no_commit(self, payment: Payment) -> Payment:
        """Create payment without committing (caller commits with its allocations)"""
        self.db.add(payment)
        self.db.flush()
        return payment

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        return self.db.query(Payment).filter(Payment.id == payment_id).first()

    def get_by_tenant(
        self, tenant_id: int, through_month: Optional[str] = None
    ) -> list[Payment]:
        """
        Get a tenant's payments ordered by payment_month ascending.

        Args:
            tenant_id: Tenant ID
            through_month: Optional inclusive YYYY-MM upper bound. Balance
                computation must never see payments from later months.
        """
        query = self.db.query(Payment).filter(Payment.tenant_id == tenant_id)
        if through_month is not None:
            query = query.filter(Payment.payment_month <= through_month)
        return query.order_by(Payment.payment_month, Payment.payment_date, Payment.id).all()

    # Allocations

    def get_allocations(self, payment_id: int) -> list[PaymentAllocation]:
        return (
            self.db.query(PaymentAllocation)
            .filter(PaymentAllocation.payment_id == payment_id)
            .order_by(PaymentAllocation.applied_month, PaymentAllocation.id)
            .all()
        )

    def has_allocations(self, payment_id: int) -> bool:
        return (
            self.db.query(PaymentAllocation.id)
            .filter(PaymentAllocation.payment_id == payment_id)
            .limit(1)
            .first()
            is not None
        )

    def get_tenant_allocations(
        self, tenant_id: int, through_month: Optional[str] = None
    ) -> list[PaymentAllocation]:
        """All allocations of a tenant's payments, joined through Payment"""
        query = (
            self.db.query(PaymentAllocation)
            .join(Payment)
            .filter(Payment.tenant_id == tenant_id)
        )
        if through_month is not None:
            query = query.filter(PaymentAllocation.applied_month <= through_month)
        return query.order_by(PaymentAllocation.applied_month, PaymentAllocation.id).all()

    def get_tenant_allocated_total(
        self, tenant_id: int, through_month: Optional[str] = None
    ) -> float:
        query = (
            self.db.query(func.sum(PaymentAllocation.amount))
            .join(Payment)
            .filter(Payment.tenant_id == tenant_id)
        )
        if through_month is not None:
            query = query.filter(PaymentAllocation.applied_month <= through_month)
        result = query.scalar()
        return float(result) if result is not None else 0.0

    def create_allocations_no_commit(
        self, allocations: list[PaymentAllocation]
    ) -> list[PaymentAllocation]:
        """
        Create allocations without committing.
        Caller responsible for commit. Enables atomic payment + allocations.
        """
        self.db.add_all(allocations)
        self.db.flush()
        return allocations

    def commit(self) -> None:
        self.db.commit()
