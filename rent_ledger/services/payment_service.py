import logging
from typing import Optional
from sqlalchemy.orm import Session

from rent_ledger.core.exceptions import ConflictException, NotFoundException, ValidationException
from rent_ledger.core.months import month_key
from rent_ledger.models.payment import Payment, PaymentAllocation
from rent_ledger.models.user import User
from rent_ledger.repositories.payment_repository import PaymentRepository
from rent_ledger.repositories.tenant_repository import TenantRepository
from rent_ledger.schemas.payment_schemas import PaymentCreate
from rent_ledger.services.allocation_service import AllocationResult, AllocationService

logger = logging.getLogger(__name__)


class PaymentService:
    """Service layer for the payment ledger"""

    def __init__(self, db: Session):
        self.db = db
        self.payment_repo = PaymentRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.allocation_service = AllocationService(db)

    def record_payment(self, payment_data: PaymentCreate, user: User) -> Payment:
        """
        Record a payment and allocate it.

        Caller-supplied allocations are stored as given (their total may not
        exceed the payment); otherwise smart allocation applies the payment
        to the oldest outstanding months.

        Args:
            payment_data: Payment details
            user: Current user (for ownership verification)

        Returns:
            Created payment with its allocations

        Raises:
            NotFoundException: If the tenant doesn't belong to the user
            ValidationException: If allocations exceed the payment amount
        """
        tenant = self.tenant_repo.get_by_id_and_user(payment_data.tenant_id, user.id)
        if not tenant:
            raise NotFoundException(
                f"Tenant {payment_data.tenant_id} not found or access denied"
            )

        if payment_data.allocations:
            allocated = sum(a.amount for a in payment_data.allocations)
            if round(allocated, 2) > round(payment_data.amount, 2):
                raise ValidationException(
                    f"Allocations total {allocated} exceeds payment amount {payment_data.amount}"
                )

        payment = Payment(
            tenant_id=tenant.id,
            amount=payment_data.amount,
            payment_date=payment_data.payment_date,
            payment_month=payment_data.payment_month or month_key(payment_data.payment_date),
            mpesa_code=payment_data.mpesa_code,
            note=payment_data.note,
        )

        if payment_data.allocations:
            # Payment and its allocations commit together
            payment = self.payment_repo.create_no_commit(payment)
            self.payment_repo.create_allocations_no_commit(
                [
                    PaymentAllocation(
                        payment_id=payment.id,
                        amount=a.amount,
                        applied_month=a.applied_month,
                    )
                    for a in payment_data.allocations
                ]
            )
            self.payment_repo.commit()
        else:
            payment = self.payment_repo.create(payment)
            self.allocation_service.allocate_payment(payment)

        self.db.refresh(payment)
        logger.info(
            "Payment recorded: id=%s tenant=%s amount=%s month=%s",
            payment.id,
            tenant.id,
            payment_data.amount,
            payment.payment_month,
        )
        return payment

    def get_payment(self, payment_id: int, user: User) -> Payment:
        """
        Get payment by ID with ownership verification.

        Raises:
            NotFoundException: If payment doesn't exist or doesn't belong to user
        """
        payment = self.payment_repo.get_by_id(payment_id)
        if not payment or not self.tenant_repo.get_by_id_and_user(payment.tenant_id, user.id):
            raise NotFoundException(f"Payment {payment_id} not found")
        return payment

    def list_payments(
        self, user: User, tenant_id: int, through_month: Optional[str] = None
    ) -> list[Payment]:
        """List a tenant's payments ordered by payment_month ascending"""
        tenant = self.tenant_repo.get_by_id_and_user(tenant_id, user.id)
        if not tenant:
            raise NotFoundException(f"Tenant {tenant_id} not found or access denied")
        return self.payment_repo.get_by_tenant(tenant.id, through_month)

    def list_allocations(self, payment_id: int, user: User) -> list[PaymentAllocation]:
        payment = self.get_payment(payment_id, user)
        return self.payment_repo.get_allocations(payment.id)

    def allocate(self, payment_id: int, user: User) -> AllocationResult:
        """
        Run smart allocation on an unallocated payment.

        Raises:
            ConflictException: If the payment already has allocations
        """
        payment = self.get_payment(payment_id, user)
        result = self.allocation_service.allocate_payment(payment)
        if result.already_allocated:
            raise ConflictException(f"Payment {payment_id} is already allocated")
        return result
