from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rent_ledger.core.months import MONTH_KEY_PATTERN
from rent_ledger.database import get_db
from rent_ledger.dependencies import get_current_user
from rent_ledger.models.user import User
from rent_ledger.services.payment_service import PaymentService
from rent_ledger.schemas.payment_schemas import (
    PaymentCreate,
    PaymentResponse,
    PaymentListResponse,
    AllocationListResponse,
    AllocationResultResponse,
)

router = APIRouter()


@router.post("/", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def record_payment(
    payment_data: PaymentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Record a tenant payment.

    - payment_month defaults to the month of payment_date
    - Explicit allocations may not exceed the payment amount
    - Without allocations the payment covers the oldest unpaid months first
    """
    service = PaymentService(db)
    return service.record_payment(payment_data, current_user)


@router.get("/", response_model=PaymentListResponse)
def list_payments(
    tenant_id: int = Query(..., description="Tenant ID"),
    through_month: Optional[str] = Query(
        None, pattern=MONTH_KEY_PATTERN.pattern, description="Inclusive upper bound, YYYY-MM"
    ),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = PaymentService(db)
    payments = service.list_payments(current_user, tenant_id, through_month)
    return PaymentListResponse(
        payments=payments,
        total=len(payments),
        total_amount=sum(float(p.amount) for p in payments),
    )


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = PaymentService(db)
    return service.get_payment(payment_id, current_user)


@router.get("/{payment_id}/allocations", response_model=AllocationListResponse)
def list_allocations(
    payment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = PaymentService(db)
    allocations = service.list_allocations(payment_id, current_user)
    return AllocationListResponse(allocations=allocations, total=len(allocations))


@router.post("/{payment_id}/allocate", response_model=AllocationResultResponse)
def allocate_payment(
    payment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Apply an unallocated payment to outstanding months.

    - Returns 409 if the payment already has allocations
    """
    service = PaymentService(db)
    result = service.allocate(payment_id, current_user)
    return AllocationResultResponse(
        payment_id=result.payment_id,
        allocations=result.allocations,
        remaining_credit=result.remaining_credit,
    )
