from datetime import date, datetime
from pydantic import BaseModel, Field
from typing import Optional
from rent_ledger.core.months import MONTH_KEY_PATTERN

MONTH_FIELD = MONTH_KEY_PATTERN.pattern


class AllocationInput(BaseModel):
    """Caller-chosen split of a payment onto a month"""

    applied_month: str = Field(..., pattern=MONTH_FIELD)
    amount: float = Field(..., gt=0)


class PaymentCreate(BaseModel):
    """
    Schema for recording a payment.

    payment_month defaults to the month of payment_date. Leave allocations
    empty to let smart allocation decide.
    """

    tenant_id: int = Field(..., gt=0)
    amount: float = Field(..., gt=0)
    payment_date: date
    payment_month: Optional[str] = Field(None, pattern=MONTH_FIELD)
    mpesa_code: Optional[str] = Field(None, max_length=50)
    note: Optional[str] = Field(None, max_length=1000)
    allocations: Optional[list[AllocationInput]] = None


class PaymentAllocationResponse(BaseModel):
    """Schema for allocation response"""

    model_config = {"from_attributes": True}

    id: int
    payment_id: int
    amount: float
    applied_month: str


class PaymentResponse(BaseModel):
    """Schema for payment response"""

    model_config = {"from_attributes": True}

    id: int
    tenant_id: int
    amount: float
    payment_date: date
    payment_month: str
    mpesa_code: Optional[str]
    note: Optional[str]
    allocations: list[PaymentAllocationResponse] = []
    created_at: datetime


class PaymentListResponse(BaseModel):
    """Schema for list of payments"""

    payments: list[PaymentResponse]
    total: int
    total_amount: float


class AllocationListResponse(BaseModel):
    allocations: list[PaymentAllocationResponse]
    total: int


class AllocationResultResponse(BaseModel):
    """Result of running smart allocation on a payment"""

    payment_id: int
    allocations: list[PaymentAllocationResponse]
    remaining_credit: float
