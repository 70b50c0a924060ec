from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from rent_ledger.services.balance import PaymentStatus


class TenantCreate(BaseModel):
    """
    Schema for onboarding a tenant.

    A prorated lease needs the landlord-entered first month figure, which
    becomes both the first rent charge and the first accrual month.
    """

    unit_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    rent_amount: float = Field(..., ge=0)
    lease_start: Optional[date] = None
    opening_balance: float = Field(default=0, ge=0)
    is_prorated: bool = False
    first_month_override: Optional[float] = Field(None, ge=0)
    security_deposit: float = Field(default=0, ge=0)

    @model_validator(mode="after")
    def prorated_needs_first_month(self) -> "TenantCreate":
        if self.is_prorated and self.first_month_override is None:
            raise ValueError("first_month_override is required when is_prorated is set")
        return self


class TenantUpdate(BaseModel):
    """Schema for updating a tenant (partial)"""

    unit_id: Optional[int] = Field(None, gt=0)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    rent_amount: Optional[float] = Field(None, ge=0)
    security_deposit: Optional[float] = Field(None, ge=0)


class TenantResponse(BaseModel):
    """Schema for tenant response"""

    model_config = {"from_attributes": True}

    id: int
    unit_id: int
    name: str
    phone: Optional[str]
    rent_amount: float
    lease_start: Optional[date]
    opening_balance: float
    is_prorated: bool
    first_month_override: Optional[float]
    security_deposit: float
    created_at: datetime
    updated_at: datetime


class TenantListResponse(BaseModel):
    tenants: list[TenantResponse]
    total: int


class TenantBalanceResponse(BaseModel):
    """Balance and status of a tenant for a viewed month"""

    tenant_id: int
    target_month: str
    monthly_rent: float
    expected: int
    total_paid: int
    balance: int
    status: PaymentStatus
    paid_this_period: int
    not_yet_due: bool
    source: str


class StatementRowResponse(BaseModel):
    month: str
    charged: int
    paid: int
    balance: int


class TenantStatementResponse(BaseModel):
    """Month-by-month statement from lease start"""

    tenant_id: int
    through_month: str
    rows: list[StatementRowResponse]
    closing_balance: int
