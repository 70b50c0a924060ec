from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional
from rent_ledger.core.months import MONTH_KEY_PATTERN
from rent_ledger.models.charge import ChargeType

MONTH_FIELD = MONTH_KEY_PATTERN.pattern


class ChargeCreate(BaseModel):
    """Schema for creating a charge"""

    tenant_id: int = Field(..., gt=0)
    amount: float = Field(..., ge=0)
    charge_month: str = Field(..., pattern=MONTH_FIELD, description="YYYY-MM")
    type: ChargeType = ChargeType.OTHER
    note: Optional[str] = Field(None, max_length=1000)


class OpeningBalanceChargeCreate(BaseModel):
    """Schema for creating a tenant's opening-balance charge"""

    tenant_id: int = Field(..., gt=0)
    amount: float = Field(..., gt=0)
    effective_month: str = Field(..., pattern=MONTH_FIELD, description="YYYY-MM")
    note: Optional[str] = Field(None, max_length=1000)


class ChargeResponse(BaseModel):
    """Schema for charge response"""

    model_config = {"from_attributes": True}

    id: int
    tenant_id: int
    amount: float
    charge_month: str
    type: ChargeType
    note: Optional[str]
    created_at: datetime


class ChargeListResponse(BaseModel):
    """Schema for list of charges"""

    charges: list[ChargeResponse]
    total: int
    total_amount: float


class BillingResponse(BaseModel):
    """Result of billing one month across the account"""

    month: str
    charges_created: int
    already_billed: int
    errors: list[str]
