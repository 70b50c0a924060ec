from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rent_ledger.core.months import MONTH_KEY_PATTERN
from rent_ledger.database import get_db
from rent_ledger.dependencies import get_current_user
from rent_ledger.models.user import User
from rent_ledger.services.charge_service import ChargeService
from rent_ledger.schemas.charge_schemas import (
    ChargeCreate,
    OpeningBalanceChargeCreate,
    ChargeResponse,
    ChargeListResponse,
    BillingResponse,
)

router = APIRouter()


@router.post("/", response_model=ChargeResponse, status_code=status.HTTP_201_CREATED)
def create_charge(
    charge_data: ChargeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a charge for a tenant.

    - At most one rent charge per tenant and month (409 on duplicate)
    - At most one opening-balance charge per tenant
    """
    service = ChargeService(db)
    return service.create_charge(charge_data, current_user)


@router.post(
    "/opening-balance", response_model=ChargeResponse, status_code=status.HTTP_201_CREATED
)
def create_opening_balance_charge(
    charge_data: OpeningBalanceChargeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = ChargeService(db)
    return service.create_opening_balance(charge_data, current_user)


@router.post("/billing", response_model=BillingResponse)
def bill_month(
    month: str = Query(..., pattern=MONTH_KEY_PATTERN.pattern, description="Month to bill, YYYY-MM"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Bill rent for one month across all tenants.

    - Tenants already billed for the month are counted, not billed again
    - Tenants whose lease starts later are skipped
    """
    service = ChargeService(db)
    result = service.bill_month(current_user, month)
    return BillingResponse(
        month=result.month,
        charges_created=result.charges_created,
        already_billed=result.already_billed,
        errors=result.errors,
    )


@router.get("/", response_model=ChargeListResponse)
def list_charges(
    tenant_id: int = Query(..., description="Tenant ID"),
    through_month: Optional[str] = Query(
        None, pattern=MONTH_KEY_PATTERN.pattern, description="Inclusive upper bound, YYYY-MM"
    ),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List a tenant's charges, oldest month first"""
    service = ChargeService(db)
    charges = service.list_charges(current_user, tenant_id, through_month)
    return ChargeListResponse(
        charges=charges,
        total=len(charges),
        total_amount=sum(float(c.amount) for c in charges),
    )
