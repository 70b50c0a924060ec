from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rent_ledger.core.months import month_key
from rent_ledger.database import get_db
from rent_ledger.dependencies import get_as_of, get_current_user, get_target_month
from rent_ledger.models.user import User
from rent_ledger.services.balance_service import BalanceService
from rent_ledger.services.tenant_service import TenantService
from rent_ledger.schemas.tenant_schemas import (
    TenantCreate,
    TenantUpdate,
    TenantResponse,
    TenantListResponse,
    TenantBalanceResponse,
    StatementRowResponse,
    TenantStatementResponse,
)

router = APIRouter()


@router.post("/", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(
    tenant_data: TenantCreate,
    as_of: date = Depends(get_as_of),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Onboard a tenant into a vacant unit.

    - Creates the opening-balance charge if there are arrears
    - Bills rent from the lease month through the current month
    - Prorated leases must supply first_month_override
    """
    service = TenantService(db)
    return service.create_tenant(tenant_data, current_user, as_of)


@router.get("/", response_model=TenantListResponse)
def list_tenants(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    service = TenantService(db)
    tenants = service.get_user_tenants(current_user)
    return TenantListResponse(tenants=tenants, total=len(tenants))


@router.get("/{tenant_id}", response_model=TenantResponse)
def get_tenant(
    tenant_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = TenantService(db)
    return service.get_tenant(tenant_id, current_user)


@router.patch("/{tenant_id}", response_model=TenantResponse)
def update_tenant(
    tenant_id: int,
    tenant_data: TenantUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update tenant details.

    - Moving to another unit requires that unit to be vacant
    - Lease parameters are fixed after onboarding
    """
    service = TenantService(db)
    return service.update_tenant(tenant_id, tenant_data, current_user)


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tenant(
    tenant_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = TenantService(db)
    service.delete_tenant(tenant_id, current_user)


@router.get("/{tenant_id}/balance", response_model=TenantBalanceResponse)
def get_tenant_balance(
    tenant_id: int,
    target_month: date = Depends(get_target_month),
    source: Optional[str] = Query(None, description="formula or ledger"),
    as_of: date = Depends(get_as_of),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Balance and payment status for a viewed month.

    - Positive balance is arrears, negative is credit
    - Payments after the viewed month are ignored
    """
    service = BalanceService(db)
    summary = service.get_tenant_balance(tenant_id, current_user, target_month, source, as_of)
    return TenantBalanceResponse(
        tenant_id=tenant_id,
        target_month=summary.target_month,
        monthly_rent=summary.monthly_rent,
        expected=summary.expected,
        total_paid=summary.total_paid,
        balance=summary.balance,
        status=summary.status,
        paid_this_period=summary.paid_this_period,
        not_yet_due=summary.not_yet_due,
        source=summary.source,
    )


@router.get("/{tenant_id}/statement", response_model=TenantStatementResponse)
def get_tenant_statement(
    tenant_id: int,
    through_month: date = Depends(get_target_month),
    as_of: date = Depends(get_as_of),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = BalanceService(db)
    rows = service.monthly_statement(tenant_id, current_user, through_month, as_of)
    return TenantStatementResponse(
        tenant_id=tenant_id,
        through_month=month_key(through_month),
        rows=[StatementRowResponse(**vars(row)) for row in rows],
        closing_balance=rows[-1].balance if rows else 0,
    )
