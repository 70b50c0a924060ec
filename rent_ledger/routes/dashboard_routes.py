from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rent_ledger.database import get_db
from rent_ledger.dependencies import get_as_of, get_current_user, get_target_month
from rent_ledger.models.user import User
from rent_ledger.services.dashboard_service import DashboardService
from rent_ledger.schemas.dashboard_schemas import DashboardResponse

router = APIRouter()


@router.get("/", response_model=DashboardResponse)
def get_dashboard(
    target_month: date = Depends(get_target_month),
    source: Optional[str] = Query(None, description="formula or ledger"),
    as_of: date = Depends(get_as_of),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Units with tenant balances and account totals for a month.

    - Vacant units are listed as unpaid with zero amounts
    - Arrears total counts positive balances only
    """
    service = DashboardService(db)
    return service.get_dashboard(current_user, target_month, source, as_of)
