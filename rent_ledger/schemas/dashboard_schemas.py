from pydantic import BaseModel
from typing import Optional
from rent_ledger.services.balance import PaymentStatus


class DashboardUnitResponse(BaseModel):
    """One unit on the dashboard; tenant fields are null for vacant units"""

    unit_id: int
    unit_number: str
    property_id: int
    property_name: str
    tenant_id: Optional[int]
    tenant_name: Optional[str]
    tenant_phone: Optional[str]
    rent_amount: Optional[float]
    payment_status: PaymentStatus
    expected: int
    paid: int
    balance: int
    paid_this_period: int


class DashboardStats(BaseModel):
    total_units: int
    occupied_units: int
    vacant_units: int
    total_expected: int
    total_paid: int
    total_arrears: int
    total_deposits: int
    collected_this_period: int


class DashboardResponse(BaseModel):
    month: str
    source: str
    units: list[DashboardUnitResponse]
    stats: DashboardStats
