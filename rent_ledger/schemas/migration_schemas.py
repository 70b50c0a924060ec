from datetime import datetime
from pydantic import BaseModel
from typing import Optional
from rent_ledger.models.user_migration import MigrationStatus


class MigrationStateResponse(BaseModel):
    """Persisted migration state; status is pending when no row exists"""

    migration_key: str
    status: MigrationStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    last_error: Optional[str] = None


class TenantMigrationResultResponse(BaseModel):
    tenant_id: int
    tenant_name: str
    opening_balance_charge_id: Optional[int]
    rent_charges_created: int
    payments_allocated: int
    errors: list[str]


class MigrationRunResponse(BaseModel):
    """Per-tenant results of a manual migration run"""

    results: list[TenantMigrationResultResponse]
    tenants_migrated: int
    total_charges_created: int
    total_payments_allocated: int
    total_errors: int


class AutoMigrationResponse(BaseModel):
    """State after an automatic check; ran is False when no work was started"""

    state: MigrationStateResponse
    ran: bool
    results: list[TenantMigrationResultResponse] = []
