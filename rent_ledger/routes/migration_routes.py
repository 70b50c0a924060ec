from datetime import date
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rent_ledger.database import get_db
from rent_ledger.dependencies import get_as_of, get_current_user
from rent_ledger.models.user import User
from rent_ledger.models.user_migration import MigrationStatus
from rent_ledger.services.migration_service import MigrationService, TenantMigrationResult
from rent_ledger.schemas.migration_schemas import (
    AutoMigrationResponse,
    MigrationRunResponse,
    MigrationStateResponse,
    TenantMigrationResultResponse,
)

router = APIRouter()


def _state_response(service: MigrationService, state) -> MigrationStateResponse:
    if state is None:
        return MigrationStateResponse(
            migration_key=service.migration_key, status=MigrationStatus.PENDING
        )
    return MigrationStateResponse(
        migration_key=state.migration_key,
        status=state.status,
        started_at=state.started_at,
        completed_at=state.completed_at,
        last_error=state.last_error,
    )


def _result_responses(results: list[TenantMigrationResult]) -> list[TenantMigrationResultResponse]:
    return [TenantMigrationResultResponse(**vars(r)) for r in results]


@router.get("/charges", response_model=MigrationStateResponse)
def get_migration_state(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Migration state for the account; pending when it never ran"""
    service = MigrationService(db)
    return _state_response(service, service.get_state(current_user))


@router.post("/charges/auto", response_model=AutoMigrationResponse)
def auto_migrate(
    as_of: date = Depends(get_as_of),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Migrate the account once if it still needs it.

    - Completed, failed and running states are returned without work
    - A failed run stays failed until an operator resets it
    """
    service = MigrationService(db)
    outcome = service.auto_migrate(current_user, as_of)
    return AutoMigrationResponse(
        state=_state_response(service, outcome.state),
        ran=outcome.ran,
        results=_result_responses(outcome.results),
    )


@router.post("/charges/run", response_model=MigrationRunResponse)
def run_migration(
    as_of: date = Depends(get_as_of),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Re-run the migration manually.

    - Safe to repeat: existing charges and allocations are skipped
    - Does not change the stored migration state
    """
    service = MigrationService(db)
    results = service.run_migration(current_user, as_of)
    return MigrationRunResponse(
        results=_result_responses(results),
        tenants_migrated=len(results),
        total_charges_created=sum(
            r.rent_charges_created + (1 if r.opening_balance_charge_id else 0) for r in results
        ),
        total_payments_allocated=sum(r.payments_allocated for r in results),
        total_errors=sum(len(r.errors) for r in results),
    )


@router.delete("/charges", status_code=status.HTTP_204_NO_CONTENT)
def reset_migration(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Forget the migration state so the automatic check runs again"""
    service = MigrationService(db)
    service.reset_migration(current_user)
