"""
Legacy migration.

Accounts created before the charge ledger existed have tenants and payments
but no charges or allocations. Migrating an account backfills the ledger
from each tenant's billing parameters so the ledger balance source agrees
with the formula. Every step is safe to repeat.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rent_ledger.config import settings
from rent_ledger.core.exceptions import (
    DuplicateChargeException,
    RentLedgerException,
    UnauthorizedException,
)
from rent_ledger.core.months import iter_month_keys, month_key
from rent_ledger.models.tenant import Tenant
from rent_ledger.models.user import User
from rent_ledger.models.user_migration import MigrationStatus, UserMigration
from rent_ledger.repositories.charge_repository import ChargeRepository
from rent_ledger.repositories.migration_repository import MigrationRepository
from rent_ledger.repositories.payment_repository import PaymentRepository
from rent_ledger.repositories.tenant_repository import TenantRepository
from rent_ledger.services.allocation_service import AllocationService
from rent_ledger.services.charge_service import ChargeService, opening_balance_month

logger = logging.getLogger(__name__)

OPENING_BALANCE_NOTE = "Opening balance - migrated from legacy system"
FIRST_MONTH_NOTE = "First month rent (migrated)"
MONTHLY_RENT_NOTE = "Monthly rent (migrated)"


@dataclass
class TenantMigrationResult:
    """Outcome of migrating one tenant; errors never abort the run"""

    tenant_id: int
    tenant_name: str
    opening_balance_charge_id: Optional[int] = None
    rent_charges_created: int = 0
    payments_allocated: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class AutoMigrationOutcome:
    state: UserMigration
    ran: bool
    results: list[TenantMigrationResult] = field(default_factory=list)


def summarize_errors(results: list[TenantMigrationResult]) -> Optional[str]:
    """Human-readable summary of per-tenant errors, or None if there were none"""
    failed = [r for r in results if r.errors]
    if not failed:
        return None
    parts = [f"{r.tenant_name} (#{r.tenant_id}): {'; '.join(r.errors)}" for r in failed]
    return f"{len(failed)} tenant(s) had errors: " + " | ".join(parts)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MigrationService:
    """Backfills charges and allocations for legacy accounts"""

    def __init__(self, db: Session, migration_key: Optional[str] = None):
        self.db = db
        self.migration_key = migration_key or settings.MIGRATION_KEY
        self.charge_service = ChargeService(db)
        self.allocation_service = AllocationService(db)
        self.charge_repo = ChargeRepository(db)
        self.payment_repo = PaymentRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.migration_repo = MigrationRepository(db)

    def migrate_tenant(self, tenant: Tenant, as_of: date) -> TenantMigrationResult:
        """
        Backfill one tenant: opening balance, then rent months through as_of,
        then allocations for payments that have none.

        Failures are recorded in the result. Counts from steps that finished
        before an unexpected error are kept.
        """
        result = TenantMigrationResult(tenant_id=tenant.id, tenant_name=tenant.name)
        try:
            self._migrate_tenant_steps(tenant, as_of, result)
        except Exception as e:
            self.db.rollback()
            logger.exception("Migration failed for tenant %s", result.tenant_id)
            result.errors.append(f"General error: {e}")
        return result

    def _migrate_tenant_steps(
        self, tenant: Tenant, as_of: date, result: TenantMigrationResult
    ) -> None:
        if tenant.opening_balance and float(tenant.opening_balance) > 0:
            try:
                charge = self.charge_service.create_opening_balance_charge(
                    tenant.id,
                    float(tenant.opening_balance),
                    opening_balance_month(tenant, as_of),
                    OPENING_BALANCE_NOTE,
                )
                result.opening_balance_charge_id = charge.id
            except DuplicateChargeException:
                logger.debug("Opening balance already migrated for tenant %s", tenant.id)
            except (SQLAlchemyError, RentLedgerException) as e:
                self.db.rollback()
                logger.warning("Opening balance failed for tenant %s: %s", tenant.id, e)
                result.errors.append(f"Opening balance: {e}")

        if tenant.lease_start is not None:
            first_month = month_key(tenant.lease_start)
            for charge_month in iter_month_keys(tenant.lease_start, as_of):
                note = FIRST_MONTH_NOTE if charge_month == first_month else MONTHLY_RENT_NOTE
                try:
                    charge = self.charge_service.bill_rent_month(tenant, charge_month, note)
                except SQLAlchemyError as e:
                    self.db.rollback()
                    logger.warning(
                        "Rent charge %s failed for tenant %s: %s", charge_month, tenant.id, e
                    )
                    result.errors.append(f"Rent {charge_month}: {e}")
                    continue
                if charge is not None:
                    result.rent_charges_created += 1

        for payment in self.payment_repo.get_by_tenant(tenant.id):
            try:
                allocation = self.allocation_service.allocate_payment(payment)
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.warning("Allocation failed for payment %s: %s", payment.id, e)
                result.errors.append(f"Payment {payment.id}: {e}")
                continue
            if not allocation.already_allocated:
                result.payments_allocated += 1

    def migrate_account(self, user: Optional[User], as_of: date) -> list[TenantMigrationResult]:
        """
        Migrate every tenant of an account.

        Raises:
            UnauthorizedException: If there is no user
        """
        if user is None:
            raise UnauthorizedException("Not authenticated")

        tenants = self.tenant_repo.get_by_user(user.id)
        if not tenants:
            return []

        logger.info("Migration started: user=%s tenants=%s", user.id, len(tenants))
        results = []
        for tenant in tenants:
            results.append(self.migrate_tenant(tenant, as_of))

        logger.info(
            "Migration finished: user=%s charges=%s allocations=%s errors=%s",
            user.id,
            sum(r.rent_charges_created + (1 if r.opening_balance_charge_id else 0) for r in results),
            sum(r.payments_allocated for r in results),
            sum(len(r.errors) for r in results),
        )
        return results

    def needs_migration(self, user: User) -> bool:
        """True if any tenant of the account has no charge rows yet"""
        tenant_ids = {t.id for t in self.tenant_repo.get_by_user(user.id)}
        if not tenant_ids:
            return False
        return bool(tenant_ids - self.charge_repo.tenant_ids_with_charges(tenant_ids))

    def get_state(self, user: User) -> Optional[UserMigration]:
        return self.migration_repo.get_state(user.id, self.migration_key)

    def auto_migrate(self, user: User, as_of: date) -> AutoMigrationOutcome:
        """
        Run the migration once per account.

        completed, failed and running states are returned unchanged. A
        pending or missing state either completes immediately (nothing to
        migrate) or runs the migration and records the outcome.
        """
        state = self.get_state(user)
        if state is not None and state.status != MigrationStatus.PENDING:
            return AutoMigrationOutcome(state=state, ran=False)

        if not self.needs_migration(user):
            now = _utcnow()
            state = self.migration_repo.upsert_state(
                user.id, self.migration_key, MigrationStatus.COMPLETED, started_at=now, completed_at=now
            )
            logger.info("Migration %s not needed for user %s", self.migration_key, user.id)
            return AutoMigrationOutcome(state=state, ran=False)

        self.migration_repo.upsert_state(
            user.id, self.migration_key, MigrationStatus.RUNNING, started_at=_utcnow()
        )
        logger.info("Migration %s running for user %s", self.migration_key, user.id)

        try:
            results = self.migrate_account(user, as_of)
        except Exception as e:
            self.db.rollback()
            self.migration_repo.upsert_state(
                user.id,
                self.migration_key,
                MigrationStatus.FAILED,
                completed_at=_utcnow(),
                last_error=str(e),
            )
            logger.error("Migration %s failed for user %s: %s", self.migration_key, user.id, e)
            raise

        error_summary = summarize_errors(results)
        status = MigrationStatus.FAILED if error_summary else MigrationStatus.COMPLETED
        state = self.migration_repo.upsert_state(
            user.id,
            self.migration_key,
            status,
            completed_at=_utcnow(),
            last_error=error_summary,
        )
        logger.info("Migration %s %s for user %s", self.migration_key, status.value, user.id)
        return AutoMigrationOutcome(state=state, ran=True, results=results)

    def run_migration(self, user: User, as_of: date) -> list[TenantMigrationResult]:
        """Manual re-run; leaves the persisted state alone"""
        return self.migrate_account(user, as_of)

    def reset_migration(self, user: User) -> bool:
        """Delete the state row so the automatic path evaluates again"""
        state = self.get_state(user)
        if state is None:
            return False
        self.migration_repo.delete_state(state)
        logger.info("Migration %s reset for user %s", self.migration_key, user.id)
        return True
