import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rent_ledger.core.exceptions import DuplicateChargeException, NotFoundException
from rent_ledger.core.months import iter_month_keys, month_key
from rent_ledger.models.charge import Charge, ChargeType
from rent_ledger.models.tenant import Tenant
from rent_ledger.models.user import User
from rent_ledger.repositories.charge_repository import ChargeRepository
from rent_ledger.repositories.tenant_repository import TenantRepository
from rent_ledger.schemas.charge_schemas import ChargeCreate, OpeningBalanceChargeCreate

logger = logging.getLogger(__name__)


def rent_charge_amount(tenant: Tenant, is_first_month: bool) -> float:
    """Ledger amount for one rent month: the override applies to the lease month only"""
    if is_first_month and tenant.first_month_override is not None:
        return float(tenant.first_month_override)
    return float(tenant.rent_amount or 0)


def opening_balance_month(tenant: Tenant, as_of: date) -> str:
    """Month an opening balance is billed in: the lease month, else as_of's month"""
    return month_key(tenant.lease_start or as_of)


@dataclass
class BillingResult:
    """Outcome of billing rent for one month across an account"""

    month: str
    charges_created: int = 0
    already_billed: int = 0
    errors: list[str] = field(default_factory=list)


class ChargeService:
    """Service layer for the charge ledger"""

    def __init__(self, db: Session):
        self.db = db
        self.charge_repo = ChargeRepository(db)
        self.tenant_repo = TenantRepository(db)

    # Ledger primitives, no ownership checks

    def create_opening_balance_charge(
        self,
        tenant_id: int,
        amount: float,
        effective_month: str,
        note: Optional[str] = None,
    ) -> Charge:
        """
        Create the tenant's single opening-balance charge.

        Raises:
            DuplicateChargeException: If the tenant already has one
        """
        charge = Charge(
            tenant_id=tenant_id,
            amount=amount,
            charge_month=effective_month,
            type=ChargeType.OPENING_BALANCE,
            note=note,
        )
        created = self.charge_repo.create_if_absent(charge)
        if created is None:
            raise DuplicateChargeException(tenant_id, ChargeType.OPENING_BALANCE.value)
        logger.info(
            "Opening balance charge created: tenant=%s month=%s amount=%s",
            tenant_id,
            effective_month,
            amount,
        )
        return created

    def create_ledger_charge(
        self,
        tenant_id: int,
        amount: float,
        charge_month: str,
        charge_type: ChargeType,
        note: Optional[str] = None,
    ) -> Charge:
        """
        Create a charge.

        Raises:
            DuplicateChargeException: If a rent charge already exists for the
                month, or an opening-balance charge already exists
        """
        charge = Charge(
            tenant_id=tenant_id,
            amount=amount,
            charge_month=charge_month,
            type=charge_type,
            note=note,
        )
        created = self.charge_repo.create_if_absent(charge)
        if created is None:
            raise DuplicateChargeException(tenant_id, charge_type.value, charge_month)
        return created

    def find_charge(
        self, tenant_id: int, charge_month: str, charge_type: ChargeType
    ) -> Optional[Charge]:
        return self.charge_repo.find(tenant_id, charge_month, charge_type)

    def bill_rent_month(
        self, tenant: Tenant, charge_month: str, note: Optional[str] = None
    ) -> Optional[Charge]:
        """
        Idempotently create the rent charge for one month.

        Returns:
            The new charge, or None if the month was already billed
        """
        if self.find_charge(tenant.id, charge_month, ChargeType.RENT) is not None:
            return None

        is_first_month = tenant.lease_start is not None and charge_month == month_key(
            tenant.lease_start
        )
        if note is None:
            note = "First month rent" if is_first_month else "Monthly rent"

        charge = Charge(
            tenant_id=tenant.id,
            amount=rent_charge_amount(tenant, is_first_month),
            charge_month=charge_month,
            type=ChargeType.RENT,
            note=note,
        )
        # A concurrent writer may still win between the lookup and the insert
        return self.charge_repo.create_if_absent(charge)

    def generate_rent_charges(self, tenant: Tenant, as_of: date) -> list[Charge]:
        """
        Bill every month from the lease month through as_of's month.

        Months that are already billed are skipped.
        """
        if tenant.lease_start is None:
            return []

        created = []
        for charge_month in iter_month_keys(tenant.lease_start, as_of):
            charge = self.bill_rent_month(tenant, charge_month)
            if charge is not None:
                created.append(charge)
        return created

    def onboard_tenant_charges(self, tenant: Tenant, as_of: date) -> list[Charge]:
        """
        Create opening-balance and rent charges for a newly added tenant.

        Failures are logged and do not undo the tenant; the migration can
        fill gaps later.
        """
        created = []
        if tenant.opening_balance and float(tenant.opening_balance) > 0:
            try:
                created.append(
                    self.create_opening_balance_charge(
                        tenant.id,
                        float(tenant.opening_balance),
                        opening_balance_month(tenant, as_of),
                        "Opening balance - arrears before lease start",
                    )
                )
            except DuplicateChargeException:
                pass
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception("Failed to create opening balance charge for tenant %s", tenant.id)

        if tenant.rent_amount:
            try:
                created.extend(self.generate_rent_charges(tenant, as_of))
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception("Failed to create rent charges for tenant %s", tenant.id)

        return created

    def bill_month(self, user: User, charge_month: str) -> BillingResult:
        """
        Bill rent for one month across all of the user's tenants.

        Tenants without a lease start, or whose lease starts after the
        month, are not billed. Safe to call repeatedly.
        """
        result = BillingResult(month=charge_month)
        for tenant in self.tenant_repo.get_by_user(user.id):
            if tenant.lease_start is None or month_key(tenant.lease_start) > charge_month:
                continue
            try:
                charge = self.bill_rent_month(tenant, charge_month)
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.warning("Billing %s failed for tenant %s: %s", charge_month, tenant.id, e)
                result.errors.append(f"Tenant {tenant.id}: {e}")
                continue
            if charge is None:
                result.already_billed += 1
            else:
                result.charges_created += 1

        logger.info(
            "Billed %s for user %s: created=%s already_billed=%s",
            charge_month,
            user.id,
            result.charges_created,
            result.already_billed,
        )
        return result

    # User-facing operations

    def _get_tenant(self, tenant_id: int, user: User) -> Tenant:
        tenant = self.tenant_repo.get_by_id_and_user(tenant_id, user.id)
        if not tenant:
            raise NotFoundException(f"Tenant {tenant_id} not found or access denied")
        return tenant

    def create_charge(self, data: ChargeCreate, user: User) -> Charge:
        """
        Create a charge for one of the user's tenants.

        Raises:
            NotFoundException: If the tenant doesn't belong to the user
            DuplicateChargeException: If the uniqueness key is taken
        """
        tenant = self._get_tenant(data.tenant_id, user)
        return self.create_ledger_charge(
            tenant.id, data.amount, data.charge_month, data.type, data.note
        )

    def create_opening_balance(self, data: OpeningBalanceChargeCreate, user: User) -> Charge:
        tenant = self._get_tenant(data.tenant_id, user)
        return self.create_opening_balance_charge(
            tenant.id, data.amount, data.effective_month, data.note
        )

    def list_charges(
        self, user: User, tenant_id: int, through_month: Optional[str] = None
    ) -> list[Charge]:
        tenant = self._get_tenant(tenant_id, user)
        return self.charge_repo.get_by_tenant(tenant.id, through_month)
