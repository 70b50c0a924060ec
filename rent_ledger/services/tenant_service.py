import logging
from datetime import date
from sqlalchemy.orm import Session

from rent_ledger.core.exceptions import NotFoundException, ValidationException
from rent_ledger.models.tenant import Tenant
from rent_ledger.models.user import User
from rent_ledger.repositories.property_repository import PropertyRepository
from rent_ledger.repositories.tenant_repository import TenantRepository
from rent_ledger.schemas.tenant_schemas import TenantCreate, TenantUpdate
from rent_ledger.services.charge_service import ChargeService

logger = logging.getLogger(__name__)


class TenantService:
    """Service layer for tenant onboarding and maintenance"""

    def __init__(self, db: Session):
        self.db = db
        self.tenant_repo = TenantRepository(db)
        self.property_repo = PropertyRepository(db)
        self.charge_service = ChargeService(db)

    def _ensure_unit_available(self, unit_id: int, user: User, tenant_id: int | None = None) -> None:
        """
        Verify the unit belongs to the user and has no other occupant.

        Raises:
            NotFoundException: If the unit is missing or owned by another user
            ValidationException: If another tenant occupies the unit
        """
        unit = self.property_repo.get_unit_by_id_and_user(unit_id, user.id)
        if not unit:
            raise NotFoundException(f"Unit {unit_id} not found or access denied")

        occupant = self.tenant_repo.get_by_unit(unit_id)
        if occupant and occupant.id != tenant_id:
            raise ValidationException(f"Unit {unit.unit_number} is already occupied")

    def create_tenant(self, data: TenantCreate, user: User, as_of: date) -> Tenant:
        """
        Onboard a tenant and bill them through as_of's month.

        Creates the opening-balance charge and rent charges from the lease
        month. Charge failures are logged but do not fail onboarding.

        Args:
            data: Tenant details
            user: Current user
            as_of: Date treated as "now" for billing

        Returns:
            Created tenant
        """
        self._ensure_unit_available(data.unit_id, user)

        tenant = self.tenant_repo.create(
            Tenant(
                unit_id=data.unit_id,
                name=data.name,
                phone=data.phone,
                rent_amount=data.rent_amount,
                lease_start=data.lease_start,
                opening_balance=data.opening_balance,
                is_prorated=data.is_prorated,
                first_month_override=data.first_month_override,
                security_deposit=data.security_deposit,
            )
        )

        charges = self.charge_service.onboard_tenant_charges(tenant, as_of)
        logger.info("Tenant onboarded: id=%s charges_created=%s", tenant.id, len(charges))
        return tenant

    def get_user_tenants(self, user: User) -> list[Tenant]:
        return self.tenant_repo.get_by_user(user.id)

    def get_tenant(self, tenant_id: int, user: User) -> Tenant:
        """
        Get tenant with ownership verification.

        Raises:
            NotFoundException: If tenant doesn't exist or doesn't belong to user
        """
        tenant = self.tenant_repo.get_by_id_and_user(tenant_id, user.id)
        if not tenant:
            raise NotFoundException(f"Tenant {tenant_id} not found")
        return tenant

    def update_tenant(self, tenant_id: int, data: TenantUpdate, user: User) -> Tenant:
        """
        Update tenant details.

        Lease parameters (lease_start, opening balance, proration) are fixed
        once charges exist and are not editable here. A rent change applies
        to months billed from now on.
        """
        tenant = self.get_tenant(tenant_id, user)

        if data.unit_id is not None and data.unit_id != tenant.unit_id:
            self._ensure_unit_available(data.unit_id, user, tenant_id=tenant.id)
            tenant.unit_id = data.unit_id
        if data.name is not None:
            tenant.name = data.name
        if data.phone is not None:
            tenant.phone = data.phone
        if data.rent_amount is not None:
            tenant.rent_amount = data.rent_amount
        if data.security_deposit is not None:
            tenant.security_deposit = data.security_deposit

        return self.tenant_repo.update(tenant)

    def delete_tenant(self, tenant_id: int, user: User) -> None:
        """Delete tenant with its charges, payments and allocations (cascade)"""
        tenant = self.get_tenant(tenant_id, user)
        self.tenant_repo.delete(tenant)
        logger.info("Tenant deleted: id=%s", tenant_id)
