import logging
from typing import Iterable, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rent_ledger.models.charge import Charge, ChargeType

logger = logging.getLogger(__name__)


class ChargeRepository:
    """Repository for Charge data access"""

    def __init__(self, db: Session):
        self.db = db

    def create_if_absent(self, charge: Charge) -> Optional[Charge]:
        """
        Insert a charge unless its uniqueness key is already taken.

        The partial unique indexes on charges decide what "already taken"
        means, so this is safe against concurrent writers that both passed
        an existence check.

        Returns:
            The created charge, or None if an equivalent charge exists

        Raises:
            IntegrityError: If the insert fails for any other constraint
        """
        tenant_id, charge_month, charge_type = charge.tenant_id, charge.charge_month, charge.type
        self.db.add(charge)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            # Only a row holding the same uniqueness key counts as a duplicate
            if self._find_conflicting(tenant_id, charge_month, charge_type) is None:
                raise
            logger.debug(
                "Charge already exists: tenant=%s month=%s type=%s",
                tenant_id,
                charge_month,
                charge_type,
            )
            return None
        self.db.refresh(charge)
        return charge

    def _find_conflicting(
        self, tenant_id: int, charge_month: str, charge_type: ChargeType
    ) -> Optional[Charge]:
        """Existing charge that shares the uniqueness key, if the type has one"""
        if charge_type == ChargeType.RENT:
            return self.find(tenant_id, charge_month, ChargeType.RENT)
        if charge_type == ChargeType.OPENING_BALANCE:
            return (
                self.db.query(Charge)
                .filter(Charge.tenant_id == tenant_id, Charge.type == ChargeType.OPENING_BALANCE)
                .first()
            )
        return None

    def find(self, tenant_id: int, charge_month: str, charge_type: ChargeType) -> Optional[Charge]:
        """Find a charge by tenant, month and type"""
        return (
            self.db.query(Charge)
            .filter(
                Charge.tenant_id == tenant_id,
                Charge.charge_month == charge_month,
                Charge.type == charge_type,
            )
            .first()
        )

    def get_by_tenant(
        self, tenant_id: int, through_month: Optional[str] = None
    ) -> list[Charge]:
        """
        Get a tenant's charges, oldest month first.

        Args:
            tenant_id: Tenant ID
            through_month: Optional inclusive YYYY-MM upper bound
        """
        query = self.db.query(Charge).filter(Charge.tenant_id == tenant_id)
        if through_month is not None:
            query = query.filter(Charge.charge_month <= through_month)
        return query.order_by(Charge.charge_month, Charge.id).all()

    def tenant_ids_with_charges(self, tenant_ids: Iterable[int]) -> set[int]:
        """Subset of tenant_ids that have at least one charge"""
        tenant_ids = list(tenant_ids)
        if not tenant_ids:
            return set()
        rows = (
            self.db.query(Charge.tenant_id)
            .filter(Charge.tenant_id.in_(tenant_ids))
            .distinct()
            .all()
        )
        return {row.tenant_id for row in rows}

    def get_tenant_total(self, tenant_id: int, through_month: Optional[str] = None) -> float:
        """Sum of a tenant's charges up to and including a month"""
        query = self.db.query(func.sum(Charge.amount)).filter(Charge.tenant_id == tenant_id)
        if through_month is not None:
            query = query.filter(Charge.charge_month <= through_month)
        result = query.scalar()
        return float(result) if result is not None else 0.0
