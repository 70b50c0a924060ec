"""Repository for Tenant model operations."""

from sqlalchemy.orm import Session
from rent_ledger.models.tenant import Tenant
from rent_ledger.models.property import Property, Unit


class TenantRepository:
    """
    Repository for Tenant model operations.

    Ownership is resolved through the unit -> property -> user chain.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_user(self, tenant_id: int, user_id: int) -> Tenant | None:
        """
        Get tenant ensuring it belongs to one of the user's properties.

        Args:
            tenant_id: Tenant ID
            user_id: Landlord user ID

        Returns:
            Tenant object or None if not found or owned by another user
        """
        return (
            self.db.query(Tenant)
            .join(Unit, Tenant.unit_id == Unit.id)
            .join(Property, Unit.property_id == Property.id)
            .filter(Tenant.id == tenant_id, Property.user_id == user_id)
            .first()
        )

    def get_by_user(self, user_id: int) -> list[Tenant]:
        """
        Get all tenants across the user's properties.

        Args:
            user_id: Landlord user ID

        Returns:
            Tenants ordered by name
        """
        return (
            self.db.query(Tenant)
            .join(Unit, Tenant.unit_id == Unit.id)
            .join(Property, Unit.property_id == Property.id)
            .filter(Property.user_id == user_id)
            .order_by(Tenant.name, Tenant.id)
            .all()
        )

    def get_by_unit(self, unit_id: int) -> Tenant | None:
        """Get the current occupant of a unit"""
        return self.db.query(Tenant).filter(Tenant.unit_id == unit_id).first()

    def create(self, tenant: Tenant) -> Tenant:
        """Create a new tenant"""
        self.db.add(tenant)
        self.db.commit()
        self.db.refresh(tenant)
        return tenant

    def update(self, tenant: Tenant) -> Tenant:
        """Update an existing tenant"""
        self.db.commit()
        self.db.refresh(tenant)
        return tenant

    def delete(self, tenant: Tenant) -> None:
        """
        Delete a tenant.

        Cascades to the tenant's charges, payments and allocations.
        """
        self.db.delete(tenant)
        self.db.commit()
