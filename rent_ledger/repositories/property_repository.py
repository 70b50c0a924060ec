from sqlalchemy.orm import Session
from rent_ledger.models.property import Property, Unit


class PropertyRepository:
    """Repository for Property and Unit operations, scoped to the owning user"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: int) -> list[Property]:
        """Get all properties for a user"""
        return (
            self.db.query(Property)
            .filter(Property.user_id == user_id)
            .order_by(Property.name)
            .all()
        )

    def get_by_id_and_user(self, property_id: int, user_id: int) -> Property | None:
        """
        Get property ensuring it belongs to user.

        Returns None if property doesn't exist or belongs to another user.
        """
        return (
            self.db.query(Property)
            .filter(Property.id == property_id, Property.user_id == user_id)
            .first()
        )

    def create(self, property_: Property) -> Property:
        """Create new property"""
        self.db.add(property_)
        self.db.commit()
        self.db.refresh(property_)
        return property_

    def delete(self, property_: Property) -> None:
        """Delete property (cascades to units, tenants and their ledgers)"""
        self.db.delete(property_)
        self.db.commit()

    def get_units_by_user(self, user_id: int) -> list[Unit]:
        """Get all units across the user's properties, ordered for display"""
        return (
            self.db.query(Unit)
            .join(Property)
            .filter(Property.user_id == user_id)
            .order_by(Property.name, Unit.unit_number)
            .all()
        )

    def get_units_by_property(self, property_id: int) -> list[Unit]:
        return (
            self.db.query(Unit)
            .filter(Unit.property_id == property_id)
            .order_by(Unit.unit_number)
            .all()
        )

    def get_unit_by_id_and_user(self, unit_id: int, user_id: int) -> Unit | None:
        """Get unit ensuring its property belongs to user"""
        return (
            self.db.query(Unit)
            .join(Property)
            .filter(Unit.id == unit_id, Property.user_id == user_id)
            .first()
        )

    def create_unit(self, unit: Unit) -> Unit:
        """
        Create new unit.

        Raises:
            IntegrityError: If the unit number already exists in the property
        """
        self.db.add(unit)
        self.db.commit()
        self.db.refresh(unit)
        return unit
