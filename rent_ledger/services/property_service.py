from sqlalchemy.orm import Session
from rent_ledger.models.property import Property, Unit
from rent_ledger.models.user import User
from rent_ledger.repositories.property_repository import PropertyRepository
from rent_ledger.schemas.property_schemas import PropertyCreate, UnitCreate
from rent_ledger.core.exceptions import NotFoundException, ValidationException


class PropertyService:
    """Service for property and unit business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PropertyRepository(db)

    def create_property(self, data: PropertyCreate, user: User) -> Property:
        """Create new property for user"""
        return self.repo.create(Property(user_id=user.id, name=data.name, address=data.address))

    def get_user_properties(self, user: User) -> list[Property]:
        """Get all properties for user"""
        return self.repo.get_by_user(user.id)

    def get_property(self, property_id: int, user: User) -> Property:
        """
        Get specific property ensuring user ownership.

        Raises:
            NotFoundException: If property not found or belongs to another user
        """
        property_ = self.repo.get_by_id_and_user(property_id, user.id)
        if not property_:
            raise NotFoundException("Property not found")
        return property_

    def delete_property(self, property_id: int, user: User) -> None:
        """Delete property with its units, tenants and ledgers (cascade)"""
        property_ = self.get_property(property_id, user)
        self.repo.delete(property_)

    def create_unit(self, property_id: int, data: UnitCreate, user: User) -> Unit:
        """
        Add a unit to a property.

        Raises:
            ValidationException: If the unit number is already used in the property
        """
        property_ = self.get_property(property_id, user)
        existing = self.repo.get_units_by_property(property_.id)
        if any(u.unit_number == data.unit_number for u in existing):
            raise ValidationException(
                f"Unit {data.unit_number} already exists in property {property_.name}"
            )
        return self.repo.create_unit(Unit(property_id=property_.id, unit_number=data.unit_number))

    def get_units(self, property_id: int, user: User) -> list[Unit]:
        property_ = self.get_property(property_id, user)
        return self.repo.get_units_by_property(property_.id)
