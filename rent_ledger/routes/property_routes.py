from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rent_ledger.database import get_db
from rent_ledger.dependencies import get_current_user
from rent_ledger.models.user import User
from rent_ledger.services.property_service import PropertyService
from rent_ledger.schemas.property_schemas import (
    PropertyCreate,
    PropertyResponse,
    PropertyListResponse,
    UnitCreate,
    UnitResponse,
    UnitListResponse,
)

router = APIRouter()


@router.post("/", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new property for the authenticated landlord"""
    service = PropertyService(db)
    return service.create_property(property_data, current_user)


@router.get("/", response_model=PropertyListResponse)
def list_properties(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    service = PropertyService(db)
    properties = service.get_user_properties(current_user)
    return PropertyListResponse(properties=properties, total=len(properties))


@router.get("/{property_id}", response_model=PropertyResponse)
def get_property(
    property_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Get a specific property.

    Returns 404 if the property doesn't exist or belongs to another user.
    """
    service = PropertyService(db)
    return service.get_property(property_id, current_user)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(
    property_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Delete a property.

    - Cascades to units, tenants, charges, payments and allocations
    """
    service = PropertyService(db)
    service.delete_property(property_id, current_user)


@router.post(
    "/{property_id}/units", response_model=UnitResponse, status_code=status.HTTP_201_CREATED
)
def create_unit(
    property_id: int,
    unit_data: UnitCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Add a unit to a property.

    - Unit numbers are unique within a property
    """
    service = PropertyService(db)
    return service.create_unit(property_id, unit_data, current_user)


@router.get("/{property_id}/units", response_model=UnitListResponse)
def list_units(
    property_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = PropertyService(db)
    units = service.get_units(property_id, current_user)
    return UnitListResponse(units=units, total=len(units))
