from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional


class PropertyCreate(BaseModel):
    """Schema for creating a property"""

    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=1000)


class PropertyResponse(BaseModel):
    """Schema for property response"""

    model_config = {"from_attributes": True}

    id: int
    user_id: int
    name: str
    address: Optional[str]
    created_at: datetime
    updated_at: datetime


class PropertyListResponse(BaseModel):
    properties: list[PropertyResponse]
    total: int


class UnitCreate(BaseModel):
    """Schema for adding a unit to a property"""

    unit_number: str = Field(..., min_length=1, max_length=50)


class UnitResponse(BaseModel):
    """Schema for unit response"""

    model_config = {"from_attributes": True}

    id: int
    property_id: int
    unit_number: str
    created_at: datetime


class UnitListResponse(BaseModel):
    units: list[UnitResponse]
    total: int
