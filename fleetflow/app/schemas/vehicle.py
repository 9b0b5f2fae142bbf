"""
Vehicle Pydantic schemas.

Defines request and response models for the vehicle registry.
"""

from pydantic import BaseModel, Field, computed_field, field_validator
from datetime import datetime
from typing import Optional, List

from fleetflow.app.models.vehicle_enums import VehicleType, VehicleStatus
from fleetflow.app.services.dispatch import parse_capacity


class VehicleCreate(BaseModel):
    """Schema for registering a new vehicle."""
    plate_number: str = Field(..., min_length=1, max_length=50, description="Unique plate number")
    type: VehicleType
    status: VehicleStatus = VehicleStatus.READY
    model: Optional[str] = Field(None, max_length=255, description="Make and model, e.g. 2022 Ford Transit")
    capacity: Optional[str] = Field(None, max_length=100, description="Payload limit as free text, e.g. 500 kg")
    odometer: int = Field(0, ge=0)
    region: str = Field("North", min_length=1, max_length=100)
    acquisition_cost: float = Field(0.0, ge=0)

    @field_validator("plate_number")
    @classmethod
    def strip_plate_number(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Plate number is required")
        return v


class VehicleUpdate(BaseModel):
    """Schema for updating an existing vehicle (only provided fields change)."""
    plate_number: Optional[str] = Field(None, min_length=1, max_length=50)
    type: Optional[VehicleType] = None
    status: Optional[VehicleStatus] = None
    model: Optional[str] = Field(None, max_length=255)
    capacity: Optional[str] = Field(None, max_length=100)
    odometer: Optional[int] = Field(None, ge=0)
    region: Optional[str] = Field(None, min_length=1, max_length=100)
    acquisition_cost: Optional[float] = Field(None, ge=0)

    @field_validator("plate_number")
    @classmethod
    def strip_plate_number(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class VehicleStatusUpdate(BaseModel):
    status: VehicleStatus


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""
    id: int
    plate_number: str
    type: VehicleType
    status: VehicleStatus
    model: Optional[str]
    capacity: Optional[str]
    odometer: int
    region: str
    acquisition_cost: float
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def capacity_kg(self) -> Optional[float]:
        return parse_capacity(self.capacity)

    class Config:
        from_attributes = True


class VehicleRegistryKpis(BaseModel):
    total: int
    ready: int
    in_shop: int
    unavailable: int  # Out of Service + Retired


class VehicleRegistryResponse(BaseModel):
    """Vehicle registry page."""
    kpis: VehicleRegistryKpis
    vehicles: List[VehicleResponse]
