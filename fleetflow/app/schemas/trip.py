"""
Trip schemas.

Schemas for trip dispatch and visibility.
"""

from pydantic import BaseModel, Field, computed_field
from typing import List, Optional
from datetime import date, datetime

from fleetflow.app.models.driver import Driver
from fleetflow.app.models.driver_enums import DutyStatus
from fleetflow.app.models.trip_enums import TripStatus
from fleetflow.app.models.vehicle_enums import VehicleType, VehicleStatus
from fleetflow.app.services.dispatch import driver_lock_reason, parse_capacity


class TripCreate(BaseModel):
    """
    Schema for dispatching a new trip.

    ``driver_name`` is only used when no driver is referenced; otherwise the
    name is taken from the driver row.
    """
    driver_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    driver_name: Optional[str] = Field(None, max_length=255)
    status: TripStatus = TripStatus.DRAFT
    origin: str = Field("", max_length=255)
    destination: str = Field("", max_length=255)
    region: str = Field("North", min_length=1, max_length=100)
    cargo_weight: float = Field(0.0, ge=0, description="Cargo weight in kg")
    distance_km: float = Field(0.0, ge=0)
    revenue: float = Field(0.0, ge=0)
    estimated_fuel_cost: float = Field(0.0, ge=0)


class TripStatusUpdate(BaseModel):
    status: TripStatus


class TripVehicleSummary(BaseModel):
    id: int
    plate_number: str
    type: VehicleType
    capacity: Optional[str] = None

    class Config:
        from_attributes = True


class TripResponse(BaseModel):
    """Schema for trip response."""
    id: int
    driver_id: Optional[int]
    driver_name: Optional[str]
    vehicle_id: Optional[int]
    status: TripStatus
    origin: str
    destination: str
    region: str
    cargo_weight: float
    distance_km: float
    revenue: float
    estimated_fuel_cost: float
    created_at: datetime
    updated_at: datetime
    vehicle: Optional[TripVehicleSummary] = None

    class Config:
        from_attributes = True


class TripListResponse(BaseModel):
    trips: List[TripResponse]
    total: int


class DispatchVehicle(BaseModel):
    """A Ready vehicle offered in the dispatch form."""
    id: int
    plate_number: str
    type: VehicleType
    status: VehicleStatus
    capacity: Optional[str]

    @computed_field
    @property
    def capacity_kg(self) -> Optional[float]:
        return parse_capacity(self.capacity)

    class Config:
        from_attributes = True


class DispatchDriver(BaseModel):
    """A driver offered in the dispatch form; locked drivers are flagged."""
    id: int
    name: str
    license_expiry: date
    duty_status: DutyStatus
    is_locked: bool
    lock_reason: Optional[str] = None

    @classmethod
    def from_driver(cls, driver: Driver, today: date) -> "DispatchDriver":
        reason = driver_lock_reason(driver, today)
        return cls(
            id=driver.id,
            name=driver.name,
            license_expiry=driver.license_expiry,
            duty_status=driver.duty_status,
            is_locked=reason is not None,
            lock_reason=reason,
        )


class DispatchOptions(BaseModel):
    vehicles: List[DispatchVehicle]
    drivers: List[DispatchDriver]
