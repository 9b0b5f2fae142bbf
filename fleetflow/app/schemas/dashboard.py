"""
Command center and navigation schemas.
"""

from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from fleetflow.app.models.enums import UserRole
from fleetflow.app.models.trip_enums import TripStatus
from fleetflow.app.schemas.trip import DispatchDriver, TripVehicleSummary
from fleetflow.app.schemas.vehicle import VehicleResponse


class MenuItemResponse(BaseModel):
    section: str
    label: str
    path: str


class NavigationResponse(BaseModel):
    """Sidebar for the signed-in user."""
    role: UserRole
    display_name: str
    email: str
    menu: List[MenuItemResponse]


class CommandCenterKpis(BaseModel):
    active_fleet: int
    maintenance_alerts: int
    pending_cargo: int
    total_vehicles: int
    busy_vehicles: int
    idle_vehicles: int
    utilization_rate: int


class RecentTrip(BaseModel):
    id: int
    driver_name: Optional[str]
    status: TripStatus
    origin: str
    destination: str
    created_at: datetime
    vehicle: Optional[TripVehicleSummary] = None

    class Config:
        from_attributes = True


class CommandCenterResponse(BaseModel):
    kpis: CommandCenterKpis
    recent_trips: List[RecentTrip]
    available_vehicles: List[VehicleResponse]
    vehicles: List[VehicleResponse]
    drivers: List[DispatchDriver]
    navigation: NavigationResponse
