"""
Expense schemas.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
import datetime as dt

from fleetflow.app.schemas.trip import TripVehicleSummary


class ExpenseCreate(BaseModel):
    """
    Schema for logging fuel and misc spend against a completed trip.

    Vehicle and driver default to the trip's when omitted; date defaults to today.
    """
    trip_id: int
    vehicle_id: Optional[int] = None
    driver_name: Optional[str] = Field(None, max_length=255)
    fuel_liters: float = Field(0.0, ge=0)
    fuel_cost: float = Field(0.0, ge=0)
    misc_expense: float = Field(0.0, ge=0)
    date: Optional[dt.date] = None


class ExpenseResponse(BaseModel):
    id: int
    trip_id: int
    vehicle_id: Optional[int]
    driver_name: Optional[str]
    fuel_liters: float
    fuel_cost: float
    misc_expense: float
    date: dt.date
    created_at: dt.datetime

    class Config:
        from_attributes = True


class ExpenseTripOption(BaseModel):
    """Completed trip offered in the expense form."""
    id: int
    driver_name: Optional[str]
    distance_km: float
    vehicle: Optional[TripVehicleSummary] = None

    class Config:
        from_attributes = True


class VehicleOperationalCost(BaseModel):
    vehicle_id: int
    plate_number: str
    type: str
    fuel: float
    maintenance: float
    total: float


class ExpenseOverview(BaseModel):
    expenses: List[ExpenseResponse]
    vehicle_costs: List[VehicleOperationalCost]
