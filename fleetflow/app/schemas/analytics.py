"""
Analytics schemas for the financial reports page.
"""

from pydantic import BaseModel, Field
from typing import List


class FleetKpis(BaseModel):
    """Headline figures over all recorded data."""
    total_fuel_cost: float
    total_revenue: float
    fleet_roi: float = Field(..., description="Percent return on total acquisition cost")
    utilization_rate: float = Field(..., description="Percent of vehicles On Trip")


class MonthlyFinancials(BaseModel):
    month: int = Field(..., ge=1, le=12)
    name: str
    revenue: float
    expenses: float
    fuel_cost: float
    maintenance: float
    net_profit: float
    km: float
    liters: float
    efficiency: float = Field(..., description="km per liter")


class CostliestVehicle(BaseModel):
    vehicle_id: int
    plate_number: str
    cost: float


class FinancialReport(BaseModel):
    year: int
    kpis: FleetKpis
    monthly: List[MonthlyFinancials]
    top_costliest_vehicles: List[CostliestVehicle]
