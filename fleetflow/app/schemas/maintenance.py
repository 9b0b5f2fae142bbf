"""
Maintenance log schemas.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

from fleetflow.app.models.maintenance_enums import MaintenanceStatus


class MaintenanceLogCreate(BaseModel):
    """New logs always start as Scheduled."""
    vehicle_id: Optional[int] = None
    description: str = Field(..., min_length=1, max_length=1000)
    service_type: Optional[str] = Field(None, max_length=255)
    cost: float = Field(0.0, ge=0)
    scheduled_date: Optional[date] = None


class MaintenanceStatusUpdate(BaseModel):
    status: MaintenanceStatus


class MaintenanceLogResponse(BaseModel):
    id: int
    vehicle_id: Optional[int]
    vehicle_plate: Optional[str] = None
    description: str
    service_type: Optional[str]
    status: MaintenanceStatus
    cost: float
    scheduled_date: Optional[date]
    completed_date: Optional[date]
    created_at: datetime

    class Config:
        from_attributes = True


class MaintenanceCreateResponse(BaseModel):
    """
    Created log plus whether the follow-up vehicle update went through.

    The two writes are independent; a failed vehicle update leaves the log.
    """
    log: MaintenanceLogResponse
    vehicle_status_updated: bool


class MaintenanceKpis(BaseModel):
    total: int
    scheduled: int
    in_progress: int
    completed: int


class MaintenanceOverview(BaseModel):
    kpis: MaintenanceKpis
    logs: List[MaintenanceLogResponse]
