"""
Driver Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, List

from fleetflow.app.models.driver import Driver
from fleetflow.app.models.driver_enums import DutyStatus
from fleetflow.app.services.dispatch import driver_lock_reason


class DriverCreate(BaseModel):
    """Schema for adding a driver. Performance scores start at 100/100/0."""
    name: str = Field(..., min_length=1, max_length=255)
    license_number: str = Field(..., min_length=1, max_length=100)
    license_expiry: date
    duty_status: DutyStatus = DutyStatus.ON_DUTY


class DriverUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    license_number: Optional[str] = Field(None, min_length=1, max_length=100)
    license_expiry: Optional[date] = None
    duty_status: Optional[DutyStatus] = None


class DriverStatusUpdate(BaseModel):
    duty_status: DutyStatus


class DriverResponse(BaseModel):
    """Driver profile with its current assignment lock."""
    id: int
    name: str
    license_number: str
    license_expiry: date
    duty_status: DutyStatus
    safety_score: float
    completion_rate: float
    complaints: int
    created_at: datetime
    is_locked: bool = False
    lock_reason: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_driver(cls, driver: Driver, today: date) -> "DriverResponse":
        reason = driver_lock_reason(driver, today)
        return cls.model_validate(driver).model_copy(
            update={"is_locked": reason is not None, "lock_reason": reason}
        )


class DriverListResponse(BaseModel):
    drivers: List[DriverResponse]
    total: int
