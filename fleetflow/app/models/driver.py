"""
Driver database model.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Enum
from sqlalchemy.sql import func
from fleetflow.app.db.session import Base
from fleetflow.app.models.driver_enums import DutyStatus


class Driver(Base):
    """
    Driver profile.

    A driver is locked from new trip assignment while the license is expired
    or the duty status is anything other than On Duty.
    """
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    license_number = Column(String(100), nullable=False)
    license_expiry = Column(Date, nullable=False)
    duty_status = Column(Enum(DutyStatus), default=DutyStatus.ON_DUTY, nullable=False)

    # Performance
    safety_score = Column(Float, default=100.0, nullable=False)
    completion_rate = Column(Float, default=100.0, nullable=False)
    complaints = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Driver(id={self.id}, name='{self.name}', duty_status='{self.duty_status.value}')>"
