"""
Vehicle database model.

Vehicles are registered by fleet managers. Capacity is kept as free text
(e.g. "500 kg"); its numeric payload is parsed when a trip is dispatched.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum
from sqlalchemy.sql import func
from fleetflow.app.db.session import Base
from fleetflow.app.models.vehicle_enums import VehicleType, VehicleStatus


class Vehicle(Base):
    """Vehicle registry entry."""
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    plate_number = Column(String(50), unique=True, nullable=False, index=True)
    type = Column(Enum(VehicleType), nullable=False)
    status = Column(Enum(VehicleStatus), default=VehicleStatus.READY, nullable=False, index=True)
    model = Column(String(255), nullable=True)
    capacity = Column(String(100), nullable=True)
    odometer = Column(Integer, default=0, nullable=False)
    region = Column(String(100), default="North", nullable=False)
    acquisition_cost = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, plate='{self.plate_number}', status='{self.status.value}')>"
