"""
Trip database model.

Trips are created by dispatchers after the driver and cargo checks pass.
"""

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fleetflow.app.db.session import Base
from fleetflow.app.models.trip_enums import TripStatus


class Trip(Base):
    """
    Trip model.

    Driver and vehicle references are optional; deleting either leaves the
    trip in place with the reference cleared. ``driver_name`` is kept on the
    row so history survives a driver deletion.
    """
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    driver_id = Column(Integer, ForeignKey('drivers.id', ondelete="SET NULL"), nullable=True, index=True)
    driver_name = Column(String(255), nullable=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id', ondelete="SET NULL"), nullable=True, index=True)

    status = Column(Enum(TripStatus), default=TripStatus.DRAFT, nullable=False, index=True)

    origin = Column(String(255), default="", nullable=False)
    destination = Column(String(255), default="", nullable=False)
    region = Column(String(100), default="North", nullable=False)

    cargo_weight = Column(Float, default=0.0, nullable=False)  # kg
    distance_km = Column(Float, default=0.0, nullable=False)
    revenue = Column(Float, default=0.0, nullable=False)
    estimated_fuel_cost = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    vehicle = relationship("Vehicle", lazy="raise")

    def __repr__(self):
        return f"<Trip(id={self.id}, status='{self.status.value}', vehicle_id={self.vehicle_id})>"
