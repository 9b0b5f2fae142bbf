"""
Maintenance log database model.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fleetflow.app.db.session import Base
from fleetflow.app.models.maintenance_enums import MaintenanceStatus


class MaintenanceLog(Base):
    """
    Maintenance or service record for a vehicle.

    ``completed_date`` is stamped when the status moves to Completed.
    """
    __tablename__ = "maintenance_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id', ondelete="CASCADE"), nullable=True, index=True)

    description = Column(String(1000), nullable=False)
    service_type = Column(String(255), nullable=True)
    status = Column(Enum(MaintenanceStatus), default=MaintenanceStatus.SCHEDULED, nullable=False, index=True)
    cost = Column(Float, default=0.0, nullable=False)

    scheduled_date = Column(Date, nullable=True)
    completed_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    vehicle = relationship("Vehicle", lazy="raise")

    def __repr__(self):
        return f"<MaintenanceLog(id={self.id}, vehicle_id={self.vehicle_id}, status='{self.status.value}')>"
