"""
Expense database model.

Fuel and miscellaneous spend logged against a completed trip.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey
from sqlalchemy.sql import func
from fleetflow.app.db.session import Base


class Expense(Base):
    """Expense model."""
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    trip_id = Column(Integer, ForeignKey('trips.id', ondelete="CASCADE"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id', ondelete="SET NULL"), nullable=True, index=True)
    driver_name = Column(String(255), nullable=True)  # Denormalized from the trip

    fuel_liters = Column(Float, default=0.0, nullable=False)
    fuel_cost = Column(Float, default=0.0, nullable=False)
    misc_expense = Column(Float, default=0.0, nullable=False)
    date = Column(Date, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<Expense(id={self.id}, trip_id={self.trip_id}, fuel_cost={self.fuel_cost})>"
