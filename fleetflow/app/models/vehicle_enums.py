"""
Vehicle-related enumerations.
"""

import enum


class VehicleType(str, enum.Enum):
    """Vehicle body type."""
    TRUCK = "Truck"
    VAN = "Van"
    MINI = "Mini"
    BIKE = "Bike"


class VehicleStatus(str, enum.Enum):
    """Vehicle availability status."""
    READY = "Ready"  # Idle, can be dispatched
    BUSY = "Busy"  # Reserved for a trip that has not left yet
    ON_TRIP = "On Trip"
    IN_SHOP = "In Shop"  # Under maintenance
    OUT_OF_SERVICE = "Out of Service"
    RETIRED = "Retired"
