"""
Trip-related enumerations.
"""

import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    DRAFT = "Draft"  # Created by the dispatcher, not yet queued
    PENDING = "Pending"  # Waiting for cargo/assignment
    DISPATCHED = "Dispatched"
    ON_WAY = "On Way"
    ON_TRIP = "On Trip"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
